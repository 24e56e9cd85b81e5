class ShopAdminError(Exception):
    """Base error for the shop admin dashboard."""


class RecordNotFound(ShopAdminError):
    """The local record has no confirmed Firestore document yet."""

    def __init__(self, label: str, key):
        super().__init__(f"{label} not found")
        self.label = label
        self.key = key


class AuthError(ShopAdminError):
    pass


class ImportFormatError(ShopAdminError):
    pass
