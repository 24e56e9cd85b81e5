from dataclasses import dataclass, field

from .auth import AuthService
from .events import EventBus
from .sync import AdvanceOrderSync, OrderSync, ShopSync


@dataclass
class AppState:
    """세션 단위 상태 묶음. 전역 대신 이 객체를 넘겨 씁니다."""

    db: object
    auth: AuthService
    bus: EventBus = field(default_factory=EventBus)
    shops: ShopSync = None
    orders: OrderSync = None
    advance_orders: AdvanceOrderSync = None

    def __post_init__(self):
        if self.shops is None:
            self.shops = ShopSync(self.db, self.bus)
        if self.orders is None:
            self.orders = OrderSync(self.db, self.bus)
        if self.advance_orders is None:
            self.advance_orders = AdvanceOrderSync(self.db, self.bus)

    @classmethod
    def create(cls, db, api_key: str | None = None, session=None) -> "AppState":
        return cls(db=db, auth=AuthService(db, api_key=api_key, session=session))

    @property
    def user(self):
        return self.auth.user

    @property
    def can_write(self) -> bool:
        return self.user is not None and self.user.is_admin

    def syncs(self):
        return (self.shops, self.orders, self.advance_orders)

    def start(self) -> None:
        for sync in self.syncs():
            sync.subscribe()

    def stop(self) -> None:
        for sync in self.syncs():
            sync.unsubscribe()
