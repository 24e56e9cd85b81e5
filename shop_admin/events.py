import logging
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

VARIANT_DEFAULT = "default"
VARIANT_SUCCESS = "success"
VARIANT_DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Toast:
    title: str
    description: str = ""
    variant: str = VARIANT_DEFAULT


ToastHandler = Callable[[Toast], None]


class EventBus:
    """알림(토스트) 전달용 이벤트 버스. 세션마다 하나씩 만들어 명시적으로 넘깁니다."""

    def __init__(self):
        self._handlers: list[ToastHandler] = []

    def subscribe(self, handler: ToastHandler) -> Callable[[], None]:
        self._handlers.append(handler)

        def unsubscribe():
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def emit(self, toast: Toast) -> None:
        for handler in list(self._handlers):
            try:
                handler(toast)
            except Exception:
                logger.exception("Toast handler failed for %r", toast.title)

    def success(self, title: str, description: str = "") -> None:
        self.emit(Toast(title, description, VARIANT_SUCCESS))

    def info(self, title: str, description: str = "") -> None:
        self.emit(Toast(title, description, VARIANT_DEFAULT))

    def error(self, title: str, description: str = "") -> None:
        self.emit(Toast(title, description, VARIANT_DESTRUCTIVE))
