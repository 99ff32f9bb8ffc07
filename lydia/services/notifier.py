from typing import Callable, List, Sequence

import structlog

from lydia.schemas.cart import LineItem

logger = structlog.get_logger()

CartListener = Callable[[List[LineItem]], None]


class ChangeNotifier:
    """
    Explicit observer registry for "cart changed" events.

    Listeners receive the normalized line items only; they look up prices
    themselves. With no listeners attached the event is dropped.
    """

    def __init__(self):
        self._listeners: List[CartListener] = []

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        if listener not in self._listeners:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            self.unsubscribe(listener)

        return unsubscribe

    def unsubscribe(self, listener: CartListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def publish(self, items: Sequence[LineItem]) -> None:
        for listener in list(self._listeners):
            try:
                listener(list(items))
            except Exception:
                # One broken surface must not block the others or the mutation.
                logger.exception(
                    "cart_listener_failed",
                    listener=getattr(listener, "__name__", repr(listener)),
                )
