from typing import Callable

from loguru import logger

from bearer_client.core.types import Unsubscribe
from bearer_client.schemas import AuthEvent

AuthEventListener = Callable[[AuthEvent], None]


class AuthEventBus:
    """
    In-memory publish/subscribe channel for authentication lifecycle events.

    Delivery is synchronous, in subscription order, and best-effort: a listener
    that raises is logged and skipped, the remaining listeners still run.
    Nothing is retained, a late subscriber does not see past events.

    Subscriptions live until removed. Listeners must not call back into the
    refresh coordinator.
    """

    def __init__(self):
        self._listeners: list[AuthEventListener] = []

    def subscribe(self, listener: AuthEventListener) -> Unsubscribe:
        """
        Register a listener.

        Args:
            listener: Called with every emitted event.

        Returns:
            Unsubscribe: Removes this listener; calling it again does nothing.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return unsubscribe

    def emit(self, event: AuthEvent) -> None:
        """
        Deliver an event to every current listener.
        """
        logger.debug(f"Auth event: {event.type}")

        # Listeners may unsubscribe during delivery
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Auth event listener {listener!r} failed on {event.type}")

    def clear(self) -> None:
        """Drop every listener."""
        self._listeners.clear()

    @property
    def listener_count(self) -> int:
        return len(self._listeners)
