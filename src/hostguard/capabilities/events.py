"""In-process event bus used as the local EventsCapability."""

from typing import Any

from loguru import logger

from hostguard.capabilities.base import EventHandler, EventsCapability


class LocalEventBus(EventsCapability):
    """Synchronous fan-out to every subscribed handler, in subscription order."""

    def __init__(self) -> None:
        self._handlers: list[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> None:
        if not callable(handler):
            raise TypeError(f"Event handler must be callable, got {type(handler).__name__}")
        self._handlers.append(handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        """Remove one registration of ``handler``; unknown handlers are ignored."""
        if handler in self._handlers:
            self._handlers.remove(handler)

    def publish(self, payload: Any) -> None:
        """Deliver ``payload`` to each handler; one failing handler does not stop the rest."""
        for handler in list(self._handlers):
            try:
                handler(payload)
            except Exception:
                logger.exception("event_handler_failed handler={}", getattr(handler, "__name__", handler))

    @property
    def handler_count(self) -> int:
        return len(self._handlers)
