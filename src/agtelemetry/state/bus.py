"""In-process pub/sub for telemetry events."""

from __future__ import annotations

import logging
from collections.abc import Callable

from agtelemetry.state.events import TelemetryEvent

_logger = logging.getLogger(__name__)

EventCallback = Callable[[TelemetryEvent], None]


class EventBus:
    """Synchronous fan-out of :data:`TelemetryEvent` variants.

    A failing subscriber is logged and skipped; it never affects the
    emitter or other subscribers.
    """

    def __init__(self) -> None:
        self._subscribers: list[EventCallback] = []

    def subscribe(self, callback: EventCallback) -> Callable[[], None]:
        """Register *callback* and return a handle that unregisters it."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def emit(self, event: TelemetryEvent) -> None:
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                _logger.debug("Subscriber failed on %s event", event.type, exc_info=True)

    def clear(self) -> None:
        self._subscribers.clear()

    def __len__(self) -> int:
        return len(self._subscribers)
