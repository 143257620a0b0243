"""Consecutive-failure tracking."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from agtelemetry._constants import CONSECUTIVE_FAILURE_THRESHOLD
from agtelemetry.models._base import utcnow
from agtelemetry.state.bus import EventBus
from agtelemetry.state.events import ConsecutiveFailures, FailureReason, TelemetryErrorEvent

_logger = logging.getLogger(__name__)


class FailureGovernor:
    """Counts consecutive acquisition failures.

    Every failure emits an ``error`` event. When the counter reaches
    *threshold* exactly, a single ``consecutive-failures`` event follows;
    further failures do not repeat it until the counter is reset by a
    success or by :meth:`reset`.
    """

    def __init__(
        self,
        bus: EventBus,
        threshold: int = CONSECUTIVE_FAILURE_THRESHOLD,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._bus = bus
        self._clock = clock
        self._threshold = threshold
        self._count = 0
        self._last_reason: FailureReason | None = None

    @property
    def consecutive_failures(self) -> int:
        return self._count

    @property
    def last_reason(self) -> FailureReason | None:
        return self._last_reason

    @property
    def threshold(self) -> int:
        return self._threshold

    def track(self, reason: FailureReason, message: str = "") -> None:
        self._count += 1
        self._last_reason = reason
        _logger.debug("Acquisition failure #%d (%s) %s", self._count, reason, message)
        self._bus.emit(TelemetryErrorEvent(reason=reason, message=message, timestamp=self._clock()))
        if self._count == self._threshold:
            _logger.warning("%d consecutive telemetry failures (last: %s)", self._count, reason)
            self._bus.emit(ConsecutiveFailures(failure_count=self._count, reason=reason, timestamp=self._clock()))

    def record_success(self) -> None:
        self._count = 0
        self._last_reason = None

    def reset(self) -> None:
        """Manual reset, e.g. before a user-triggered retry."""
        self.record_success()
