"""Periodic scan scheduling."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from agtelemetry.config import normalize_scan_interval

_logger = logging.getLogger(__name__)


class PeriodicScanner:
    """Runs *scan* every *interval* seconds on a single background task.

    The loop awaits each scan before sleeping again, so scans never
    overlap. :meth:`start` always replaces the previous schedule.
    """

    def __init__(self, scan: Callable[[], Awaitable[Any]]) -> None:
        self._scan = scan
        self._task: asyncio.Task[None] | None = None
        self._interval: float | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def interval(self) -> float | None:
        return self._interval

    def start(self, interval_seconds: Any) -> float:
        """(Re)start the schedule and return the effective interval.

        Raises
        ------
        RuntimeError
            When called without a running event loop.
        """
        interval = normalize_scan_interval(interval_seconds)
        loop = asyncio.get_running_loop()
        self.stop()
        self._interval = interval
        self._task = loop.create_task(self._run(interval), name="agtelemetry-periodic-scan")
        _logger.debug("Periodic scans every %.0fs", interval)
        return interval

    def stop(self) -> None:
        """Cancel the timer. A scan already in progress is left to finish on its own."""
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()

    async def _run(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                await self._scan()
            except asyncio.CancelledError:
                raise
            except Exception:
                _logger.debug("Scheduled scan failed", exc_info=True)
