from __future__ import annotations

import asyncio

import pytest

from agtelemetry import _scheduler
from agtelemetry._scheduler import PeriodicScanner


@pytest.fixture
def _fast_intervals(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(_scheduler, "normalize_scan_interval", lambda _value: 0.01)


@pytest.mark.asyncio
@pytest.mark.usefixtures("_fast_intervals")
async def test_scans_repeat_until_stopped() -> None:
    done = asyncio.Event()
    calls = 0

    async def _scan() -> None:
        nonlocal calls
        calls += 1
        if calls == 3:
            done.set()

    scanner = PeriodicScanner(_scan)
    assert scanner.start(90) == 0.01
    await asyncio.wait_for(done.wait(), timeout=2)
    scanner.stop()

    assert calls >= 3
    assert scanner.is_running is False


@pytest.mark.asyncio
@pytest.mark.usefixtures("_fast_intervals")
async def test_failing_scan_keeps_the_schedule_alive() -> None:
    done = asyncio.Event()
    calls = 0

    async def _scan() -> None:
        nonlocal calls
        calls += 1
        if calls == 2:
            done.set()
        raise RuntimeError("scan failed")

    scanner = PeriodicScanner(_scan)
    scanner.start(90)
    await asyncio.wait_for(done.wait(), timeout=2)
    scanner.stop()

    assert calls >= 2


@pytest.mark.asyncio
async def test_restart_replaces_previous_schedule() -> None:
    async def _scan() -> None:
        return None

    scanner = PeriodicScanner(_scan)
    scanner.start(60)
    first = scanner._task
    scanner.start(45)
    await asyncio.sleep(0)

    assert first is not None and first.cancelled()
    assert scanner.interval == 45
    assert scanner.is_running
    scanner.stop()


def test_start_without_loop_raises() -> None:
    async def _scan() -> None:
        return None

    scanner = PeriodicScanner(_scan)

    with pytest.raises(RuntimeError):
        scanner.start(60)
    assert scanner.interval is None
