"""OS process and socket discovery behind a small capability interface."""

from __future__ import annotations

import sys

from agtelemetry._constants import DEFAULT_PROCESS_PATTERN
from agtelemetry._system.base import SystemProbe, run_command
from agtelemetry._system.unix import DarwinSystemProbe, LinuxSystemProbe
from agtelemetry._system.windows import WindowsSystemProbe


def system_probe_for_platform(
    platform: str | None = None,
    *,
    process_pattern: str = DEFAULT_PROCESS_PATTERN,
) -> SystemProbe:
    """Return the discovery implementation for *platform* (default: ``sys.platform``).

    Unknown Unix flavours use the Linux commands.
    """
    name = platform or sys.platform
    if name.startswith("win"):
        return WindowsSystemProbe(process_pattern)
    if name == "darwin":
        return DarwinSystemProbe(process_pattern)
    return LinuxSystemProbe(process_pattern)


__all__ = [
    "DarwinSystemProbe",
    "LinuxSystemProbe",
    "SystemProbe",
    "WindowsSystemProbe",
    "run_command",
    "system_probe_for_platform",
]
