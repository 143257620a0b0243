"""OS capability interface and subprocess runner."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import re
from collections.abc import Sequence
from typing import Protocol

from agtelemetry.exceptions import AgtCommandError, AgtConfigError

_logger = logging.getLogger(__name__)

_PATTERN_RE = re.compile(r"^[A-Za-z0-9_.-]{1,64}$")


class SystemProbe(Protocol):
    """Structural interface over the OS discovery commands.

    Production code uses one of the per-OS implementations; tests pass
    doubles returning canned command output.
    """

    platform: str

    async def list_candidate_processes(self) -> str:
        ...

    async def list_listening_ports(self, pid: int) -> str:
        ...


def check_process_pattern(pattern: str) -> str:
    """Validate a process-name pattern before it is embedded in a command."""
    if not _PATTERN_RE.match(pattern):
        raise AgtConfigError(f"process pattern must match {_PATTERN_RE.pattern}, got {pattern!r}")
    return pattern


async def run_command(argv: Sequence[str], *, timeout: float) -> str:
    """Run *argv* without a shell and return its decoded stdout.

    The child is killed when *timeout* elapses.

    Raises
    ------
    AgtCommandError
        When the command cannot be started, times out, or exits non-zero.
    """
    command = argv[0] if argv else ""
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except (OSError, ValueError) as exc:
        raise AgtCommandError(f"Could not start {command}: {exc}", command=command) from exc

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except TimeoutError as exc:
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
        with contextlib.suppress(Exception):
            await proc.wait()
        raise AgtCommandError(f"{command} timed out after {timeout:.0f}s", command=command) from exc

    if proc.returncode != 0:
        detail = stderr.decode("utf-8", errors="replace").strip()[:200]
        raise AgtCommandError(
            f"{command} exited with code {proc.returncode}: {detail}",
            command=command,
            returncode=proc.returncode,
        )

    output = stdout.decode("utf-8", errors="replace")
    _logger.debug("%s returned %d bytes", command, len(output))
    return output


def filter_process_lines(output: str, pattern: str) -> str:
    """Keep process-list lines mentioning *pattern* (case-insensitive)."""
    needle = pattern.lower()
    lines = [line for line in output.splitlines() if needle in line.lower()]
    return "\n".join(lines)
