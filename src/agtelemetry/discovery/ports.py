"""Frequency scanner: candidate listening ports for a pid."""

from __future__ import annotations

import logging

from agtelemetry._constants import MAX_CANDIDATE_PORTS
from agtelemetry._system.base import SystemProbe
from agtelemetry.exceptions import AgtCommandError
from agtelemetry.ingestion.normalize import is_valid_pid, is_valid_port

_logger = logging.getLogger(__name__)


def parse_port_lines(output: str) -> list[int]:
    """Parse whitespace-separated port numbers.

    Malformed and out-of-range tokens are dropped. The result is
    deduplicated, sorted ascending and capped at 32 entries.
    """
    ports: set[int] = set()
    for token in output.split():
        if not (token.isascii() and token.isdigit()) or len(token) > 5:
            continue
        port = int(token)
        if is_valid_port(port):
            ports.add(port)
    return sorted(ports)[:MAX_CANDIDATE_PORTS]


async def scan_frequencies(system: SystemProbe, pid: int) -> list[int]:
    """List candidate ports *pid* is listening on; ``[]`` on any failure."""
    if not is_valid_pid(pid):
        _logger.debug("Refusing to scan ports for invalid pid %r", pid)
        return []
    try:
        output = await system.list_listening_ports(pid)
    except AgtCommandError as exc:
        _logger.debug("Port discovery for pid %d failed: %s", pid, exc)
        return []
    ports = parse_port_lines(output)
    _logger.debug("Candidate ports for pid %d: %s", pid, ports)
    return ports
