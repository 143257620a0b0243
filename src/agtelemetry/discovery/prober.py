"""Frequency prober: pick the candidate port that speaks the protocol."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from agtelemetry._api.probe import probe_frequency
from agtelemetry._constants import DEFAULT_IDE_NAME
from agtelemetry._transport import Transport

_logger = logging.getLogger(__name__)


async def find_active_port(
    transport: Transport,
    ports: Iterable[int],
    token: str,
    *,
    ide_name: str = DEFAULT_IDE_NAME,
) -> int | None:
    """Probe *ports* in ascending order and return the first that answers."""
    for port in sorted(set(ports)):
        if await probe_frequency(transport, port, token, ide_name=ide_name):
            _logger.debug("Port %d answered the capability probe", port)
            return port
    return None
