"""Capability probe endpoint (``GetUnleashData``)."""

from __future__ import annotations

import logging
from typing import Any

from agtelemetry._constants import DEFAULT_IDE_NAME, PROBE_ENDPOINT, PROBE_MAX_BYTES, PROBE_TIMEOUT
from agtelemetry._transport import Transport
from agtelemetry.exceptions import AgtTransportError
from agtelemetry.ingestion.normalize import is_valid_port, is_valid_token

_logger = logging.getLogger(__name__)


def build_probe_payload(ide_name: str = DEFAULT_IDE_NAME) -> dict[str, Any]:
    return {"context": {"properties": {"ide": ide_name}}}


async def probe_frequency(
    transport: Transport,
    port: int,
    token: str,
    *,
    ide_name: str = DEFAULT_IDE_NAME,
) -> bool:
    """Return ``True`` when *port* answers the probe with HTTP 200 within 64 KiB."""
    if not is_valid_port(port) or not is_valid_token(token):
        _logger.debug("Refusing to probe port %r with an invalid port or token", port)
        return False
    try:
        await transport.post_json(
            port,
            PROBE_ENDPOINT,
            token,
            build_probe_payload(ide_name),
            timeout=PROBE_TIMEOUT,
            max_bytes=PROBE_MAX_BYTES,
        )
    except AgtTransportError as exc:
        _logger.debug("Probe on port %d failed: %s", port, exc)
        return False
    return True
