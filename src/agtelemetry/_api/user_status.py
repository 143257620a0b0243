"""Telemetry endpoint (``GetUserStatus``)."""

from __future__ import annotations

import logging
from typing import Any

from agtelemetry._constants import (
    DEFAULT_IDE_NAME,
    FETCH_MAX_BYTES,
    FETCH_TIMEOUT,
    USER_STATUS_ENDPOINT,
)
from agtelemetry._transport import Transport, decode_json
from agtelemetry.exceptions import AgtTransportError
from agtelemetry.ingestion.normalize import is_valid_port, is_valid_token

_logger = logging.getLogger(__name__)


def build_user_status_payload(ide_name: str = DEFAULT_IDE_NAME) -> dict[str, Any]:
    return {"metadata": {"ideName": ide_name}}


async def fetch_user_status(
    transport: Transport,
    port: int,
    token: str,
    *,
    ide_name: str = DEFAULT_IDE_NAME,
) -> Any | None:
    """Fetch and parse the user-status payload.

    Returns ``None`` on network errors, timeouts, non-200 responses,
    bodies over 1 MiB and malformed JSON. The caller tracks ``None`` as
    a failure.
    """
    if not is_valid_port(port) or not is_valid_token(token):
        _logger.debug("Refusing to fetch from port %r with an invalid port or token", port)
        return None
    try:
        body = await transport.post_json(
            port,
            USER_STATUS_ENDPOINT,
            token,
            build_user_status_payload(ide_name),
            timeout=FETCH_TIMEOUT,
            max_bytes=FETCH_MAX_BYTES,
        )
        data = decode_json(body, port=port, endpoint=USER_STATUS_ENDPOINT)
    except AgtTransportError as exc:
        _logger.debug("GetUserStatus on port %d failed: %s", port, exc)
        return None
    _logger.debug("GetUserStatus returned %d bytes", len(body))
    return data
