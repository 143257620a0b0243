"""HTTPS transport to the loopback language server.

TLS certificate verification is disabled for these requests. The
threat model:

* the peer is always ``127.0.0.1``; nothing is resolved through DNS and
  no request leaves the machine,
* the language server presents a self-signed certificate that no trust
  store would accept,
* authenticity is asserted by the CSRF token, which is only readable
  from the server process's own command line. A local attacker able to
  read it or to bind a loopback port already runs code as the user.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from agtelemetry._constants import CONNECT_PROTOCOL_VERSION, CSRF_HEADER, LOOPBACK_HOST
from agtelemetry.exceptions import AgtParseError, AgtResponseTooLargeError, AgtTransportError

_logger = logging.getLogger(__name__)

_CHUNK_SIZE = 16 * 1024


class Transport(Protocol):
    """Structural transport interface used by the endpoint modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`LoopbackTransport`) concrete.
    """

    async def post_json(
        self,
        port: int,
        endpoint: str,
        token: str,
        payload: Mapping[str, Any],
        *,
        timeout: float,
        max_bytes: int,
    ) -> bytes:
        ...


def build_headers(token: str) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Connect-Protocol-Version": CONNECT_PROTOCOL_VERSION,
        CSRF_HEADER: token,
    }


async def read_capped(resp: Any, max_bytes: int, *, port: int | None = None, endpoint: str = "") -> bytes:
    """Read a response body, aborting the connection past *max_bytes*."""
    declared = resp.content_length
    if declared is not None and declared > max_bytes:
        resp.close()
        raise AgtResponseTooLargeError(
            f"{endpoint} declared {declared} bytes (limit {max_bytes})",
            port=port,
            endpoint=endpoint,
            status_code=resp.status,
        )

    buffer = bytearray()
    async for chunk in resp.content.iter_chunked(_CHUNK_SIZE):
        buffer.extend(chunk)
        if len(buffer) > max_bytes:
            resp.close()
            raise AgtResponseTooLargeError(
                f"{endpoint} body exceeded {max_bytes} bytes",
                port=port,
                endpoint=endpoint,
                status_code=resp.status,
            )
    return bytes(buffer)


def decode_json(body: bytes, *, port: int | None = None, endpoint: str = "") -> Any:
    """Parse a JSON body.

    Raises
    ------
    AgtParseError
        When *body* is not UTF-8 JSON.
    """
    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise AgtParseError(
            f"Invalid JSON from {endpoint}: {body[:64]!r}",
            port=port,
            endpoint=endpoint,
        ) from exc


class LoopbackTransport:
    """POSTs JSON to ``https://127.0.0.1:<port>`` with the CSRF header."""

    def __init__(self, http_session: aiohttp.ClientSession) -> None:
        self._http = http_session

    async def post_json(
        self,
        port: int,
        endpoint: str,
        token: str,
        payload: Mapping[str, Any],
        *,
        timeout: float,
        max_bytes: int,
    ) -> bytes:
        """Send one request and return the raw body of a 200 response.

        Raises
        ------
        AgtTransportError
            On connection errors, timeouts, non-200 status codes and
            bodies larger than *max_bytes*.
        """
        url = f"https://{LOOPBACK_HOST}:{port}{endpoint}"
        body = json.dumps(payload, separators=(",", ":"))

        _logger.debug("POST %s", url)

        try:
            async with self._http.post(
                url,
                data=body,
                headers=build_headers(token),
                ssl=False,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as resp:
                if resp.status != 200:
                    raise AgtTransportError(
                        f"HTTP {resp.status} from {endpoint}",
                        port=port,
                        endpoint=endpoint,
                        status_code=resp.status,
                    )
                return await read_capped(resp, max_bytes, port=port, endpoint=endpoint)
        except AgtTransportError:
            raise
        except TimeoutError as exc:
            raise AgtTransportError(
                f"Request to {endpoint} on port {port} timed out after {timeout:.0f}s",
                port=port,
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise AgtTransportError(
                f"Request to {endpoint} on port {port} failed: {exc}",
                port=port,
                endpoint=endpoint,
            ) from exc
