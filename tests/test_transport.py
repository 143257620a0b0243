from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from agtelemetry._api.probe import probe_frequency
from agtelemetry._api.user_status import fetch_user_status
from agtelemetry._constants import (
    FETCH_MAX_BYTES,
    FETCH_TIMEOUT,
    PROBE_ENDPOINT,
    PROBE_MAX_BYTES,
    PROBE_TIMEOUT,
    USER_STATUS_ENDPOINT,
)
from agtelemetry._transport import build_headers, decode_json, read_capped
from agtelemetry.discovery.prober import find_active_port
from agtelemetry.exceptions import AgtParseError, AgtResponseTooLargeError, AgtTransportError

TOKEN = "0123456789abcdef-0123"


@dataclass
class _FakeTransport:
    responses: dict[int, bytes | Exception] = field(default_factory=dict)
    calls: list[dict[str, Any]] = field(default_factory=list)

    async def post_json(
        self,
        port: int,
        endpoint: str,
        token: str,
        payload: Any,
        *,
        timeout: float,
        max_bytes: int,
    ) -> bytes:
        self.calls.append(
            {
                "port": port,
                "endpoint": endpoint,
                "token": token,
                "payload": payload,
                "timeout": timeout,
                "max_bytes": max_bytes,
            }
        )
        outcome = self.responses.get(port, AgtTransportError("connection refused", port=port))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class _FakeContent:
    def __init__(self, chunks: list[bytes]) -> None:
        self._chunks = chunks

    async def iter_chunked(self, _size: int):  # type: ignore[no-untyped-def]
        for chunk in self._chunks:
            yield chunk


class _FakeResponse:
    def __init__(self, chunks: list[bytes], content_length: int | None = None) -> None:
        self.status = 200
        self.content_length = content_length
        self.content = _FakeContent(chunks)
        self.closed = False

    def close(self) -> None:
        self.closed = True


def test_headers_carry_token_and_protocol_version() -> None:
    headers = build_headers(TOKEN)

    assert headers["Content-Type"] == "application/json"
    assert headers["Connect-Protocol-Version"] == "1"
    assert headers["X-Codeium-Csrf-Token"] == TOKEN


@pytest.mark.asyncio
async def test_read_capped_returns_body_within_limit() -> None:
    resp = _FakeResponse([b'{"a"', b": 1}"])

    assert await read_capped(resp, 64) == b'{"a": 1}'
    assert resp.closed is False


@pytest.mark.asyncio
async def test_read_capped_aborts_when_streamed_body_exceeds_limit() -> None:
    resp = _FakeResponse([b"x" * 40, b"x" * 40])

    with pytest.raises(AgtResponseTooLargeError):
        await read_capped(resp, 64, port=42100, endpoint=PROBE_ENDPOINT)
    assert resp.closed is True


@pytest.mark.asyncio
async def test_read_capped_rejects_declared_oversize_before_reading() -> None:
    resp = _FakeResponse([], content_length=FETCH_MAX_BYTES + 1)

    with pytest.raises(AgtResponseTooLargeError) as exc_info:
        await read_capped(resp, FETCH_MAX_BYTES)
    assert resp.closed is True
    assert isinstance(exc_info.value, AgtTransportError)


def test_decode_json_rejects_malformed_body() -> None:
    with pytest.raises(AgtParseError):
        decode_json(b"{not json", endpoint=USER_STATUS_ENDPOINT)
    with pytest.raises(AgtParseError):
        decode_json(b"\xff\xfe")


@pytest.mark.asyncio
async def test_probe_uses_probe_endpoint_and_limits() -> None:
    transport = _FakeTransport(responses={42100: b"{}"})

    assert await probe_frequency(transport, 42100, TOKEN, ide_name="antigravity") is True

    call = transport.calls[0]
    assert call["endpoint"] == PROBE_ENDPOINT
    assert call["timeout"] == PROBE_TIMEOUT
    assert call["max_bytes"] == PROBE_MAX_BYTES
    assert call["payload"] == {"context": {"properties": {"ide": "antigravity"}}}


@pytest.mark.asyncio
async def test_probe_failure_is_false() -> None:
    transport = _FakeTransport(responses={42100: AgtResponseTooLargeError("too big", port=42100)})

    assert await probe_frequency(transport, 42100, TOKEN) is False


@pytest.mark.asyncio
@pytest.mark.parametrize(("port", "token"), [(0, TOKEN), (70000, TOKEN), (42100, "not-a-token!"), (42100, "ab")])
async def test_probe_revalidates_inputs_without_sending(port: int, token: str) -> None:
    transport = _FakeTransport(responses={42100: b"{}"})

    assert await probe_frequency(transport, port, token) is False
    assert transport.calls == []


@pytest.mark.asyncio
async def test_find_active_port_probes_ascending_and_stops_at_first_success() -> None:
    transport = _FakeTransport(responses={42102: b"{}", 42103: b"{}"})

    port = await find_active_port(transport, [42103, 42101, 42102, 42101], TOKEN)

    assert port == 42102
    assert [call["port"] for call in transport.calls] == [42101, 42102]


@pytest.mark.asyncio
async def test_find_active_port_none_when_nothing_answers() -> None:
    transport = _FakeTransport()

    assert await find_active_port(transport, [1, 2], TOKEN) is None
    assert await find_active_port(transport, [], TOKEN) is None


@pytest.mark.asyncio
async def test_fetch_user_status_parses_json() -> None:
    transport = _FakeTransport(responses={42100: b'{"userStatus": {}}'})

    data = await fetch_user_status(transport, 42100, TOKEN, ide_name="antigravity")

    assert data == {"userStatus": {}}
    call = transport.calls[0]
    assert call["endpoint"] == USER_STATUS_ENDPOINT
    assert call["timeout"] == FETCH_TIMEOUT
    assert call["max_bytes"] == FETCH_MAX_BYTES
    assert call["payload"] == {"metadata": {"ideName": "antigravity"}}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "outcome",
    [
        b"<html>oops</html>",
        AgtTransportError("HTTP 500 from GetUserStatus", status_code=500),
        AgtResponseTooLargeError("body exceeded 1048576 bytes"),
    ],
)
async def test_fetch_user_status_failures_are_none(outcome: bytes | Exception) -> None:
    transport = _FakeTransport(responses={42100: outcome})

    assert await fetch_user_status(transport, 42100, TOKEN) is None
