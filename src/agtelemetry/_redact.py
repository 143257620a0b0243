"""Helpers for safe debug logging and diagnostics.

agtelemetry handles a CSRF token lifted from another process's command
line and relays payloads from a local server that may contain account
details. This module redacts sensitive fields and caps sizes before
anything is logged or handed out through diagnostics.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_SENSITIVE_VALUE_KEYS: frozenset[str] = frozenset(
    {
        "token",
        "csrftoken",
        "xcodeiumcsrftoken",
        "securitytoken",
        "apikey",
        "authorization",
        "cookie",
        "email",
        "password",
    }
)


def _normalize_key(key: str) -> str:
    return key.lower().replace("-", "").replace("_", "")


def redact_for_log(
    value: Any,
    *,
    max_string: int = 512,
    max_items: int = 50,
    _depth: int = 0,
) -> Any:
    """Return a redacted, size-capped copy of *value* suitable for logs."""
    if _depth > 20:
        return "<max-depth>"

    if value is None:
        return None

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, bytes):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for index, (k, v) in enumerate(value.items()):
            if index >= max_items:
                redacted["<truncated>"] = f"{len(value) - max_items} more keys"
                break
            key = str(k)
            if _normalize_key(key) in _SENSITIVE_VALUE_KEYS:
                redacted[key] = "<redacted>"
            else:
                redacted[key] = redact_for_log(v, max_string=max_string, max_items=max_items, _depth=_depth + 1)
        return redacted

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        items = [
            redact_for_log(v, max_string=max_string, max_items=max_items, _depth=_depth + 1)
            for v in list(value)[:max_items]
        ]
        if len(value) > max_items:
            items.append(f"<{len(value) - max_items} more items>")
        return items

    # Fallback: represent unknown objects without dumping internals.
    return repr(value)[:max_string]
