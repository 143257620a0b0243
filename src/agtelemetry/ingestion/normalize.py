"""Normalization helpers.

Centralizes defensive parsing of values that come from subprocess output
or from the language server, both of which are treated as untrusted.
"""

from __future__ import annotations

import math
import re
from typing import Any

from agtelemetry._constants import (
    MAX_PID,
    MAX_PORT,
    MAX_TOKEN_LENGTH,
    MIN_PORT,
    MIN_TOKEN_LENGTH,
)

_TOKEN_RE = re.compile(rf"^[A-Fa-f0-9-]{{{MIN_TOKEN_LENGTH},{MAX_TOKEN_LENGTH}}}$")


def finite_number(value: Any) -> float | None:
    """Return *value* as a float when it is a real, finite JSON number.

    Strings and booleans are not numbers here, even when they parse.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    result = float(value)
    if not math.isfinite(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    """Parse an integer from an int or a plain digit string."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return int(text)
    return None


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def is_valid_pid(pid: Any) -> bool:
    """Return ``True`` for a positive integer no larger than the OS pid ceiling."""
    return isinstance(pid, int) and not isinstance(pid, bool) and 0 < pid <= MAX_PID


def is_valid_port(port: Any) -> bool:
    return isinstance(port, int) and not isinstance(port, bool) and MIN_PORT <= port <= MAX_PORT


def is_valid_token(token: Any) -> bool:
    """Return ``True`` when *token* is a hex/dash string of acceptable length."""
    return isinstance(token, str) and _TOKEN_RE.match(token) is not None


def mask_token(token: str | None) -> str:
    """Return a log-safe rendering of a CSRF token."""
    if not token:
        return "<none>"
    if len(token) <= 10:
        return "****"
    return f"{token[:4]}…{token[-4:]}"


def json_type_name(value: Any) -> str:
    """Name the JSON type of *value* the way a JSON consumer would."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__
