"""Custom exception hierarchy for agtelemetry.

These exceptions never leave :class:`agtelemetry.client.TelemetryClient`.
They are raised by the lower layers and caught at component boundaries,
where they turn into ``None``/``False`` results plus an emitted event.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from agtelemetry.models.validation import ValidationResult


class AgtError(Exception):
    """Base exception for all agtelemetry errors."""


class AgtConfigError(AgtError):
    """Invalid or missing configuration."""


class AgtCommandError(AgtError):
    """An OS discovery command failed, timed out, or could not be started."""

    def __init__(self, message: str, *, command: str = "", returncode: int | None = None) -> None:
        self.command = command
        self.returncode = returncode
        super().__init__(message)


class AgtDiscoveryError(AgtError):
    """No language-server process with a usable CSRF token was found."""


class AgtPortExhaustionError(AgtError):
    """None of the candidate ports answered the capability probe."""


class AgtTransportError(AgtError):
    """HTTP-level failure (timeout, reset, non-200, oversized body)."""

    def __init__(
        self,
        message: str,
        *,
        port: int | None = None,
        endpoint: str = "",
        status_code: int | None = None,
    ) -> None:
        self.port = port
        self.endpoint = endpoint
        self.status_code = status_code
        super().__init__(message)


class AgtResponseTooLargeError(AgtTransportError):
    """The response body exceeded the configured byte ceiling."""


class AgtParseError(AgtTransportError):
    """The response body was not valid JSON."""


class AgtSchemaError(AgtError):
    """The payload was well-formed JSON but not the expected shape."""

    def __init__(self, message: str, *, result: ValidationResult | None = None) -> None:
        self.result = result
        super().__init__(message)
