"""Schema validation result model."""

from __future__ import annotations

from agtelemetry.models._base import AgtBaseModel


class ValidationResult(AgtBaseModel):
    """Outcome of :func:`agtelemetry.ingestion.validate.validate_server_response`.

    Used for diagnostics only; a fresh instance is produced per fetch.
    """

    valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    received_keys: tuple[str, ...] = ()
