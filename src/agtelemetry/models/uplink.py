"""Credential and uplink state models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agtelemetry._constants import MAX_PID, MAX_PORT, MIN_PORT, SIGNAL_FULL
from agtelemetry.ingestion.normalize import is_valid_token, mask_token
from agtelemetry.models._base import AgtBaseModel


class Credential(AgtBaseModel):
    """PID and CSRF token pair discovered on the language-server command line."""

    pid: int = Field(ge=1, le=MAX_PID, strict=True)
    token: str = Field(repr=False)

    @field_validator("token")
    @classmethod
    def _check_token(cls, value: str) -> str:
        if not is_valid_token(value):
            raise ValueError("token must be 6-256 hex/dash characters")
        return value

    @property
    def masked_token(self) -> str:
        return mask_token(self.token)


class UplinkState(BaseModel):
    """Mutable connection state owned by a single :class:`TelemetryClient`.

    Only the client mutates this model; callers receive copies from
    :meth:`TelemetryClient.get_uplink_state`.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    connected: bool = False
    port: int | None = Field(default=None, ge=MIN_PORT, le=MAX_PORT)
    token: str | None = Field(default=None, repr=False)
    last_contact_at: datetime | None = None
    signal_strength: int = Field(default=0, ge=0, le=SIGNAL_FULL)

    @property
    def is_usable(self) -> bool:
        """Connected with both a port and a token on hand."""
        return self.connected and self.port is not None and bool(self.token)
