"""Typed telemetry events.

Every event is one variant of a closed, tagged set. Subscribers can
``match`` on the class or switch on :attr:`type`.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from agtelemetry.models.fuel import ReadinessLevel, TelemetrySnapshot


class TelemetryEventType(StrEnum):
    UPLINK_ESTABLISHED = "uplink-established"
    UPLINK_LOST = "uplink-lost"
    TELEMETRY_RECEIVED = "telemetry-received"
    SCAN_STARTED = "scan-started"
    SCAN_COMPLETED = "scan-completed"
    ERROR = "error"
    CONSECUTIVE_FAILURES = "consecutive-failures"


class FailureReason(StrEnum):
    UPLINK_FAILED = "uplink-failed"
    NO_RESPONSE = "no-response"
    SCHEMA_INVALID = "schema-invalid"
    EXCEPTION = "exception"


class ScanPhase(StrEnum):
    ESTABLISH = "establish"
    ACQUIRE = "acquire"


class _EventBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("timestamp")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class UplinkEstablished(_EventBase):
    type: Literal[TelemetryEventType.UPLINK_ESTABLISHED] = TelemetryEventType.UPLINK_ESTABLISHED
    port: int


class UplinkLost(_EventBase):
    type: Literal[TelemetryEventType.UPLINK_LOST] = TelemetryEventType.UPLINK_LOST
    reason: str = ""


class TelemetryReceived(_EventBase):
    type: Literal[TelemetryEventType.TELEMETRY_RECEIVED] = TelemetryEventType.TELEMETRY_RECEIVED
    snapshot: TelemetrySnapshot


class ScanStarted(_EventBase):
    type: Literal[TelemetryEventType.SCAN_STARTED] = TelemetryEventType.SCAN_STARTED
    phase: ScanPhase


class ScanCompleted(_EventBase):
    type: Literal[TelemetryEventType.SCAN_COMPLETED] = TelemetryEventType.SCAN_COMPLETED
    system_count: int
    overall_readiness: ReadinessLevel


class TelemetryErrorEvent(_EventBase):
    type: Literal[TelemetryEventType.ERROR] = TelemetryEventType.ERROR
    reason: FailureReason
    message: str = ""


class ConsecutiveFailures(_EventBase):
    """Emitted once when the failure counter reaches the threshold."""

    type: Literal[TelemetryEventType.CONSECUTIVE_FAILURES] = TelemetryEventType.CONSECUTIVE_FAILURES
    failure_count: int
    reason: FailureReason


TelemetryEvent = Annotated[
    UplinkEstablished
    | UplinkLost
    | TelemetryReceived
    | ScanStarted
    | ScanCompleted
    | TelemetryErrorEvent
    | ConsecutiveFailures,
    Field(discriminator="type"),
]

TELEMETRY_EVENT_ADAPTER: TypeAdapter[TelemetryEvent] = TypeAdapter(TelemetryEvent)
