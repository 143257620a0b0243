"""Event bus, event variants and failure governor."""

from agtelemetry.state.bus import EventBus, EventCallback
from agtelemetry.state.events import (
    ConsecutiveFailures,
    FailureReason,
    ScanCompleted,
    ScanPhase,
    ScanStarted,
    TelemetryErrorEvent,
    TelemetryEvent,
    TelemetryEventType,
    TelemetryReceived,
    UplinkEstablished,
    UplinkLost,
)
from agtelemetry.state.governor import FailureGovernor

__all__ = [
    "ConsecutiveFailures",
    "EventBus",
    "EventCallback",
    "FailureGovernor",
    "FailureReason",
    "ScanCompleted",
    "ScanPhase",
    "ScanStarted",
    "TelemetryErrorEvent",
    "TelemetryEvent",
    "TelemetryEventType",
    "TelemetryReceived",
    "UplinkEstablished",
    "UplinkLost",
]
