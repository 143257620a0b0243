"""agtelemetry - Async quota telemetry for the local AI-assistant language server."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("agtelemetry")
except PackageNotFoundError:
    __version__ = "0+local"

from agtelemetry.assessment import (
    assess_overall_readiness,
    assess_readiness,
    count_active_alerts,
    derive_alerts,
)
from agtelemetry.client import TelemetryClient
from agtelemetry.config import TelemetryConfig
from agtelemetry.exceptions import (
    AgtCommandError,
    AgtConfigError,
    AgtDiscoveryError,
    AgtError,
    AgtParseError,
    AgtPortExhaustionError,
    AgtResponseTooLargeError,
    AgtSchemaError,
    AgtTransportError,
)
from agtelemetry.ingestion.fuel import (
    assign_quota_pools,
    classify_system,
    format_designation,
    normalize_model_configs,
)
from agtelemetry.ingestion.validate import validate_server_response
from agtelemetry.models import (
    AlertThresholds,
    Credential,
    FuelSystem,
    ReadinessLevel,
    SystemClass,
    TelemetryAlert,
    TelemetrySnapshot,
    UplinkState,
    ValidationResult,
)
from agtelemetry.state import (
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

__all__ = [
    "__version__",
    "AgtCommandError",
    "AgtConfigError",
    "AgtDiscoveryError",
    "AgtError",
    "AgtParseError",
    "AgtPortExhaustionError",
    "AgtResponseTooLargeError",
    "AgtSchemaError",
    "AgtTransportError",
    "AlertThresholds",
    "ConsecutiveFailures",
    "Credential",
    "FailureReason",
    "FuelSystem",
    "ReadinessLevel",
    "ScanCompleted",
    "ScanPhase",
    "ScanStarted",
    "SystemClass",
    "TelemetryAlert",
    "TelemetryClient",
    "TelemetryConfig",
    "TelemetryErrorEvent",
    "TelemetryEvent",
    "TelemetryEventType",
    "TelemetryReceived",
    "TelemetrySnapshot",
    "UplinkEstablished",
    "UplinkLost",
    "UplinkState",
    "ValidationResult",
    "assess_overall_readiness",
    "assess_readiness",
    "assign_quota_pools",
    "classify_system",
    "count_active_alerts",
    "derive_alerts",
    "format_designation",
    "normalize_model_configs",
    "validate_server_response",
]
