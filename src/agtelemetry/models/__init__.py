"""Data models for agtelemetry."""

from agtelemetry.models._base import AgtBaseModel, AgtEnum, utcnow
from agtelemetry.models.alerts import TelemetryAlert
from agtelemetry.models.fuel import FuelSystem, ReadinessLevel, SystemClass, TelemetrySnapshot
from agtelemetry.models.thresholds import AlertThresholds, is_valid_alert_thresholds
from agtelemetry.models.uplink import Credential, UplinkState
from agtelemetry.models.validation import ValidationResult

__all__ = [
    "AgtBaseModel",
    "AgtEnum",
    "AlertThresholds",
    "Credential",
    "FuelSystem",
    "ReadinessLevel",
    "SystemClass",
    "TelemetryAlert",
    "TelemetrySnapshot",
    "UplinkState",
    "ValidationResult",
    "is_valid_alert_thresholds",
    "utcnow",
]
