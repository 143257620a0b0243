"""Readiness assessment and alert derivation."""

from __future__ import annotations

from collections.abc import Sequence

from agtelemetry.models.alerts import TelemetryAlert
from agtelemetry.models.fuel import FuelSystem, ReadinessLevel
from agtelemetry.models.thresholds import AlertThresholds
from agtelemetry.sanitize import sanitize_label


def assess_readiness(fuel_level: float, thresholds: AlertThresholds) -> ReadinessLevel:
    """Classify *fuel_level* (0..1) against percentage *thresholds*.

    Each boundary belongs to the more severe level: with a critical
    threshold of 5, exactly 5 % is CRITICAL.
    """
    percentage = fuel_level * 100
    if percentage <= thresholds.critical:
        return ReadinessLevel.CRITICAL
    if percentage <= thresholds.warning:
        return ReadinessLevel.WARNING
    if percentage <= thresholds.caution:
        return ReadinessLevel.CAUTION
    return ReadinessLevel.NOMINAL


def assess_overall_readiness(systems: Sequence[FuelSystem]) -> ReadinessLevel:
    """Fleet-wide readiness. Checks run in order; the first hit wins."""
    if not systems:
        return ReadinessLevel.OFFLINE
    if any(system.readiness == ReadinessLevel.CRITICAL for system in systems):
        return ReadinessLevel.CRITICAL
    warning_count = sum(1 for system in systems if system.readiness == ReadinessLevel.WARNING)
    if warning_count >= len(systems) / 2:
        return ReadinessLevel.WARNING
    if warning_count > 0:
        return ReadinessLevel.CAUTION
    return ReadinessLevel.NOMINAL


def count_active_alerts(systems: Sequence[FuelSystem]) -> int:
    return sum(1 for system in systems if system.readiness.is_alert)


def _alert_message(system: FuelSystem) -> str:
    percentage = round(system.percentage)
    if system.readiness == ReadinessLevel.CRITICAL:
        return "Fuel depleted" if percentage == 0 else f"Critical: {percentage}% fuel"
    return f"Low fuel: {percentage}%"


def derive_alerts(systems: Sequence[FuelSystem]) -> list[TelemetryAlert]:
    """Build alert records for every WARNING or CRITICAL system.

    CRITICAL alerts come first; within a level the input order (lowest
    fuel first) is kept.
    """
    alerting = [system for system in systems if system.readiness.is_alert]
    alerting.sort(key=lambda system: system.readiness != ReadinessLevel.CRITICAL)
    return [
        TelemetryAlert(
            alert_id=f"alert-{system.system_id}",
            system_id=system.system_id,
            system_designation=sanitize_label(system.designation),
            level=system.readiness,
            message=_alert_message(system),
            fuel_level=system.fuel_level,
        )
        for system in alerting
    ]
