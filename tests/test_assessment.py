from __future__ import annotations

import pytest

from agtelemetry.assessment import (
    assess_overall_readiness,
    assess_readiness,
    count_active_alerts,
    derive_alerts,
)
from agtelemetry.models import AlertThresholds, FuelSystem, ReadinessLevel, SystemClass

THRESHOLDS = AlertThresholds()


def _system(system_id: str, readiness: ReadinessLevel, fuel_level: float = 0.5, designation: str = "") -> FuelSystem:
    return FuelSystem(
        system_id=system_id,
        designation=designation or system_id,
        fuel_level=fuel_level,
        readiness=readiness,
        system_class=SystemClass.EXPERIMENTAL,
    )


@pytest.mark.parametrize(
    ("fuel_level", "expected"),
    [
        (0.0, ReadinessLevel.CRITICAL),
        (0.05, ReadinessLevel.CRITICAL),
        (0.051, ReadinessLevel.WARNING),
        (0.20, ReadinessLevel.WARNING),
        (0.201, ReadinessLevel.CAUTION),
        (0.40, ReadinessLevel.CAUTION),
        (0.401, ReadinessLevel.NOMINAL),
        (1.0, ReadinessLevel.NOMINAL),
    ],
)
def test_boundaries_belong_to_the_more_severe_level(fuel_level: float, expected: ReadinessLevel) -> None:
    assert assess_readiness(fuel_level, THRESHOLDS) == expected


def test_custom_thresholds() -> None:
    thresholds = AlertThresholds(caution=80, warning=50, critical=10)

    assert assess_readiness(0.6, thresholds) == ReadinessLevel.CAUTION
    assert assess_readiness(0.5, thresholds) == ReadinessLevel.WARNING


def test_overall_offline_without_systems() -> None:
    assert assess_overall_readiness([]) == ReadinessLevel.OFFLINE


def test_overall_critical_wins() -> None:
    systems = [_system("a", ReadinessLevel.NOMINAL), _system("b", ReadinessLevel.CRITICAL)]

    assert assess_overall_readiness(systems) == ReadinessLevel.CRITICAL


def test_overall_warning_when_half_are_warning() -> None:
    systems = [_system("a", ReadinessLevel.WARNING), _system("b", ReadinessLevel.NOMINAL)]

    assert assess_overall_readiness(systems) == ReadinessLevel.WARNING


def test_overall_caution_with_a_minority_of_warnings() -> None:
    systems = [
        _system("a", ReadinessLevel.WARNING),
        _system("b", ReadinessLevel.NOMINAL),
        _system("c", ReadinessLevel.CAUTION),
    ]

    assert assess_overall_readiness(systems) == ReadinessLevel.CAUTION


def test_overall_nominal_ignores_caution_systems() -> None:
    systems = [_system("a", ReadinessLevel.CAUTION), _system("b", ReadinessLevel.NOMINAL)]

    assert assess_overall_readiness(systems) == ReadinessLevel.NOMINAL


def test_derive_alerts_orders_critical_first() -> None:
    systems = [
        _system("w1", ReadinessLevel.WARNING, 0.10),
        _system("c1", ReadinessLevel.CRITICAL, 0.0),
        _system("n1", ReadinessLevel.NOMINAL, 0.9),
        _system("c2", ReadinessLevel.CRITICAL, 0.03),
    ]

    alerts = derive_alerts(systems)

    assert [alert.system_id for alert in alerts] == ["c1", "c2", "w1"]
    assert [alert.message for alert in alerts] == ["Fuel depleted", "Critical: 3% fuel", "Low fuel: 10%"]
    assert alerts[0].alert_id == "alert-c1"
    assert count_active_alerts(systems) == 3


def test_alert_designation_is_sanitized() -> None:
    system = _system("x", ReadinessLevel.WARNING, 0.1, designation="Evil\u202eModel   Name")

    (alert,) = derive_alerts([system])

    assert alert.system_designation == "EvilModel Name"
