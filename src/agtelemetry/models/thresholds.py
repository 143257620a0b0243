"""Alert threshold configuration."""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from pydantic import Field, model_validator

from agtelemetry.models._base import AgtBaseModel


class AlertThresholds(AgtBaseModel):
    """Percentage thresholds for readiness classification.

    Must satisfy ``caution > warning > critical`` with every value in
    ``[1, 100]``.  Defaults match the stock extension settings.
    """

    caution: float = Field(default=40, ge=1, le=100, allow_inf_nan=False)
    warning: float = Field(default=20, ge=1, le=100, allow_inf_nan=False)
    critical: float = Field(default=5, ge=1, le=100, allow_inf_nan=False)

    @model_validator(mode="after")
    def _check_ordering(self) -> AlertThresholds:
        if not (self.caution > self.warning > self.critical):
            raise ValueError(
                "thresholds must satisfy caution > warning > critical, "
                f"got caution={self.caution} warning={self.warning} critical={self.critical}"
            )
        return self


def is_valid_alert_thresholds(value: Any) -> bool:
    """Check an untrusted mapping (or model) against the threshold invariant."""
    if isinstance(value, AlertThresholds):
        return True
    if not isinstance(value, Mapping):
        return False
    numbers: list[float] = []
    for key in ("caution", "warning", "critical"):
        raw = value.get(key)
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            return False
        if not math.isfinite(raw) or not 1 <= raw <= 100:
            return False
        numbers.append(float(raw))
    caution, warning, critical = numbers
    return caution > warning > critical
