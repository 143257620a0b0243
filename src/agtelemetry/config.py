"""Client configuration for agtelemetry."""

from __future__ import annotations

import dataclasses
import math
import os
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from agtelemetry._constants import (
    CONSECUTIVE_FAILURE_THRESHOLD,
    DEFAULT_IDE_NAME,
    DEFAULT_PROCESS_PATTERN,
    DEFAULT_SCAN_INTERVAL,
    MAX_SCAN_INTERVAL,
    MIN_SCAN_INTERVAL,
)
from agtelemetry.exceptions import AgtConfigError
from agtelemetry.models.thresholds import AlertThresholds


def normalize_scan_interval(value: Any) -> float:
    """Clamp a scan interval in seconds into ``[30, 86400]``.

    Non-numeric and non-finite values fall back to the default interval.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return DEFAULT_SCAN_INTERVAL
    return float(max(MIN_SCAN_INTERVAL, min(MAX_SCAN_INTERVAL, value)))


def _env_float(env: Mapping[str, str], key: str) -> float | None:
    raw = env.get(key)
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise AgtConfigError(f"{key} must be a number, got {raw!r}") from exc


@dataclasses.dataclass(frozen=True)
class TelemetryConfig:
    """Client configuration.

    Parameters
    ----------
    scan_interval : float
        Seconds between periodic acquisitions. Clamped into
        ``[30, 86400]`` when the scheduler starts.
    thresholds : AlertThresholds
        Readiness thresholds applied during normalization.
    ide_name : str
        IDE identifier sent in probe and fetch request bodies.
    process_pattern : str
        Case-insensitive substring identifying the language-server
        process in the process list.
    failure_threshold : int
        Consecutive failures after which a ``consecutive-failures``
        event is emitted.
    """

    scan_interval: float = DEFAULT_SCAN_INTERVAL
    thresholds: AlertThresholds = dataclasses.field(default_factory=AlertThresholds)
    ide_name: str = DEFAULT_IDE_NAME
    process_pattern: str = DEFAULT_PROCESS_PATTERN
    failure_threshold: int = CONSECUTIVE_FAILURE_THRESHOLD

    def __post_init__(self) -> None:
        if not self.process_pattern.strip():
            raise AgtConfigError("process_pattern must be non-empty")
        if self.failure_threshold < 1:
            raise AgtConfigError(f"failure_threshold must be >= 1, got {self.failure_threshold}")

    @classmethod
    def from_env(cls, **overrides: Any) -> TelemetryConfig:
        """Create configuration from ``AGT_*`` environment variables.

        Explicit keyword arguments override environment values.

        Raises
        ------
        AgtConfigError
            When a variable is malformed or the thresholds are misordered.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        interval = _env_float(env, "AGT_SCAN_INTERVAL")
        if interval is not None:
            config_kwargs["scan_interval"] = interval

        for env_key, field_name in (("AGT_IDE_NAME", "ide_name"), ("AGT_PROCESS_PATTERN", "process_pattern")):
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        failures = env.get("AGT_FAILURE_THRESHOLD")
        if failures is not None:
            try:
                config_kwargs["failure_threshold"] = int(failures)
            except ValueError as exc:
                raise AgtConfigError(f"AGT_FAILURE_THRESHOLD must be an integer, got {failures!r}") from exc

        if "thresholds" not in overrides:
            threshold_kwargs: dict[str, float] = {}
            for env_key, field_name in (
                ("AGT_CAUTION_THRESHOLD", "caution"),
                ("AGT_WARNING_THRESHOLD", "warning"),
                ("AGT_CRITICAL_THRESHOLD", "critical"),
            ):
                val = _env_float(env, env_key)
                if val is not None:
                    threshold_kwargs[field_name] = val
            if threshold_kwargs:
                try:
                    config_kwargs["thresholds"] = AlertThresholds(**threshold_kwargs)
                except ValidationError as exc:
                    raise AgtConfigError(f"Invalid alert thresholds: {exc}") from exc

        config_kwargs.update(overrides)
        return cls(**config_kwargs)
