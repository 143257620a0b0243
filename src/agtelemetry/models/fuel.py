"""Fuel system and snapshot models."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from agtelemetry.models._base import AgtBaseModel, AgtEnum, utcnow


class ReadinessLevel(AgtEnum):
    """Severity of a fuel level against the alert thresholds."""

    NOMINAL = "nominal"
    CAUTION = "caution"
    WARNING = "warning"
    CRITICAL = "critical"
    OFFLINE = "offline"

    @property
    def is_alert(self) -> bool:
        return self in (ReadinessLevel.WARNING, ReadinessLevel.CRITICAL)


class SystemClass(AgtEnum):
    """Model family inferred from the model label."""

    GEMINI_PRO = "gemini-pro"
    GEMINI_FLASH = "gemini-flash"
    CLAUDE = "claude"
    GPT = "gpt"
    EXPERIMENTAL = "experimental"


class FuelSystem(AgtBaseModel):
    """Quota state of a single model.

    Parameters
    ----------
    system_id : str
        Stable model identifier (``modelOrAlias.model`` or the label).
    designation : str
        Human-readable name derived from the label.
    fuel_level : float
        Remaining quota fraction, clamped to ``[0, 1]``.
    replenishment_eta : str or None
        Raw ISO-8601 reset time reported by the server.
    readiness : ReadinessLevel
        Severity against the thresholds in force at acquisition time.
    system_class : SystemClass
        Model family.
    quota_pool_id : str or None
        Inferred shared-quota group (``pool-1``, ...), if any.
    """

    system_id: str = Field(min_length=1, max_length=256)
    designation: str
    fuel_level: float = Field(ge=0.0, le=1.0)
    replenishment_eta: str | None = None
    readiness: ReadinessLevel
    system_class: SystemClass
    quota_pool_id: str | None = None

    @property
    def percentage(self) -> float:
        return self.fuel_level * 100

    @property
    def replenishment_at(self) -> datetime | None:
        """Parsed :attr:`replenishment_eta`, or ``None`` when absent or malformed."""
        if not self.replenishment_eta:
            return None
        text = self.replenishment_eta.strip()
        if text.endswith(("Z", "z")):
            text = f"{text[:-1]}+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None


class TelemetrySnapshot(AgtBaseModel):
    """Result of one successful acquisition cycle."""

    timestamp: datetime = Field(default_factory=utcnow)
    systems: tuple[FuelSystem, ...] = ()
    overall_readiness: ReadinessLevel
    active_alert_count: int = Field(default=0, ge=0)

    def by_pool(self) -> dict[str, list[FuelSystem]]:
        """Group pooled systems by their quota pool id."""
        pools: dict[str, list[FuelSystem]] = {}
        for system in self.systems:
            if system.quota_pool_id is not None:
                pools.setdefault(system.quota_pool_id, []).append(system)
        return pools
