"""Alert record model."""

from __future__ import annotations

from agtelemetry.models._base import AgtBaseModel
from agtelemetry.models.fuel import ReadinessLevel


class TelemetryAlert(AgtBaseModel):
    """A WARNING or CRITICAL fuel system, ready for a notification collaborator.

    Delivery, acknowledgement and cooldown belong to the collaborator;
    this record only carries what to say.
    """

    alert_id: str
    system_id: str
    system_designation: str
    level: ReadinessLevel
    message: str
    fuel_level: float
