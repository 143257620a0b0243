"""Base model and enum for agtelemetry records.

Every value record inherits from :class:`AgtBaseModel`, which is frozen
so that a snapshot handed to a subscriber can never be mutated under
another subscriber.

String enums inherit from :class:`AgtEnum`, which resolves values
case-insensitively so ``ReadinessLevel("CRITICAL")`` and
``ReadinessLevel("critical")`` are the same member.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict


def utcnow() -> datetime:
    return datetime.now(UTC)


class AgtEnum(StrEnum):
    """Base for string-valued enums."""

    @classmethod
    def _missing_(cls, value: object) -> AgtEnum | None:
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return None


class AgtBaseModel(BaseModel):
    """Base for immutable agtelemetry value records."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
    )
