"""Fuel data normalizer and quota-pool clustering.

Turns validated ``clientModelConfigs`` entries into :class:`FuelSystem`
records. Each entry is untrusted: bad entries are skipped, never fatal.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from typing import Any

from agtelemetry._constants import (
    MAX_LABEL_LENGTH,
    MAX_RESET_TIME_LENGTH,
    MAX_SYSTEM_ID_LENGTH,
    MAX_SYSTEMS,
    POOL_PRECISION,
)
from agtelemetry.assessment import assess_readiness
from agtelemetry.ingestion.normalize import clamp, finite_number
from agtelemetry.models.fuel import FuelSystem, SystemClass
from agtelemetry.models.thresholds import AlertThresholds

_logger = logging.getLogger(__name__)

_SEPARATOR_RE = re.compile(r"[_-]")
_WORD_START_RE = re.compile(r"\b\w")

# Checked in order; the first matching rule wins.
_CLASS_RULES: tuple[tuple[tuple[str, ...], SystemClass], ...] = (
    (("flash",), SystemClass.GEMINI_FLASH),
    (("gemini", "pro"), SystemClass.GEMINI_PRO),
    (("claude", "sonnet", "opus"), SystemClass.CLAUDE),
    (("gpt", "oss"), SystemClass.GPT),
)


def format_designation(label: str) -> str:
    """``"claude_sonnet-4"`` -> ``"Claude Sonnet 4"``."""
    spaced = _SEPARATOR_RE.sub(" ", label)
    return _WORD_START_RE.sub(lambda match: match.group(0).upper(), spaced).strip()


def classify_system(label: str) -> SystemClass:
    lower = label.lower()
    for needles, system_class in _CLASS_RULES:
        if any(needle in lower for needle in needles):
            return system_class
    return SystemClass.EXPERIMENTAL


def _system_id(entry: dict[str, Any], label: str) -> str | None:
    model_or_alias = entry.get("modelOrAlias")
    model = model_or_alias.get("model") if isinstance(model_or_alias, dict) else None
    system_id = (model if isinstance(model, str) else label).strip()
    if not system_id or len(system_id) > MAX_SYSTEM_ID_LENGTH:
        return None
    return system_id


def normalize_model_config(entry: Any, thresholds: AlertThresholds) -> FuelSystem | None:
    """Convert one raw config entry, or return ``None`` when it is unusable."""
    if not isinstance(entry, dict):
        return None

    quota_info = entry.get("quotaInfo")
    if not isinstance(quota_info, dict):
        return None

    raw_label = entry.get("label")
    if not isinstance(raw_label, str) or not raw_label.strip():
        return None
    label = raw_label.strip()[:MAX_LABEL_LENGTH]

    fraction = finite_number(quota_info.get("remainingFraction"))
    if fraction is None:
        return None
    fuel_level = clamp(fraction)

    system_id = _system_id(entry, label)
    if system_id is None:
        return None

    reset_time = quota_info.get("resetTime")
    return FuelSystem(
        system_id=system_id,
        designation=format_designation(label),
        fuel_level=fuel_level,
        replenishment_eta=reset_time[:MAX_RESET_TIME_LENGTH] if isinstance(reset_time, str) else None,
        readiness=assess_readiness(fuel_level, thresholds),
        system_class=classify_system(label),
    )


def assign_quota_pools(systems: Sequence[FuelSystem]) -> list[FuelSystem]:
    """Infer shared quota pools from identical fuel levels.

    There is no API signal for shared quotas, so this is a heuristic:

    * systems at exactly 1.0 are never pooled, since an untouched quota
      looks the same whether it is shared or not;
    * the rest are grouped by fuel level rounded to ``POOL_PRECISION``
      decimal digits, and every group of two or more gets ``pool-N`` in
      first-encounter order.

    Unrelated models that happen to share a fraction are pooled (false
    positive), and pool members whose fractions differ after rounding
    are not (false negative).
    """
    groups: dict[float, list[int]] = {}
    for index, system in enumerate(systems):
        if system.fuel_level == 1.0:
            continue
        groups.setdefault(round(system.fuel_level, POOL_PRECISION), []).append(index)

    pool_ids: dict[int, str] = {}
    next_pool = 1
    for members in groups.values():
        if len(members) < 2:
            continue
        pool_id = f"pool-{next_pool}"
        next_pool += 1
        for index in members:
            pool_ids[index] = pool_id

    return [
        system.model_copy(update={"quota_pool_id": pool_ids[index]}) if index in pool_ids else system
        for index, system in enumerate(systems)
    ]


def normalize_model_configs(configs: Iterable[Any], thresholds: AlertThresholds) -> list[FuelSystem]:
    """Normalize raw configs, sort by ascending fuel level and assign pools.

    Processing stops after ``MAX_SYSTEMS`` accepted entries.
    """
    systems: list[FuelSystem] = []
    skipped = 0
    for entry in configs:
        system = normalize_model_config(entry, thresholds)
        if system is None:
            skipped += 1
            continue
        systems.append(system)
        if len(systems) >= MAX_SYSTEMS:
            _logger.debug("Stopped after %d model configs", MAX_SYSTEMS)
            break

    if skipped:
        _logger.debug("Skipped %d unusable model configs", skipped)

    systems.sort(key=lambda system: system.fuel_level)
    return assign_quota_pools(systems)
