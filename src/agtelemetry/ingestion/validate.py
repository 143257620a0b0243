"""Defensive shape check for the ``GetUserStatus`` payload.

The server is a moving target: fields appear, move and disappear
between releases. The validator never raises; it reports exactly which
key is missing together with the keys that *are* present so API drift
can be diagnosed from a single log line.
"""

from __future__ import annotations

from typing import Any

from agtelemetry.ingestion.normalize import json_type_name
from agtelemetry.models.validation import ValidationResult

_CONFIG_PATH = ("userStatus", "cascadeModelConfigData", "clientModelConfigs")


def _describe_keys(keys: list[str]) -> str:
    return ", ".join(keys) if keys else "none"


def _walk(data: dict[str, Any], errors: list[str]) -> Any:
    """Follow the config path; append one error and return ``None`` on failure."""
    current: Any = data
    path: list[str] = []
    for index, key in enumerate(_CONFIG_PATH):
        container = ".".join(path) or "response"
        if key not in current:
            errors.append(f"Missing '{key}' in {container} (present keys: {_describe_keys([str(k) for k in current])})")
            return None
        current = current[key]
        path.append(key)
        is_last = index == len(_CONFIG_PATH) - 1
        if is_last and not isinstance(current, list):
            errors.append(f"'{'.'.join(path)}' is not an array (received {json_type_name(current)})")
            return None
        if not is_last and not isinstance(current, dict):
            errors.append(f"'{'.'.join(path)}' is not an object (received {json_type_name(current)})")
            return None
    return current


def _sample_warnings(configs: list[Any]) -> list[str]:
    if not configs:
        return ["clientModelConfigs is empty (no model configs reported)"]
    first = configs[0]
    if first is None:
        return ["First model config is null"]
    if not isinstance(first, dict):
        return [f"First model config is not an object (received {json_type_name(first)})"]
    if "label" not in first and "quotaInfo" not in first:
        keys = _describe_keys([str(k) for k in first])
        return [f"First model config has neither 'label' nor 'quotaInfo' (present keys: {keys})"]
    return []


def validate_server_response(data: Any) -> ValidationResult:
    """Check that *data* carries ``userStatus.cascadeModelConfigData.clientModelConfigs[]``.

    Only the first config entry is sampled for warnings; per-entry
    validation happens during normalization.
    """
    if not isinstance(data, dict):
        return ValidationResult(
            valid=False,
            errors=(f"Response is not an object (received {json_type_name(data)})",),
        )

    received_keys = tuple(str(key) for key in data)
    errors: list[str] = []
    configs = _walk(data, errors)
    if configs is None:
        return ValidationResult(valid=False, errors=tuple(errors), received_keys=received_keys)

    return ValidationResult(
        valid=True,
        warnings=tuple(_sample_warnings(configs)),
        received_keys=received_keys,
    )


def extract_model_configs(data: Any) -> list[Any]:
    """Return the config list from a payload that passed validation, else ``[]``."""
    configs = _walk(data, []) if isinstance(data, dict) else None
    return configs if isinstance(configs, list) else []
