"""Schema helpers for expiry policy data."""

from __future__ import annotations

from copy import deepcopy
from datetime import timedelta
from typing import Any

from jsonschema import Draft202012Validator

from ..config import (
    DEFAULT_CYCLES,
    DEFAULT_PULSE_GENERATION,
    DEFAULT_TICKS,
    MAX_PULSE_GENERATION,
    POLICY_SCHEMA_ID,
    POLICY_SCHEMA_VERSION,
)

POLICY_SCHEMA: dict[str, Any] = {
    "$id": POLICY_SCHEMA_ID,
    "type": "object",
    "required": ["schema", "cycles", "ticks"],
    "properties": {
        "schema": {"const": POLICY_SCHEMA_VERSION},
        "cycles": {"type": "integer", "minimum": 0},
        "ticks": {"type": "number", "minimum": 0},
        "pulse_generation": {
            "type": "integer",
            "minimum": 0,
            "maximum": MAX_PULSE_GENERATION,
        },
    },
    "additionalProperties": False,
}

DEFAULT_POLICY: dict[str, Any] = {
    "schema": POLICY_SCHEMA_VERSION,
    "cycles": DEFAULT_CYCLES,
    "ticks": DEFAULT_TICKS,
    "pulse_generation": DEFAULT_PULSE_GENERATION,
}

_validator = Draft202012Validator(POLICY_SCHEMA)


def _normalise_ticks(value: Any) -> Any:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return value


def merge_with_defaults(data: dict[str, Any] | None) -> dict[str, Any]:
    """Merge *data* with :data:`DEFAULT_POLICY` and validate the result."""

    merged = deepcopy(DEFAULT_POLICY)
    if data:
        for key, value in data.items():
            if key == "ticks":
                merged[key] = _normalise_ticks(value)
                continue
            merged[key] = value
    _validator.validate(merged)
    return merged


def validate_policy(data: dict[str, Any]) -> None:
    """Validate *data* against the policy schema."""

    _validator.validate(data)


__all__ = ["DEFAULT_POLICY", "POLICY_SCHEMA", "merge_with_defaults", "validate_policy"]
