from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .field_definition import FIELD_KEYS, get_definition

"""Validation schema for a master-data record."""

__all__ = [
    "MasterDataInput",
    "validate_master_data",
    "parse_master_data",
]


class MasterDataInput(BaseModel):
    """One MasterData row as accepted by the batch-create call.

    Keys are the canonical camelCase field names. Strict mode: numbers must
    already be int/float (text and bools are rejected), so coercion has to
    happen before validation. None means "no value" for every optional field.
    """

    model_config = ConfigDict(
        strict=True,
        allow_inf_nan=False,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    sr_no: int | None = None
    model: str
    phase: int | float | None = None
    min_insulation_res: int | float | None = None
    max_insulation_res: int | float | None = None
    test_time: int | float | None = None
    min_voltage: int | float | None = None
    max_voltage: int | float | None = None
    min_current: int | float | None = None
    max_current: int | float | None = None
    min_power: int | float | None = None
    max_power: int | float | None = None
    min_frequency: int | float | None = None
    max_frequency: int | float | None = None
    min_rpm: int | float | None = Field(None, alias="minRPM")
    max_rpm: int | float | None = Field(None, alias="maxRPM")
    direction: int | float | None = None

    @field_validator("model")
    @classmethod
    def _model_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Model is required")
        return value


def _errors_by_field(exc: ValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for err in exc.errors():
        loc = err.get("loc") or ()
        key = str(loc[0]) if loc else "__root__"
        if key in errors:
            # union 型は候補ごとにエラーが出るので最初の1件だけ残す
            continue
        label = get_definition(key).canonical_name if key in FIELD_KEYS else key
        if err["type"] == "missing":
            errors[key] = f"{label} is required"
        elif err["type"] == "value_error":
            errors[key] = str(err.get("ctx", {}).get("error", err["msg"]))
        elif key == "model":
            errors[key] = f"{label} must be text"
        else:
            errors[key] = f"{label} must be a number"
    return errors


def validate_master_data(data: Mapping[str, Any]) -> dict[str, str]:
    """Return field → message for every offending field (empty when valid)."""
    try:
        MasterDataInput.model_validate(dict(data))
    except ValidationError as e:
        return _errors_by_field(e)
    return {}


def parse_master_data(data: Mapping[str, Any]) -> tuple[dict[str, Any] | None, dict[str, str]]:
    """Validate and return the full canonical payload (all keys, None defaults)."""
    try:
        model = MasterDataInput.model_validate(dict(data))
    except ValidationError as e:
        return None, _errors_by_field(e)
    return model.model_dump(by_alias=True), {}
