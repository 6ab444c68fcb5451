from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from typing import Any, Union

from .field_definition import FIELD_KEYS

"""Typed master-data record, one attribute per canonical field.

Attributes are the snake_case form of the canonical camelCase keys; the
camelCase keys stay the wire / schema names (to_dict, from_mapping, merged).

Coercion only ever produces ``Number | None`` for the numeric fields. A review
edit is stored as given so that a rejected value (e.g. text typed into a numeric
field) stays visible in the row and is reported through ParsedRow.errors.
"""

__all__ = [
    "Number",
    "MasterDataRecord",
    "KEY_TO_ATTR",
]

Number = Union[int, float]


@dataclass(frozen=True)
class MasterDataRecord:
    sr_no: int | None = None
    model: str = ""
    phase: Number | None = None
    min_insulation_res: Number | None = None
    max_insulation_res: Number | None = None
    test_time: Number | None = None
    min_voltage: Number | None = None
    max_voltage: Number | None = None
    min_current: Number | None = None
    max_current: Number | None = None
    min_power: Number | None = None
    max_power: Number | None = None
    min_frequency: Number | None = None
    max_frequency: Number | None = None
    min_rpm: Number | None = None
    max_rpm: Number | None = None
    direction: Number | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> MasterDataRecord:
        """Build from canonical keys; unknown keys are rejected."""
        return cls(**_attrs_for(data))

    def to_dict(self) -> dict[str, Any]:
        """Canonical key → value, in field-definition order."""
        return {key: getattr(self, attr) for key, attr in KEY_TO_ATTR.items()}

    def merged(self, changes: Mapping[str, Any]) -> MasterDataRecord:
        """Copy with ``changes`` (canonical keys) applied; None clears a value."""
        return replace(self, **_attrs_for(changes))

    def value(self, key: str) -> Any:
        return getattr(self, KEY_TO_ATTR[key])


# フィールド定義と同じ順序で並んでいる前提
KEY_TO_ATTR: dict[str, str] = dict(zip(FIELD_KEYS, (f.name for f in fields(MasterDataRecord))))


def _attrs_for(data: Mapping[str, Any]) -> dict[str, Any]:
    unknown = [k for k in data if k not in KEY_TO_ATTR]
    if unknown:
        raise KeyError(f"unknown master-data field(s): {', '.join(sorted(unknown))}")
    return {KEY_TO_ATTR[k]: v for k, v in data.items()}
