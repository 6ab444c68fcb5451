from __future__ import annotations

import math
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

"""Canonical master-data fields and the header alias index.

Each FieldDefinition names one column of the MasterData table (camelCase key, the
same name the database uses) and the header spellings accepted for it in uploaded
spreadsheets. The first alias is the canonical display name used in error messages
and in the canonical template written by excel.writer.

Matching is done on normalized text only, so `normalize_header` must be applied
identically when aliases are registered and when header cells are read.
"""

__all__ = [
    "FieldDefinition",
    "FIELD_DEFINITIONS",
    "FIELD_KEYS",
    "IDENTIFIER_FIELD",
    "TEXT_FIELDS",
    "NUMERIC_FIELDS",
    "GROUP_MEGGER",
    "GROUP_NO_LOAD",
    "AliasIndex",
    "DEFAULT_ALIAS_INDEX",
    "normalize_header",
    "cell_to_text",
    "get_definition",
]

_WHITESPACE = re.compile(r"\s+")

GROUP_MEGGER = "Megger Test"
GROUP_NO_LOAD = "No Load Test"


def normalize_header(text: str) -> str:
    """Collapse whitespace runs, trim and lower-case. Idempotent."""
    return _WHITESPACE.sub(" ", text).strip().lower()


def cell_to_text(value: Any) -> str:
    """Render a raw grid cell as trimmed text ("" for blank cells).

    pandas hands back ints, floats, bools, datetimes and NaN for blanks; integral
    floats are rendered without the trailing ``.0`` so ``12.0`` reads as ``12``.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return _WHITESPACE.sub(" ", str(value)).strip()


@dataclass(frozen=True)
class FieldDefinition:
    """One canonical field plus its accepted header aliases."""
    key: str
    aliases: tuple[str, ...]
    group: str | None = None

    @property
    def canonical_name(self) -> str:
        return self.aliases[0]

    @property
    def normalized_aliases(self) -> frozenset[str]:
        return frozenset(normalize_header(a) for a in self.aliases)

    def matches(self, header_text: str) -> bool:
        return normalize_header(header_text) in self.normalized_aliases


def _ir_aliases(prefix: str) -> tuple[str, ...]:
    # "Inuslation" はマスタ原本の誤記。実ファイルに残っているため受け付ける
    return (
        f"{prefix}. IR (MΩ)",
        f"{prefix} IR (MΩ)",
        f"{prefix}. IR",
        f"{prefix} IR",
        f"{prefix}. Insulation Resistance",
        f"{prefix} Insulation Resistance",
        f"{prefix}. Insulation resistance (MΩ)",
        f"{prefix}. Inuslation resistance (MΩ)",
        f"{prefix}. Insulation Resistance (MΩ)",
        f"{prefix}. Inuslation Resistance (MΩ)",
    )


def _unit_aliases(prefix: str, name: str, units: Sequence[str]) -> tuple[str, ...]:
    # Min. Voltage (V), Min. Voltage (Volt), Min Voltage (V), ... Min. Voltage, Min Voltage
    out: list[str] = []
    for dotted in (f"{prefix}.", prefix):
        for unit in units:
            out.append(f"{dotted} {name} ({unit})")
    out.append(f"{prefix}. {name}")
    out.append(f"{prefix} {name}")
    return tuple(out)


def _frequency_aliases(prefix: str) -> tuple[str, ...]:
    return (
        f"{prefix}. Freq (Hz)",
        f"{prefix}. Frequency (Hz)",
        f"{prefix} Freq (Hz)",
        f"{prefix} Frequency (Hz)",
        f"{prefix}. Frequency",
        f"{prefix}. Freq",
        f"{prefix} Frequency",
    )


FIELD_DEFINITIONS: tuple[FieldDefinition, ...] = (
    FieldDefinition("srNo", ("Sr. No.", "Sr No", "Sr.No.", "Sr. No", "Serial No", "S.No.", "SrNo")),
    FieldDefinition("model", ("Model", "Model Name")),
    FieldDefinition("phase", ("Phase",), GROUP_MEGGER),
    FieldDefinition("minInsulationRes", _ir_aliases("Min"), GROUP_MEGGER),
    FieldDefinition("maxInsulationRes", _ir_aliases("Max"), GROUP_MEGGER),
    FieldDefinition(
        "testTime",
        (
            "Test Time (s)",
            "Test Time",
            "Test Time (sec)",
            "Test Time(s)",
            "Test Time (Second)",
            "Test Time (Seconds)",
        ),
        GROUP_MEGGER,
    ),
    FieldDefinition("minVoltage", _unit_aliases("Min", "Voltage", ("V", "Volt")), GROUP_NO_LOAD),
    FieldDefinition("maxVoltage", _unit_aliases("Max", "Voltage", ("V", "Volt")), GROUP_NO_LOAD),
    FieldDefinition("minCurrent", _unit_aliases("Min", "Current", ("A", "amp.")), GROUP_NO_LOAD),
    FieldDefinition("maxCurrent", _unit_aliases("Max", "Current", ("A", "amp.")), GROUP_NO_LOAD),
    FieldDefinition("minPower", _unit_aliases("Min", "Power", ("W", "Watt")), GROUP_NO_LOAD),
    FieldDefinition("maxPower", _unit_aliases("Max", "Power", ("W", "Watt")), GROUP_NO_LOAD),
    FieldDefinition("minFrequency", _frequency_aliases("Min"), GROUP_NO_LOAD),
    FieldDefinition("maxFrequency", _frequency_aliases("Max"), GROUP_NO_LOAD),
    FieldDefinition("minRPM", ("Min. RPM", "Min RPM"), GROUP_NO_LOAD),
    FieldDefinition("maxRPM", ("Max. RPM", "Max RPM"), GROUP_NO_LOAD),
    FieldDefinition("direction", ("Direction",), GROUP_NO_LOAD),
)

FIELD_KEYS: tuple[str, ...] = tuple(fd.key for fd in FIELD_DEFINITIONS)
IDENTIFIER_FIELD = "srNo"
TEXT_FIELDS: frozenset[str] = frozenset({"model"})
NUMERIC_FIELDS: tuple[str, ...] = tuple(
    k for k in FIELD_KEYS if k != IDENTIFIER_FIELD and k not in TEXT_FIELDS
)

_BY_KEY = {fd.key: fd for fd in FIELD_DEFINITIONS}


def get_definition(key: str) -> FieldDefinition:
    return _BY_KEY[key]


class AliasIndex:
    """Read-only lookup from normalized alias text to its FieldDefinition.

    Built once from a set of definitions. When two definitions register the same
    alias the later one wins, which never happens for FIELD_DEFINITIONS.
    """

    def __init__(self, definitions: Iterable[FieldDefinition]) -> None:
        self.definitions: tuple[FieldDefinition, ...] = tuple(definitions)
        self._lookup: dict[str, FieldDefinition] = {}
        for fd in self.definitions:
            for alias in fd.aliases:
                self._lookup[normalize_header(alias)] = fd

    def __len__(self) -> int:
        return len(self._lookup)

    def __contains__(self, text: object) -> bool:
        return isinstance(text, str) and normalize_header(text) in self._lookup

    def lookup(self, text: str) -> FieldDefinition | None:
        return self._lookup.get(normalize_header(text))

    def count_distinct_matches(self, row: Sequence[Any]) -> int:
        """Number of distinct fields matched by at least one cell of ``row``."""
        matched: set[str] = set()
        for cell in row:
            fd = self.lookup(cell_to_text(cell))
            if fd is not None:
                matched.add(fd.key)
        return len(matched)


DEFAULT_ALIAS_INDEX = AliasIndex(FIELD_DEFINITIONS)
