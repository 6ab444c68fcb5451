from __future__ import annotations

import math
import re
from collections.abc import Callable, Sequence
from typing import Any

from ..models.field_definition import IDENTIFIER_FIELD, NUMERIC_FIELDS
from ..models.import_outcome import ExtractedRecord
from ..models.master_record import MasterDataRecord

"""Type coercion from extracted cell text to typed record values.

phase and direction accept either numbers or a few textual spellings. Both are
expressed as ordered (predicate, producer) rule lists: the first predicate that
matches produces the value, and no match yields None. Every other numeric field
is a plain number-or-None; a value that cannot be read as a finite number is
None, never NaN.
"""

__all__ = [
    "Rule",
    "PHASE_RULES",
    "DIRECTION_RULES",
    "parse_number",
    "apply_rules",
    "coerce_phase",
    "coerce_direction",
    "coerce_record",
]

Rule = tuple[Callable[[str], bool], Callable[[str], Any]]

_INTEGER = re.compile(r"[+-]?\d+")

CLOCKWISE = frozenset({"cw", "clockwise", "forward", "fwd"})
COUNTER_CLOCKWISE = frozenset({"ccw", "acw", "anticlockwise", "anti-clockwise", "reverse", "rev"})


def parse_number(text: str) -> int | float | None:
    """Read ``text`` as a finite number; None for blank or unreadable text."""
    s = text.strip()
    if not s or "_" in s:
        return None
    if _INTEGER.fullmatch(s):
        return int(s)
    try:
        value = float(s)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _is_number(text: str) -> bool:
    return parse_number(text) is not None


def _contains(word: str) -> Callable[[str], bool]:
    return lambda text: word in text.lower()


def _one_of(words: frozenset[str]) -> Callable[[str], bool]:
    return lambda text: text.strip().lower() in words


def _const(value: Any) -> Callable[[str], Any]:
    return lambda _text: value


PHASE_RULES: tuple[Rule, ...] = (
    (_is_number, parse_number),
    (_contains("single"), _const(1)),
    (_contains("three"), _const(3)),
)

DIRECTION_RULES: tuple[Rule, ...] = (
    (_is_number, parse_number),
    (_one_of(CLOCKWISE), _const(1)),
    (_one_of(COUNTER_CLOCKWISE), _const(2)),
)


def apply_rules(text: str, rules: Sequence[Rule]) -> Any:
    if not text.strip():
        return None
    for predicate, produce in rules:
        if predicate(text):
            return produce(text)
    return None


def coerce_phase(text: str) -> int | float | None:
    return apply_rules(text, PHASE_RULES)


def coerce_direction(text: str) -> int | float | None:
    return apply_rules(text, DIRECTION_RULES)


_FIELD_COERCERS: dict[str, Callable[[str], Any]] = {
    "phase": coerce_phase,
    "direction": coerce_direction,
}


def coerce_record(record: ExtractedRecord) -> MasterDataRecord:
    """Typed values for every canonical field of ``record``."""
    values: dict[str, Any] = {
        IDENTIFIER_FIELD: record.sr_no,
        "model": record.get("model"),
    }
    for key in NUMERIC_FIELDS:
        coerce = _FIELD_COERCERS.get(key, parse_number)
        values[key] = coerce(record.get(key))
    return MasterDataRecord.from_mapping(values)
