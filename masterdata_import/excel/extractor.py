from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import Any

from ..models.field_definition import FIELD_KEYS, IDENTIFIER_FIELD, cell_to_text
from ..models.import_outcome import ExtractedRecord, ParseResult
from .errors import NoDataRowsError

"""Data row extraction below a located header row.

Rows that are blank, or whose "Sr. No." cell is blank or not an integer, are
counted as skipped rather than reported: hand-edited master sheets routinely
end with notes, totals or stray formatting, and those rows carry no identity
to report an error against.
"""

__all__ = [
    "is_empty_row",
    "parse_identifier",
    "extract_records",
]

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"[+-]?\d+")


def is_empty_row(row: Sequence[Any] | None) -> bool:
    if not row:
        return True
    return all(cell_to_text(cell) == "" for cell in row)


def parse_identifier(text: str) -> int | None:
    """Leading integer of ``text`` ("12", "12.0", "7 " -> 12, 12, 7), else None."""
    m = _LEADING_INT.match(text.strip())
    return int(m.group(0)) if m else None


def extract_records(
    grid: Sequence[Sequence[Any]],
    header_row_index: int,
    column_map: dict[str, int],
) -> ParseResult:
    data_start = header_row_index + 1
    records: list[ExtractedRecord] = []
    skipped = 0

    for i in range(data_start, len(grid)):
        row = grid[i]
        if is_empty_row(row):
            skipped += 1
            continue

        def value(key: str) -> str:
            ci = column_map.get(key)
            if ci is None or ci >= len(row):
                return ""
            return cell_to_text(row[ci])

        sr_no = parse_identifier(value(IDENTIFIER_FIELD))
        if sr_no is None:
            skipped += 1
            continue

        records.append(
            ExtractedRecord(
                row_index=i,
                sr_no=sr_no,
                values={key: value(key) for key in FIELD_KEYS},
            )
        )

    total_rows = max(len(grid) - data_start, 0)
    logger.debug("extracted records=%d skipped=%d total=%d", len(records), skipped, total_rows)
    if not records:
        raise NoDataRowsError("No valid data rows found.", 'Rows must have a valid "Sr. No." value.')
    return ParseResult(
        records=records,
        total_rows=total_rows,
        skipped_rows=skipped,
        header_row_index=header_row_index,
    )
