from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from ..models.field_definition import (
    DEFAULT_ALIAS_INDEX,
    FIELD_DEFINITIONS,
    AliasIndex,
    FieldDefinition,
    cell_to_text,
    normalize_header,
)
from .errors import HeaderRowNotFoundError, MissingColumnsError

"""Header row detection and header-to-column mapping.

Uploaded sheets often carry title rows, merged group rows ("Megger Test",
"No Load Test") or blank spacer rows above the real header, so the header is
found by content instead of by position: the row matching the most distinct
fields wins, provided it clears a minimum score.
"""

__all__ = [
    "DEFAULT_SCAN_ROWS",
    "DEFAULT_MIN_MATCHES",
    "HEADER_GUIDANCE",
    "locate_header_row",
    "map_columns",
]

logger = logging.getLogger(__name__)

DEFAULT_SCAN_ROWS = 20
DEFAULT_MIN_MATCHES = 3

HEADER_GUIDANCE = (
    "Please ensure your Excel file contains the standard column headers "
    '(e.g., "Sr. No.", "Model", "Min. Voltage (V)").'
)


def locate_header_row(
    grid: Sequence[Sequence[Any]],
    alias_index: AliasIndex = DEFAULT_ALIAS_INDEX,
    scan_rows: int = DEFAULT_SCAN_ROWS,
    min_matches: int = DEFAULT_MIN_MATCHES,
) -> tuple[int, int]:
    """Return (row_index, distinct_match_count) of the most header-like row.

    Only the first ``scan_rows`` rows are considered. Ties keep the earlier row.
    A best score below ``min_matches`` means no header was found; this keeps a
    data row that happens to contain a stray keyword from being chosen.
    """
    best_index = -1
    best_count = 0
    for i, row in enumerate(grid[:scan_rows]):
        count = alias_index.count_distinct_matches(row)
        if count > best_count:
            best_count = count
            best_index = i

    if best_index == -1 or best_count < min_matches:
        logger.debug("header not found: best_index=%d best_count=%d", best_index, best_count)
        raise HeaderRowNotFoundError("Could not identify a valid header row.", HEADER_GUIDANCE)

    logger.debug("header row=%d matched_fields=%d", best_index, best_count)
    return best_index, best_count


def map_columns(
    header_row: Sequence[Any],
    header_row_index: int,
    definitions: Sequence[FieldDefinition] = FIELD_DEFINITIONS,
) -> dict[str, int]:
    """Map every field key to the column index holding it.

    Columns are scanned left to right and the first exact (normalized) alias
    match wins, so a duplicated header silently resolves to its leftmost column.
    All fields are required: if any is unmatched, MissingColumnsError lists
    every missing canonical name at once.
    """
    headers = [normalize_header(cell_to_text(cell)) for cell in header_row]
    column_map: dict[str, int] = {}
    missing: list[str] = []
    for fd in definitions:
        aliases = fd.normalized_aliases
        found = next((ci for ci, text in enumerate(headers) if text in aliases), None)
        if found is None:
            missing.append(fd.canonical_name)
        else:
            column_map[fd.key] = found

    if missing:
        logger.debug("header row=%d missing=%s", header_row_index, missing)
        raise MissingColumnsError(missing, header_row_index)
    return column_map
