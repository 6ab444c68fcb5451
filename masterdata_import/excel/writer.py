from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.field_definition import FIELD_DEFINITIONS
from ..models.import_outcome import ExtractedRecord
from .coercion import coerce_record

"""Canonical master-data template writer.

Rewrites parsed records into the layout the lab's template uses: a title row,
a group row (Megger Test / No Load Test), the canonical headers, then one row
per record with typed values. Used to clean up spreadsheets whose headers only
matched through aliases.
"""

__all__ = [
    "TITLE",
    "DEFAULT_SHEET_NAME",
    "canonical_rows",
    "write_canonical_workbook",
]

logger = logging.getLogger(__name__)

TITLE = "MASTER DATA"
DEFAULT_SHEET_NAME = "Master Data"


def canonical_rows(records: Sequence[ExtractedRecord]) -> list[list[Any]]:
    rows: list[list[Any]] = [
        [TITLE],
        [fd.group or "" for fd in FIELD_DEFINITIONS],
        [fd.canonical_name for fd in FIELD_DEFINITIONS],
    ]
    for record in records:
        values = coerce_record(record).to_dict()
        # None は空セルとして書く
        rows.append(["" if values[fd.key] is None else values[fd.key] for fd in FIELD_DEFINITIONS])
    return rows


def write_canonical_workbook(
    records: Sequence[ExtractedRecord],
    path: Path,
    sheet_name: str = DEFAULT_SHEET_NAME,
) -> Path:
    rows = canonical_rows(records)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    logger.info("wrote canonical workbook %s rows=%d", path, len(records))
    return path
