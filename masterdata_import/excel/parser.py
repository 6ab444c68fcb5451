from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path
from typing import Any

from ..config.loader import ImportConfig
from ..models.field_definition import DEFAULT_ALIAS_INDEX, AliasIndex
from ..models.import_outcome import ImportFailure, ImportOutcome, ImportSuccess, ParseResult
from .errors import EmptySpreadsheetError, SpreadsheetImportError
from .extractor import extract_records
from .headers import locate_header_row, map_columns
from .reader import check_upload, read_first_sheet

"""Spreadsheet import pipeline facade.

parse_grid runs header location, column mapping and row extraction over an
in-memory grid and raises SpreadsheetImportError subclasses. parse_workbook adds
the file-level checks and converts any import error into an ImportFailure, so
callers always get exactly one of ImportSuccess / ImportFailure back.

Both are pure apart from reading the file and safe to re-run on re-upload.
"""

__all__ = [
    "parse_grid",
    "parse_workbook",
]

logger = logging.getLogger(__name__)


def parse_grid(
    grid: Sequence[Sequence[Any]],
    config: ImportConfig | None = None,
    alias_index: AliasIndex = DEFAULT_ALIAS_INDEX,
) -> ParseResult:
    cfg = config or ImportConfig()
    if len(grid) == 0:
        raise EmptySpreadsheetError("The spreadsheet appears to be empty.")

    header_index, _ = locate_header_row(
        grid,
        alias_index,
        scan_rows=cfg.header_scan_rows,
        min_matches=cfg.min_header_matches,
    )
    column_map = map_columns(grid[header_index], header_index, alias_index.definitions)
    return extract_records(grid, header_index, column_map)


def parse_workbook(path: Path, config: ImportConfig | None = None) -> ImportOutcome:
    """Parse the first sheet of an uploaded workbook."""
    cfg = config or ImportConfig()
    try:
        check_upload(path, cfg.max_file_size_bytes)
        sheet_name, grid = read_first_sheet(path)
        result = parse_grid(grid, cfg)
    except SpreadsheetImportError as e:
        logger.warning("import failed file=%s type=%s: %s", path.name, e.error_type, e.message)
        return e.to_failure()
    except Exception as e:
        # 想定外の例外も構造化エラーとして返す (呼び出し側は常に Outcome を受け取る)
        logger.exception("unexpected error while parsing %s", path.name)
        return ImportFailure(
            message="Failed to parse the uploaded file.",
            details=str(e) or "Unknown error occurred.",
            error_type="READ_ERROR",
        )

    logger.info(
        "parsed file=%s sheet=%s header_row=%d records=%d skipped=%d total=%d",
        path.name,
        sheet_name,
        result.header_row_index + 1,
        len(result.records),
        result.skipped_rows,
        result.total_rows,
    )
    return ImportSuccess(replace(result, sheet_name=sheet_name))
