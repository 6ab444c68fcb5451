from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

from .errors import FileTooLargeError, NoSheetsError, SpreadsheetReadError, UnsupportedFileError

"""Workbook access.

Only the first sheet of an upload is imported. It is read without a header
(``header=None``) as a raw grid of Python values; blank cells come back as ""
rather than NaN so every later stage can treat the grid as plain text.
"""

__all__ = [
    "ALLOWED_SUFFIXES",
    "SheetDump",
    "check_upload",
    "read_first_sheet",
    "inspect_workbook",
]

ALLOWED_SUFFIXES = (".xlsx", ".xls")

Grid = list[list[Any]]


@dataclass
class SheetDump:
    sheet_name: str
    row_count: int
    # (行インデックス, [(列インデックス, 値, 型名), ...])
    rows: list[tuple[int, list[tuple[int, Any, str]]]]


def check_upload(path: Path, max_bytes: int | None = None) -> None:
    """Reject files the importer cannot accept before opening them."""
    if path.suffix.lower() not in ALLOWED_SUFFIXES:
        raise UnsupportedFileError(
            "Unsupported file type.",
            f"Expected an XLSX or XLS file, got '{path.name}'.",
        )
    if not path.exists():
        raise SpreadsheetReadError("Failed to parse the uploaded file.", f"file not found: {path}")
    if max_bytes is not None:
        size = path.stat().st_size
        if size > max_bytes:
            raise FileTooLargeError(
                "The uploaded file is too large.",
                f"{path.name} is {size / (1024 * 1024):.1f} MB; the limit is "
                f"{max_bytes / (1024 * 1024):.0f} MB.",
            )


def _parse_sheet(xls: pd.ExcelFile, sheet: str | int) -> pd.DataFrame:
    # "NA" や "None" などの文字列は値として残す (空セルのみ NaN)
    return xls.parse(sheet, header=None, dtype=object, keep_default_na=False, na_values=[])


def _frame_to_grid(df: pd.DataFrame) -> Grid:
    # NaN -> "" (空セル = 空文字)
    return df.astype(object).where(pd.notna(df), "").values.tolist()


def _open(path: Path) -> pd.ExcelFile:
    try:
        return pd.ExcelFile(path)
    except Exception as e:
        raise SpreadsheetReadError("Failed to parse the uploaded file.", str(e)) from e


def read_first_sheet(path: Path) -> tuple[str, Grid]:
    """Read the first sheet of ``path`` as (sheet_name, grid)."""
    xls = _open(path)
    with xls:
        if not xls.sheet_names:
            raise NoSheetsError("The uploaded file contains no sheets.")
        sheet_name = str(xls.sheet_names[0])
        try:
            df = _parse_sheet(xls, xls.sheet_names[0])
        except Exception as e:
            raise SpreadsheetReadError(
                "Could not read the first sheet from the file.", str(e)
            ) from e
    return sheet_name, _frame_to_grid(df)


def inspect_workbook(path: Path, max_rows: int = 10) -> list[SheetDump]:
    """Dump the first rows of every sheet (non-empty cells only) for diagnostics."""
    dumps: list[SheetDump] = []
    xls = _open(path)
    with xls:
        for name in xls.sheet_names:
            try:
                df = _parse_sheet(xls, name)
            except Exception as e:
                raise SpreadsheetReadError(
                    f"Could not read sheet '{name}' from the file.", str(e)
                ) from e
            grid = _frame_to_grid(df)
            rows: list[tuple[int, list[tuple[int, Any, str]]]] = []
            for r, row in enumerate(grid[:max_rows]):
                cells = [
                    (c, val, type(val).__name__)
                    for c, val in enumerate(row)
                    if val != "" and val is not None
                ]
                rows.append((r, cells))
            dumps.append(SheetDump(sheet_name=str(name), row_count=len(grid), rows=rows))
    return dumps
