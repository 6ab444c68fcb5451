from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from masterdata_import.excel.errors import (
    FileTooLargeError,
    SpreadsheetReadError,
    UnsupportedFileError,
)
from masterdata_import.excel.parser import parse_workbook
from masterdata_import.excel.reader import check_upload, inspect_workbook, read_first_sheet
from masterdata_import.services.review import build_parsed_rows


def test_read_first_sheet_only(make_workbook):
    path = make_workbook(
        "two_sheets.xlsx",
        {
            "First": [["Title"], ["Sr. No.", "Model"], [1, "A"]],
            "Second": [["ignored"]],
        },
    )
    name, grid = read_first_sheet(path)
    assert name == "First"
    assert len(grid) == 3
    assert grid[1] == ["Sr. No.", "Model"]
    assert grid[2][0] == 1
    # 空セルは NaN ではなく ""
    assert grid[0][1] == ""


def test_read_first_sheet_unreadable(tmp_path: Path):
    path = tmp_path / "broken.xlsx"
    path.write_bytes(b"garbage")
    with pytest.raises(SpreadsheetReadError) as ei:
        read_first_sheet(path)
    assert ei.value.message == "Failed to parse the uploaded file."
    assert ei.value.structural is True


def test_check_upload(tmp_path: Path):
    ok = tmp_path / "a.XLSX"
    ok.write_bytes(b"x" * 10)
    check_upload(ok, max_bytes=100)

    with pytest.raises(UnsupportedFileError):
        check_upload(tmp_path / "a.txt")
    with pytest.raises(SpreadsheetReadError):
        check_upload(tmp_path / "missing.xls")
    with pytest.raises(FileTooLargeError) as ei:
        check_upload(ok, max_bytes=5)
    assert "a.XLSX" in ei.value.details


def test_inspect_workbook(make_workbook):
    path = make_workbook(
        "inspect.xlsx",
        {"S1": [["MASTER DATA"], ["Sr. No.", "Model"], [1, "A"], [2, "B"]], "S2": [["x", 1.5]]},
    )
    dumps = inspect_workbook(path, max_rows=2)
    assert [d.sheet_name for d in dumps] == ["S1", "S2"]
    s1 = dumps[0]
    assert s1.row_count == 4
    assert len(s1.rows) == 2
    # 空セルは出力しない
    assert s1.rows[0] == (0, [(0, "MASTER DATA", "str")])
    assert s1.rows[1][1][1] == (1, "Model", "str")
    assert dumps[1].rows[0][1][1] == (1, 1.5, "float")


def test_na_like_text_is_kept(make_workbook, headers, data_row):
    path = make_workbook(
        "na.xlsx",
        {"Sheet1": [headers, data_row(1, model="NA"), data_row(2, model="None", minRPM="N/A")]},
    )
    _, grid = read_first_sheet(path)
    assert grid[1][1] == "NA"
    assert grid[2][1] == "None"
    assert "N/A" in grid[2]


def test_na_like_model_survives_import(make_workbook, headers, data_row):
    path = make_workbook(
        "na.xlsx",
        {"Sheet1": [headers, data_row(1, model="NA"), data_row(2, model="None"), data_row(3, model="#N/A")]},
    )
    outcome = parse_workbook(path)
    assert outcome.ok
    records = outcome.result.records
    assert [r.get("model") for r in records] == ["NA", "None", "#N/A"]
    rows = build_parsed_rows(records)
    assert all(r.is_valid for r in rows)
    assert [r.data.model for r in rows] == ["NA", "None", "#N/A"]


def test_inspect_workbook_sheet_decode_failure(make_workbook, monkeypatch):
    path = make_workbook("inspect.xlsx", {"S1": [["x"]]})

    def broken(self, *args, **kwargs):
        raise ValueError("bad cell record")

    monkeypatch.setattr(pd.ExcelFile, "parse", broken)
    with pytest.raises(SpreadsheetReadError) as ei:
        inspect_workbook(path)
    assert ei.value.message == "Could not read sheet 'S1' from the file."
    assert "bad cell record" in ei.value.details
