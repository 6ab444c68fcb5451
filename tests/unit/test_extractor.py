from __future__ import annotations

import pytest

from masterdata_import.excel.errors import NoDataRowsError
from masterdata_import.excel.extractor import extract_records, is_empty_row, parse_identifier
from masterdata_import.excel.headers import map_columns


@pytest.mark.parametrize(
    "text,expected",
    [("12", 12), ("12.0", 12), (" 7 ", 7), ("3a", 3), ("-1", -1), ("", None), ("abc", None), ("#", None)],
)
def test_parse_identifier(text, expected):
    assert parse_identifier(text) == expected


def test_is_empty_row():
    assert is_empty_row([])
    assert is_empty_row(None)
    assert is_empty_row(["", None, "   "])
    assert not is_empty_row(["", 0])


def test_extract_counts_and_skips(master_grid):
    column_map = map_columns(master_grid[1], 1)
    result = extract_records(master_grid, 1, column_map)
    assert [r.sr_no for r in result.records] == [1, 2, 3, 4, 5]
    assert result.total_rows == 6
    assert result.skipped_rows == 1
    assert result.header_row_index == 1
    assert result.records[0].row_index == 2
    assert result.records[0].record_id == "record-1-2"


def test_extract_values_are_trimmed_text(headers, data_row):
    grid = [headers, data_row(1, model="  BLDC  X ", minCurrent=0.5, maxPower=250.0)]
    result = extract_records(grid, 0, map_columns(headers, 0))
    rec = result.records[0]
    assert rec.get("model") == "BLDC X"
    assert rec.get("minCurrent") == "0.5"
    assert rec.get("maxPower") == "250"
    assert rec.get("unknown") == ""


def test_extract_short_rows_yield_blank_values(headers):
    grid = [headers, [9, "Short"]]
    rec = extract_records(grid, 0, map_columns(headers, 0)).records[0]
    assert rec.sr_no == 9
    assert rec.get("direction") == ""


def test_blank_rows_are_skipped(headers, data_row):
    grid = [headers, [], ["", ""], data_row(1)]
    result = extract_records(grid, 0, map_columns(headers, 0))
    assert len(result.records) == 1
    assert result.skipped_rows == 2
    assert result.total_rows == 3


def test_no_data_rows(headers):
    with pytest.raises(NoDataRowsError) as ei:
        extract_records([headers, ["", "note"]], 0, map_columns(headers, 0))
    assert ei.value.message == "No valid data rows found."
    assert ei.value.details == 'Rows must have a valid "Sr. No." value.'


def test_header_only_grid(headers):
    with pytest.raises(NoDataRowsError):
        extract_records([headers], 0, map_columns(headers, 0))
