from __future__ import annotations

import re

from masterdata_import.cli.__main__ import main as cli_main

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY rows=\d+ records=\d+ skipped=\d+ valid=\d+ invalid=\d+ "
    r"synced=\d+ failed=\d+ elapsed_sec=\d+(\.\d+)?$",
    re.MULTILINE,
)


def test_summary_line_format(temp_workdir, make_workbook, master_grid, monkeypatch, capsys):
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")
    cli_main(["import", str(make_workbook("m.xlsx", {"S": master_grid}))])
    out = capsys.readouterr().out
    matches = SUMMARY_PATTERN.findall(out)
    assert len(matches) == 1


def test_no_summary_on_fatal(temp_workdir, make_workbook, capsys, monkeypatch):
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")
    cli_main(["import", str(make_workbook("bad.xlsx", {"S": [["a"], ["b"]]}))])
    assert "SUMMARY" not in capsys.readouterr().out
