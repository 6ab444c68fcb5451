from __future__ import annotations

import doctest
from datetime import UTC, datetime

import masterdata_import.services.summary as summary_mod
from masterdata_import.models.import_outcome import ParseResult
from masterdata_import.models.processing_result import SyncReport
from masterdata_import.services.review import ReviewCounts
from masterdata_import.services.summary import format_seconds, render_summary_line


def test_format_seconds():
    assert format_seconds(0) == "0"
    assert format_seconds(2.0) == "2"
    assert format_seconds(1.23456) == "1.235"
    assert format_seconds(0.0012) == "0.0012"
    assert "e" not in format_seconds(0.0000012)


def test_render_with_report():
    now = datetime.now(UTC)
    report = SyncReport(attempted=4, succeeded=3, failed=1, batches=1,
                        start_time=now, end_time=now, elapsed_seconds=1.5)
    line = render_summary_line(
        ParseResult(records=[], total_rows=6, skipped_rows=1),
        ReviewCounts(total=5, valid=4, invalid=1, synced=3, pending=1, failed=1),
        report,
    )
    assert line == "SUMMARY rows=6 records=5 skipped=1 valid=4 invalid=1 synced=3 failed=1 elapsed_sec=1.5"


def test_doctests():
    failures, _ = doctest.testmod(summary_mod)
    assert failures == 0
