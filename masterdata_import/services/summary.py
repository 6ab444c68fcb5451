from __future__ import annotations

from ..models.import_outcome import ParseResult
from ..models.processing_result import SyncReport
from .review import ReviewCounts

"""SUMMARY line rendering.

Format:
SUMMARY rows={total} records={records} skipped={skipped} valid={valid}
invalid={invalid} synced={synced} failed={failed} elapsed_sec={elapsed}
"""

__all__ = [
    "format_seconds",
    "render_summary_line",
]


def format_seconds(seconds: float) -> str:
    """Render seconds without scientific notation or a trailing ``.0``."""
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(
    result: ParseResult,
    counts: ReviewCounts,
    report: SyncReport | None = None,
) -> str:
    """Render the SUMMARY line for one import run.

    ``synced``/``failed`` are row totals from the review table, so rows that
    were synced in an earlier run of the same session are included.

    >>> from masterdata_import.models.import_outcome import ParseResult
    >>> from masterdata_import.services.review import ReviewCounts
    >>> render_summary_line(
    ...     ParseResult(records=[], total_rows=6, skipped_rows=1),
    ...     ReviewCounts(total=5, valid=4, invalid=1, synced=4, pending=0, failed=0),
    ... )
    'SUMMARY rows=6 records=5 skipped=1 valid=4 invalid=1 synced=4 failed=0 elapsed_sec=0'
    """
    elapsed = report.elapsed_seconds if report is not None else 0.0
    return (
        f"SUMMARY rows={result.total_rows} "
        f"records={counts.total} "
        f"skipped={result.skipped_rows} "
        f"valid={counts.valid} "
        f"invalid={counts.invalid} "
        f"synced={counts.synced} "
        f"failed={counts.failed} "
        f"elapsed_sec={format_seconds(elapsed)}"
    )
