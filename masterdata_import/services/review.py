from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from ..excel.coercion import coerce_record
from ..models.import_outcome import ExtractedRecord
from ..models.master_data import validate_master_data
from ..models.parsed_row import ParsedRow, RowStatus
from ..models.processing_result import SyncResult

"""Review step state: parsed rows awaiting sync.

ReviewSession owns the list of ParsedRow for one upload and exposes the only
ways to change it (status updates, edits, removal, retry, sync bookkeeping).
Every edit re-validates just the edited row.

Rows are addressed by ParsedRow.index, the row's position in the source sheet.
"""

__all__ = [
    "ReviewCounts",
    "ReviewSession",
    "build_parsed_row",
    "build_parsed_rows",
]

logger = logging.getLogger(__name__)

NETWORK_ERROR_MESSAGE = "Network or Sync Error"


def build_parsed_row(record: ExtractedRecord) -> ParsedRow:
    data = coerce_record(record)
    errors = validate_master_data(data.to_dict())
    return ParsedRow(index=record.row_index, data=data, is_valid=not errors, errors=errors)


def build_parsed_rows(records: Iterable[ExtractedRecord]) -> list[ParsedRow]:
    return [build_parsed_row(r) for r in records]


@dataclass(frozen=True)
class ReviewCounts:
    total: int
    valid: int
    invalid: int
    synced: int
    pending: int  # 同期待ち (valid かつ未成功)
    failed: int


class ReviewSession:
    """In-memory review table for one upload."""

    def __init__(self, rows: Iterable[ParsedRow] = ()) -> None:
        self._rows: list[ParsedRow] = []
        self.load(rows)

    # -- loading -----------------------------------------------------------

    @classmethod
    def from_records(cls, records: Iterable[ExtractedRecord]) -> ReviewSession:
        return cls(build_parsed_rows(records))

    def load(self, rows: Iterable[ParsedRow]) -> None:
        self._rows = list(rows)
        indexes = [r.index for r in self._rows]
        if len(set(indexes)) != len(indexes):
            raise ValueError("duplicate row index in review session")

    def reset(self) -> None:
        self._rows = []

    # -- queries -----------------------------------------------------------

    @property
    def rows(self) -> tuple[ParsedRow, ...]:
        return tuple(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self):
        return iter(self._rows)

    def get(self, index: int) -> ParsedRow | None:
        for row in self._rows:
            if row.index == index:
                return row
        return None

    def syncable_rows(self) -> list[ParsedRow]:
        return [r for r in self._rows if r.is_syncable]

    def counts(self) -> ReviewCounts:
        rows = self._rows
        return ReviewCounts(
            total=len(rows),
            valid=sum(1 for r in rows if r.is_valid),
            invalid=sum(1 for r in rows if not r.is_valid),
            synced=sum(1 for r in rows if r.status is RowStatus.SUCCESS),
            pending=sum(1 for r in rows if r.is_syncable),
            failed=sum(1 for r in rows if r.status is RowStatus.ERROR),
        )

    # -- transitions -------------------------------------------------------

    def _replace(self, index: int, fn) -> ParsedRow | None:
        for pos, row in enumerate(self._rows):
            if row.index == index:
                updated = fn(row)
                self._rows[pos] = updated
                return updated
        return None

    def update_row_status(
        self, index: int, status: RowStatus, message: str | None = None
    ) -> ParsedRow | None:
        return self._replace(index, lambda r: r.with_status(status, message))

    def update_row_data(self, index: int, changes: Mapping[str, Any]) -> ParsedRow | None:
        """Merge ``changes`` into the row's data and re-validate that row only.

        A key mapped to None clears the value; keys not present are left alone.
        Unknown keys raise KeyError.
        """

        def merge(row: ParsedRow) -> ParsedRow:
            merged = row.data.merged(changes)
            return row.with_data(merged, validate_master_data(merged.to_dict()))

        return self._replace(index, merge)

    def remove_row(self, index: int) -> bool:
        before = len(self._rows)
        self._rows = [r for r in self._rows if r.index != index]
        return len(self._rows) != before

    def retry(self, index: int) -> bool:
        """Re-arm one failed row for the next sync. Only ERROR rows are re-armed."""
        row = self.get(index)
        if row is None or row.status is not RowStatus.ERROR:
            return False
        self.update_row_status(index, RowStatus.IDLE)
        return True

    # -- sync bookkeeping --------------------------------------------------

    def mark_pending(self, indexes: Iterable[int]) -> None:
        wanted = set(indexes)
        self._rows = [
            r.with_status(RowStatus.PENDING) if r.index in wanted else r for r in self._rows
        ]

    def apply_results(self, results: Sequence[SyncResult]) -> int:
        """Merge per-row results; returns how many rows left PENDING.

        A row only transitions out of PENDING once, so a late or duplicate result
        for a row that is no longer pending is ignored.
        """
        by_index: dict[int, SyncResult] = {}
        for res in results:
            by_index.setdefault(res.index, res)
        applied = 0
        for pos, row in enumerate(self._rows):
            res = by_index.get(row.index)
            if res is None or row.status is not RowStatus.PENDING:
                continue
            status = RowStatus.SUCCESS if res.success else RowStatus.ERROR
            self._rows[pos] = row.with_status(status, res.message)
            applied += 1
        unknown = set(by_index) - {r.index for r in self._rows}
        if unknown:
            logger.debug("ignored results for unknown rows: %s", sorted(unknown))
        return applied

    def mark_failed(self, indexes: Iterable[int], message: str = NETWORK_ERROR_MESSAGE) -> int:
        wanted = set(indexes)
        failed = 0
        for pos, row in enumerate(self._rows):
            if row.index in wanted and row.status is RowStatus.PENDING:
                self._rows[pos] = row.with_status(RowStatus.ERROR, message)
                failed += 1
        return failed
