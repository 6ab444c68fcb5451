from __future__ import annotations

import pytest

from masterdata_import.excel.parser import parse_grid
from masterdata_import.models.master_record import MasterDataRecord
from masterdata_import.models.parsed_row import ParsedRow, RowStatus
from masterdata_import.models.processing_result import SyncResult
from masterdata_import.services.review import NETWORK_ERROR_MESSAGE, ReviewSession, build_parsed_row


@pytest.fixture()
def session(master_grid, data_row) -> ReviewSession:
    grid = master_grid[:-1] + [data_row(6, maxCurrent="n/a", model="")]
    return ReviewSession.from_records(parse_grid(grid).records)


def test_build_parsed_rows(session):
    assert len(session) == 6
    first = session.get(2)
    assert first.is_valid
    assert first.status is RowStatus.IDLE
    assert first.data.phase == 3
    assert first.data.direction == 1

    bad = session.get(7)
    assert not bad.is_valid
    # "n/a" は None に変換されるので model のみエラー
    assert bad.errors == {"model": "Model is required"}


def test_counts(session):
    counts = session.counts()
    assert (counts.total, counts.valid, counts.invalid) == (6, 5, 1)
    assert (counts.synced, counts.pending, counts.failed) == (0, 5, 0)


def test_duplicate_index_rejected():
    row = ParsedRow(index=1, data=MasterDataRecord(model="M"), is_valid=True)
    with pytest.raises(ValueError):
        ReviewSession([row, row])


def test_update_row_data_revalidates_only_that_row(session):
    fixed = session.update_row_data(7, {"model": "BLDC-X"})
    assert fixed.is_valid and fixed.errors == {}
    assert fixed.data.model == "BLDC-X"
    broken = session.update_row_data(2, {"minVoltage": "abc"})
    assert broken.errors == {"minVoltage": "Min. Voltage (V) must be a number"}
    # 不正な値もそのまま保持される
    assert broken.data.min_voltage == "abc"
    assert session.get(3).is_valid
    # None で値をクリア
    cleared = session.update_row_data(2, {"minVoltage": None})
    assert cleared.is_valid and cleared.data.min_voltage is None
    assert session.update_row_data(999, {"model": "x"}) is None
    with pytest.raises(KeyError):
        session.update_row_data(2, {"remarks": "x"})


def test_remove_row(session):
    assert session.remove_row(7) is True
    assert session.remove_row(7) is False
    assert session.counts().invalid == 0


def test_status_transitions(session):
    session.mark_pending([2, 3])
    assert session.get(2).status is RowStatus.PENDING

    applied = session.apply_results(
        [
            SyncResult(index=2, success=True),
            SyncResult(index=3, success=False, message="duplicate model"),
            SyncResult(index=2, success=False, message="late duplicate"),
            SyncResult(index=4, success=True),  # pending ではない
            SyncResult(index=99, success=True),
        ]
    )
    assert applied == 2
    assert session.get(2).status is RowStatus.SUCCESS
    assert session.get(3).status is RowStatus.ERROR
    assert session.get(3).message == "duplicate model"
    assert session.get(4).status is RowStatus.IDLE

    # 成功済みの行は再送対象にならない
    assert 2 not in [r.index for r in session.syncable_rows()]
    assert 3 in [r.index for r in session.syncable_rows()]


def test_mark_failed_only_touches_pending(session):
    session.mark_pending([2, 3])
    session.apply_results([SyncResult(index=2, success=True)])
    assert session.mark_failed([2, 3, 4]) == 1
    assert session.get(2).status is RowStatus.SUCCESS
    assert session.get(3).message == NETWORK_ERROR_MESSAGE
    assert session.get(4).status is RowStatus.IDLE


def test_retry_only_rearms_error_rows(session):
    session.mark_pending([2])
    session.mark_failed([2], "boom")
    assert session.retry(2) is True
    row = session.get(2)
    assert row.status is RowStatus.IDLE and row.message is None
    assert session.retry(2) is False
    assert session.retry(404) is False


def test_update_row_status_and_reset(session):
    row = session.update_row_status(5, RowStatus.ERROR, "manual")
    assert row.message == "manual"
    session.reset()
    assert len(session) == 0
    assert session.counts().total == 0


def test_build_parsed_row_keeps_source_index(master_grid):
    record = parse_grid(master_grid).records[0]
    row = build_parsed_row(record)
    assert row.index == record.row_index == 2
