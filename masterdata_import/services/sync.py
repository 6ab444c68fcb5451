from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from datetime import UTC, datetime

from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.parsed_row import ParsedRow, RowStatus
from ..models.processing_result import BatchStatsAccumulator, SyncItem, SyncReport, SyncResult
from .progress import ProgressTracker
from .review import NETWORK_ERROR_MESSAGE, ReviewSession

"""Batch sync orchestration.

Valid rows that have not been stored yet are sent to the batch-create call in
fixed-size chunks, with at most ``concurrency`` chunks in flight. Batches may
finish in any order; their per-row results are merged back into the review
session on the calling thread as each batch completes.

A batch whose call raises (connection lost, timeout, server crash) marks all of
its rows ERROR with a generic network message, which is distinct from the
per-row rejections the remote side returns. There is no cancellation of
in-flight batches.
"""

__all__ = [
    "SyncTransport",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_CONCURRENCY",
    "NO_RESULT_MESSAGE",
    "chunk_rows",
    "sync_rows",
]

logger = logging.getLogger(__name__)

SyncTransport = Callable[[list[SyncItem]], list[SyncResult]]

DEFAULT_CHUNK_SIZE = 20
DEFAULT_CONCURRENCY = 5
NO_RESULT_MESSAGE = "No result returned for row"


def chunk_rows(rows: Sequence[ParsedRow], chunk_size: int) -> list[list[ParsedRow]]:
    if chunk_size < 1:
        raise ValueError("chunk_size must be >= 1")
    return [list(rows[i : i + chunk_size]) for i in range(0, len(rows), chunk_size)]


def _record_failures(
    error_log: ErrorLogBuffer | None,
    source_name: str,
    session: ReviewSession,
    indexes: Sequence[int],
    error_type: str,
) -> None:
    if error_log is None:
        return
    for index in indexes:
        row = session.get(index)
        if row is None or row.status is not RowStatus.ERROR:
            continue
        error_log.append(
            ErrorRecord.create(
                file=source_name,
                row=index + 1,
                error_type=error_type,
                message=row.message or "sync failed",
            )
        )


def sync_rows(
    session: ReviewSession,
    transport: SyncTransport,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    concurrency: int = DEFAULT_CONCURRENCY,
    error_log: ErrorLogBuffer | None = None,
    source_name: str = "",
) -> SyncReport:
    """Send every syncable row of ``session`` through ``transport``.

    Rows already in SUCCESS are never sent again. Returns a SyncReport for
    this run only.
    """
    start_time = datetime.now(UTC)
    pending = session.syncable_rows()
    if not pending:
        end_time = datetime.now(UTC)
        return SyncReport(
            attempted=0,
            succeeded=0,
            failed=0,
            batches=0,
            start_time=start_time,
            end_time=end_time,
            elapsed_seconds=(end_time - start_time).total_seconds(),
        )

    attempted = [r.index for r in pending]
    session.mark_pending(attempted)
    chunks = chunk_rows(pending, chunk_size)
    logger.info(
        "sync start rows=%d batches=%d chunk_size=%d concurrency=%d",
        len(pending),
        len(chunks),
        chunk_size,
        concurrency,
    )

    stats = BatchStatsAccumulator()

    def run_batch(batch: list[SyncItem]) -> list[SyncResult]:
        t0 = time.perf_counter()
        try:
            return transport(batch)
        finally:
            stats.add_batch_time(time.perf_counter() - t0)

    failed_batches = 0
    with ProgressTracker(len(chunks)) as progress:
        with ThreadPoolExecutor(max_workers=max(1, concurrency)) as pool:
            futures: dict[Future[list[SyncResult]], list[int]] = {}
            for chunk in chunks:
                batch = [SyncItem(index=r.index, data=r.data.to_dict()) for r in chunk]
                futures[pool.submit(run_batch, batch)] = [r.index for r in chunk]

            for future in as_completed(futures):
                indexes = futures[future]
                try:
                    results = future.result()
                except Exception as e:
                    failed_batches += 1
                    logger.error("batch sync failed rows=%s: %s", indexes, e)
                    session.mark_failed(indexes, NETWORK_ERROR_MESSAGE)
                    _record_failures(error_log, source_name, session, indexes, "TRANSPORT_ERROR")
                    progress.finish_batch(success=False)
                    continue

                own = set(indexes)
                session.apply_results([res for res in results if res.index in own])
                # 結果が返らなかった行は pending のまま残さない
                session.mark_failed(indexes, NO_RESULT_MESSAGE)
                _record_failures(error_log, source_name, session, indexes, "SYNC_ERROR")
                progress.finish_batch(success=True)
                counts = session.counts()
                progress.set_postfix(synced=counts.synced, failed=counts.failed)

    attempted_rows = [session.get(i) for i in attempted]
    succeeded = sum(1 for r in attempted_rows if r is not None and r.status is RowStatus.SUCCESS)
    failed = sum(1 for r in attempted_rows if r is not None and r.status is RowStatus.ERROR)
    total_batches, avg_batch, p95_batch = stats.get_stats()
    end_time = datetime.now(UTC)
    report = SyncReport(
        attempted=len(attempted),
        succeeded=succeeded,
        failed=failed,
        batches=total_batches,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        avg_batch_seconds=avg_batch,
        p95_batch_seconds=p95_batch,
        failed_batches=failed_batches,
    )
    logger.info(
        "sync done attempted=%d succeeded=%d failed=%d failed_batches=%d",
        report.attempted,
        report.succeeded,
        report.failed,
        report.failed_batches,
    )
    return report
