from __future__ import annotations

import statistics
from dataclasses import dataclass
from datetime import datetime
from typing import Any

"""Sync result models for the batch-create round trip.

SyncItem / SyncResult are the request and response entries exchanged with the
batch-create call; results are matched back to review rows by ``index``.
SyncReport aggregates one sync run for the SUMMARY line and logs.
"""

__all__ = [
    "SyncItem",
    "SyncResult",
    "SyncReport",
    "BatchStatsAccumulator",
]


@dataclass(frozen=True)
class SyncItem:
    index: int  # ParsedRow.index
    data: dict[str, Any]


@dataclass(frozen=True)
class SyncResult:
    """Per-record outcome returned by the batch-create call."""
    index: int
    success: bool
    message: str | None = None
    data: dict[str, Any] | None = None  # 保存済みレコード (id 等)


@dataclass(frozen=True)
class SyncReport:
    """Aggregated outcome of one sync run."""
    attempted: int  # pending に遷移した行数
    succeeded: int
    failed: int
    batches: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    avg_batch_seconds: float = 0.0
    p95_batch_seconds: float = 0.0
    failed_batches: int = 0


class BatchStatsAccumulator:
    """Collects per-batch timings and summarizes them."""

    def __init__(self) -> None:
        self.batch_times: list[float] = []

    def add_batch_time(self, elapsed_seconds: float) -> None:
        self.batch_times.append(elapsed_seconds)

    def get_stats(self) -> tuple[int, float, float]:
        """Return (total_batches, avg_batch_seconds, p95_batch_seconds)."""
        if not self.batch_times:
            return (0, 0.0, 0.0)

        total_batches = len(self.batch_times)
        avg_batch_seconds = statistics.mean(self.batch_times)
        if total_batches == 1:
            p95_batch_seconds = self.batch_times[0]
        else:
            # 20 分位の 19 番目 = p95
            p95_batch_seconds = statistics.quantiles(
                self.batch_times, n=20, method="inclusive"
            )[18]
        return (total_batches, avg_batch_seconds, p95_batch_seconds)
