from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import psycopg2
from psycopg2.extras import execute_values

from ..config.loader import DatabaseConfig
from ..models.field_definition import FIELD_KEYS
from ..models.master_data import parse_master_data
from ..models.processing_result import SyncItem, SyncResult
from .connection import connect

"""Batch-create call for master-data rows.

insert_master_data issues one ``INSERT ... VALUES %s RETURNING id`` through
psycopg2.extras.execute_values. DatabaseSyncTransport is the callable handed to
services.sync: it re-validates each item, inserts the valid ones in a single
statement and, if that statement fails, rolls back and retries row by row under
savepoints so every item gets its own success/failure result.

Column names are the canonical camelCase field keys plus "dateTime", quoted.
"""

__all__ = [
    "INSERT_COLUMNS",
    "BatchInsertError",
    "SyncTransportError",
    "BatchMetrics",
    "insert_master_data",
    "DatabaseSyncTransport",
]

logger = logging.getLogger(__name__)

INSERT_COLUMNS: tuple[str, ...] = FIELD_KEYS + ("dateTime",)


class BatchInsertError(Exception):
    pass


class SyncTransportError(Exception):
    """The database could not be reached or the transaction could not complete."""


@dataclass(frozen=True)
class BatchMetrics:
    """Timing for a single INSERT statement."""
    batch_size: int
    elapsed_seconds: float
    start_time: float  # time.time()
    end_time: float


def insert_master_data(
    cursor: Any,
    table: str,
    records: Sequence[dict[str, Any]],
    *,
    timestamp: datetime,
    metrics_callback: Callable[[BatchMetrics], None] | None = None,
) -> list[Any]:
    """Insert ``records`` and return the generated ids in input order.

    Parameters
    ----------
    cursor: psycopg2 cursor
    table: target table (validated by the config schema)
    records: canonical payloads (missing keys insert NULL)
    timestamp: value stored in "dateTime" for every row
    metrics_callback: receives BatchMetrics; not called for empty input
    """
    rows = [[rec.get(key) for key in FIELD_KEYS] + [timestamp] for rec in records]
    if not rows:
        return []

    cols_sql = ",".join(f'"{c}"' for c in INSERT_COLUMNS)
    sql = f'INSERT INTO "{table}" ({cols_sql}) VALUES %s RETURNING id'

    start_time = time.time()
    try:
        returned = execute_values(cursor, sql, rows, page_size=len(rows), fetch=True)
    except Exception as e:
        raise BatchInsertError(str(e)) from e
    finally:
        end_time = time.time()
        if metrics_callback is not None:
            metrics_callback(
                BatchMetrics(
                    batch_size=len(rows),
                    elapsed_seconds=end_time - start_time,
                    start_time=start_time,
                    end_time=end_time,
                )
            )

    ids = [r[0] for r in (returned or [])]
    if len(ids) != len(rows):
        raise BatchInsertError(f"expected {len(rows)} ids from RETURNING, got {len(ids)}")
    return ids


class DatabaseSyncTransport:
    """Callable transport: list[SyncItem] -> list[SyncResult]."""

    def __init__(
        self,
        db_config: DatabaseConfig,
        table: str,
        connect_fn: Callable[[DatabaseConfig], AbstractContextManager[Any]] = connect,
    ) -> None:
        self.db_config = db_config
        self.table = table
        self._connect = connect_fn

    def __call__(self, items: list[SyncItem]) -> list[SyncResult]:
        results: list[SyncResult] = []
        valid: list[tuple[int, dict[str, Any]]] = []
        for item in items:
            payload, errors = parse_master_data(item.data)
            if payload is None:
                results.append(
                    SyncResult(
                        index=item.index,
                        success=False,
                        message="Validation failed: " + ", ".join(errors.values()),
                    )
                )
            else:
                valid.append((item.index, payload))

        if not valid:
            return results

        try:
            with self._connect(self.db_config) as conn:
                cur = conn.cursor()
                try:
                    results.extend(self._store(conn, cur, valid))
                finally:
                    cur.close()
                conn.commit()
        except (psycopg2.OperationalError, psycopg2.InterfaceError) as e:
            raise SyncTransportError(str(e)) from e
        return results

    def _store(
        self, conn: Any, cur: Any, valid: list[tuple[int, dict[str, Any]]]
    ) -> list[SyncResult]:
        now = datetime.now()
        try:
            ids = insert_master_data(cur, self.table, [p for _, p in valid], timestamp=now)
        except BatchInsertError as e:
            logger.warning("batch insert failed rows=%d, retrying per row: %s", len(valid), e)
            conn.rollback()
        else:
            return [
                SyncResult(index=i, success=True, data={**p, "id": id_, "dateTime": now})
                for (i, p), id_ in zip(valid, ids)
            ]

        out: list[SyncResult] = []
        for index, payload in valid:
            cur.execute("SAVEPOINT sync_row")
            try:
                (id_,) = insert_master_data(cur, self.table, [payload], timestamp=now)
            except BatchInsertError as e:
                cur.execute("ROLLBACK TO SAVEPOINT sync_row")
                logger.debug("row %d rejected: %s", index, e)
                out.append(SyncResult(index=index, success=False, message=str(e) or "Database error"))
            else:
                cur.execute("RELEASE SAVEPOINT sync_row")
                out.append(
                    SyncResult(
                        index=index,
                        success=True,
                        data={**payload, "id": id_, "dateTime": now},
                    )
                )
        return out
