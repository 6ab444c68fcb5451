from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, ImportConfig, load_config
from ..db.batch_insert import DatabaseSyncTransport
from ..excel.errors import SpreadsheetImportError
from ..excel.headers import locate_header_row
from ..excel.parser import parse_workbook
from ..excel.reader import inspect_workbook, read_first_sheet
from ..excel.writer import write_canonical_workbook
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, set_debug, setup_logging
from ..models.error_record import ErrorRecord
from ..models.import_outcome import ImportFailure, ParseResult
from ..services.review import ReviewSession
from ..services.summary import render_summary_line
from ..services.sync import SyncTransport, sync_rows
from ..services.workflow import ImportWorkflow, WorkflowStep

"""CLI entrypoint.

    masterdata-import [--config PATH] [--debug] inspect FILE [--rows N]
    masterdata-import [--config PATH] [--debug] parse FILE
    masterdata-import [--config PATH] [--debug] import FILE [--dry-run]
    masterdata-import [--config PATH] [--debug] normalize FILE -o OUT

Exit codes: 0 success, 1 fatal (config, unreadable file, headers), 2 partial
(invalid rows or rows that failed to sync).

DISABLE_DB_CONNECT=1 turns every import into a dry run (used by tests).
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2

FILE_LEVEL_ROW = -1


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env with python-dotenv; .env values win over the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="masterdata-import",
        description="Motor master-data spreadsheet -> PostgreSQL importer",
    )
    p.add_argument("--config", type=Path, default=None, help="Config YAML (default: config/import.yml)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    p_inspect = sub.add_parser("inspect", help="Print the first rows of every sheet and the detected header")
    p_inspect.add_argument("file", type=Path)
    p_inspect.add_argument("--rows", type=int, default=10, help="Rows to dump per sheet")

    p_parse = sub.add_parser("parse", help="Parse and validate without syncing")
    p_parse.add_argument("file", type=Path)

    p_import = sub.add_parser("import", help="Parse, validate and store valid rows")
    p_import.add_argument("file", type=Path)
    p_import.add_argument("--dry-run", action="store_true", help="Validate only; do not connect to the database")

    p_norm = sub.add_parser("normalize", help="Rewrite a spreadsheet into the canonical template")
    p_norm.add_argument("file", type=Path)
    p_norm.add_argument("-o", "--output", type=Path, required=True)
    return p.parse_args(argv)


def _resolve_config(path: Path | None) -> ImportConfig:
    # 明示指定されたファイルが無い場合はエラー、既定パスが無い場合は既定値
    if path is not None:
        return load_config(path)
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return ImportConfig()


def _report_failure(logger, failure: ImportFailure) -> None:
    logger.error(failure.message)
    if failure.details:
        for line in failure.details.splitlines():
            if line.strip():
                logger.error(f"  {line.strip()}")


def _log_file_failure(error_log: ErrorLogBuffer, source: str, failure: ImportFailure) -> None:
    error_log.append(
        ErrorRecord.create(
            file=source,
            row=FILE_LEVEL_ROW,
            error_type=failure.error_type,
            message=str(failure).replace("\n", " ").strip(),
        )
    )


def _log_invalid_rows(error_log: ErrorLogBuffer, source: str, session: ReviewSession) -> None:
    for row in session:
        for key, message in row.errors.items():
            error_log.append(
                ErrorRecord.create(
                    file=source,
                    row=row.index + 1,
                    field=key,
                    error_type="VALIDATION_ERROR",
                    message=message,
                )
            )


def _inspect(cfg: ImportConfig, path: Path, rows: int) -> int:
    logger = setup_logging()
    try:
        dumps = inspect_workbook(path, max_rows=rows)
        _, grid = read_first_sheet(path)
    except SpreadsheetImportError as e:
        _report_failure(logger, e.to_failure())
        return EXIT_FATAL

    for dump in dumps:
        print(f"SHEET: {dump.sheet_name} rows={dump.row_count}")
        for r, cells in dump.rows:
            rendered = ", ".join(f"[{c}] {v!r} ({t})" for c, v, t in cells)
            print(f"  row {r + 1}: {rendered}")

    try:
        header_index, count = locate_header_row(
            grid, scan_rows=cfg.header_scan_rows, min_matches=cfg.min_header_matches
        )
    except SpreadsheetImportError as e:
        print(f"header: not found ({e.message})")
    else:
        print(f"header: row {header_index + 1} matched_fields={count}")
    return EXIT_SUCCESS_ALL


def _parse(cfg: ImportConfig, path: Path) -> int:
    logger = setup_logging()
    outcome = parse_workbook(path, cfg)
    if isinstance(outcome, ImportFailure):
        _report_failure(logger, outcome)
        return EXIT_FATAL

    session = ReviewSession.from_records(outcome.result.records)
    for row in session:
        if row.is_valid:
            continue
        problems = "; ".join(f"{k}: {m}" for k, m in row.errors.items())
        logger.warning(f"row {row.index + 1}: {problems}")
    counts = session.counts()
    logger.info(
        f"records={counts.total} valid={counts.valid} invalid={counts.invalid} "
        f"skipped={outcome.result.skipped_rows}"
    )
    return EXIT_SUCCESS_ALL if counts.invalid == 0 else EXIT_PARTIAL_FAILURE


def _build_transport(cfg: ImportConfig) -> SyncTransport:
    return DatabaseSyncTransport(cfg.database, cfg.table_name)


def _import(cfg: ImportConfig, path: Path, dry_run: bool) -> int:
    logger = setup_logging()
    error_log = ErrorLogBuffer(cfg.logs_directory)
    workflow = ImportWorkflow()
    source = path.name

    workflow.select_file(source, path.stat().st_size if path.exists() else 0)
    outcome = parse_workbook(path, cfg)
    if isinstance(outcome, ImportFailure):
        workflow.parse_failed(outcome)
        _report_failure(logger, outcome)
        _log_file_failure(error_log, source, outcome)
        _flush(logger, error_log)
        return EXIT_FATAL

    result: ParseResult = outcome.result
    workflow.parse_succeeded(result)
    session = ReviewSession.from_records(result.records)
    _log_invalid_rows(error_log, source, session)
    workflow.complete_step(WorkflowStep.REVIEW)
    workflow.go_to(WorkflowStep.TESTING)

    report = None
    if dry_run:
        logger.info(f"dry run: {len(session.syncable_rows())} rows would be synced")
    else:
        report = sync_rows(
            session,
            _build_transport(cfg),
            chunk_size=cfg.sync.chunk_size,
            concurrency=cfg.sync.concurrency,
            error_log=error_log,
            source_name=source,
        )

    counts = session.counts()
    summary_line = render_summary_line(result, counts, report)
    log_summary(summary_line[len("SUMMARY "):])
    _flush(logger, error_log)

    if counts.invalid > 0 or counts.failed > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def _flush(logger, error_log: ErrorLogBuffer) -> None:
    written = error_log.flush()
    if written is not None:
        logger.info(f"error log: {written}")


def _normalize(cfg: ImportConfig, path: Path, output: Path) -> int:
    logger = setup_logging()
    outcome = parse_workbook(path, cfg)
    if isinstance(outcome, ImportFailure):
        _report_failure(logger, outcome)
        return EXIT_FATAL
    write_canonical_workbook(outcome.result.records, output)
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときだけ sys.argv を読む (テストの main([]) に pytest の引数を混ぜない)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    set_debug(args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    try:
        cfg = _resolve_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.command == "inspect":
        return _inspect(cfg, args.file, args.rows)
    if args.command == "parse":
        return _parse(cfg, args.file)
    if args.command == "normalize":
        return _normalize(cfg, args.file, args.output)

    dry_run = args.dry_run or os.getenv("DISABLE_DB_CONNECT") == "1"
    if dry_run and not args.dry_run:
        logger.debug("DB connect disabled via DISABLE_DB_CONNECT=1 -> dry run")
    return _import(cfg, args.file, dry_run)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
