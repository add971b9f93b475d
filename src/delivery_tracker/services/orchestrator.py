from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, datetime
from pathlib import Path

from ..config.loader import TrackerConfig
from ..excel.reader import KeyedBy, SpreadsheetReadError, decode_spreadsheet
from ..logging.issue_log import IssueLogBuffer
from ..models.delivery import DeliveryData
from ..models.processing_result import FileStat, RunResult
from ..pipeline import import_rows, mark_code, merge_batch, reconcile_status
from ..pipeline.cells import ImportedRow
from ..pipeline.detector import detect_status_schema, looks_like_fleet_management
from ..pipeline.fleet_import import find_header_row
from ..pipeline.reconcile import Outcome
from ..store.json_store import JsonRecordStore
from .progress import ProgressTracker
from .views import totals

"""Run orchestration for the delivery tracker.

Coordinates one CLI command: decode each spreadsheet, run the pipeline entry
point, fold the result into the stored record set, save once, flush the issue
log and return a RunResult for the SUMMARY line.

A file that cannot be decoded is recorded as an issue and counted as failed;
the remaining files are still processed.
"""

logger = logging.getLogger(__name__)

SPREADSHEET_SUFFIXES = (".xlsx", ".xlsm", ".xls")


class ProcessingError(Exception):
    """Fatal run-level error."""


def scan_spreadsheets(paths: Iterable[Path]) -> list[Path]:
    """Expand directories (non-recursive) into spreadsheet files, keep files as given.

    Raises:
        ProcessingError: if a path does not exist
    """
    found: list[Path] = []
    for path in paths:
        if not path.exists():
            raise ProcessingError(f"path not found: {path}")
        if path.is_dir():
            found.extend(sorted(p for p in path.iterdir() if p.is_file() and p.suffix.lower() in SPREADSHEET_SUFFIXES))
        else:
            found.append(path)
    return found


def _record_import_issues(file_name: str, rows: Sequence[ImportedRow], produced: int, issue_log: IssueLogBuffer) -> str:
    """Classify the sheet for FileStat and record silent-empty outcomes as issues."""
    if looks_like_fleet_management(rows):
        if find_header_row(rows) is None:
            issue_log.fleet_header_not_found(file_name)
        elif produced == 0:
            issue_log.empty_import(file_name, "fleet")
        return "fleet"
    if produced == 0:
        issue_log.empty_import(file_name, "route")
    return "route"


def _run(
    paths: Sequence[Path],
    store: JsonRecordStore,
    issue_log: IssueLogBuffer,
    keyed_by: KeyedBy,
    step: Callable[[Path, list[DeliveryData], list[ImportedRow]], tuple[list[DeliveryData], int, str]],
) -> RunResult:
    start_time = datetime.now(UTC)
    records = store.load()
    file_stats: list[FileStat] = []
    success_count = failed_count = 0

    with ProgressTracker(len(paths)) as progress:
        for path in paths:
            progress.start_file(path)
            file_start = datetime.now(UTC)
            try:
                rows = decode_spreadsheet(path, keyed_by=keyed_by)
            except SpreadsheetReadError as e:
                logger.error(f"read: {e}")
                issue_log.read_error(path.name, e)
                failed_count += 1
                file_stats.append(FileStat(path.name, "failed", 0, (datetime.now(UTC) - file_start).total_seconds()))
                progress.finish_file(success=False)
                continue

            records, produced, schema = step(path, records, rows)
            success_count += 1
            file_stats.append(
                FileStat(path.name, "success", produced, (datetime.now(UTC) - file_start).total_seconds(), schema)
            )
            logger.info(f"{path.name}: schema={schema} records={produced}")
            progress.set_postfix(ok=success_count, failed=failed_count)
            progress.finish_file(success=True)

    store.save(records)
    log_path = issue_log.flush()
    if log_path is not None:
        logger.warning(f"issues written to {log_path}")

    end_time = datetime.now(UTC)
    return RunResult(
        success_files=success_count,
        failed_files=failed_count,
        totals=totals(records),
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
    )


def run_import(
    paths: Sequence[Path],
    config: TrackerConfig,
    store: JsonRecordStore,
    issue_log: IssueLogBuffer,
) -> RunResult:
    """Import route / fleet exports and merge them into the stored record set."""

    def step(path: Path, records: list[DeliveryData], rows: list[ImportedRow]) -> tuple[list[DeliveryData], int, str]:
        batch = import_rows(rows, config)
        schema = _record_import_issues(path.name, rows, len(batch), issue_log)
        return merge_batch(records, batch), len(batch), schema

    return _run(paths, store, issue_log, "letter", step)


def run_status(
    paths: Sequence[Path],
    config: TrackerConfig,
    store: JsonRecordStore,
    issue_log: IssueLogBuffer,
    keyed_by: KeyedBy = "header",
) -> RunResult:
    """Apply status sheets, in order, to the stored record set."""

    def step(path: Path, records: list[DeliveryData], rows: list[ImportedRow]) -> tuple[list[DeliveryData], int, str]:
        if not records:
            logger.warning("no stored records: import route/fleet exports before applying status sheets")
        schema = detect_status_schema(rows)
        updated = reconcile_status(records, rows, config)
        changed = sum(1 for before, after in zip(records, updated, strict=True) if before != after)
        if records and changed == 0:
            issue_log.no_status_match(path.name, schema)
        return updated, changed, schema.value

    return _run(paths, store, issue_log, keyed_by, step)


def run_mark(store: JsonRecordStore, record_id: str, code: str, outcome: Outcome) -> DeliveryData:
    """Manually classify one code of one stored record and save.

    Raises:
        ProcessingError: if no stored record has ``record_id``, or the record
            has no such service code
    """
    records = store.load()
    if not any(r.id == record_id for r in records):
        raise ProcessingError(f"record not found: {record_id}")
    try:
        updated = mark_code(records, record_id, code, outcome)
    except ValueError as e:
        raise ProcessingError(str(e)) from e
    store.save(updated)
    return next(r for r in updated if r.id == record_id)
