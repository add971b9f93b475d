from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Literal

from ..models import issue_record
from ..models.issue_record import IssueRecord
from ..models.status import StatusSchema

"""Issue log buffering.

- JSON Lines with a fixed key set (IssueRecord)
- One `logs/issues-YYYYMMDD-HHMMSS.log` (UTC) per run, created on first flush
- Buffered in memory; the orchestrator flushes once per run
- One helper per issue kind the pipeline records, all file-level (row=-1)
"""

__all__ = [
    "IssueRecord",
    "IssueLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class IssueLogBuffer:
    """In-memory buffer for issue records. Flush appends JSON Lines.

    Not thread safe (single synchronous run).
    """
    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[IssueRecord] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir or LOGS_DIR

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"issues-{stamp}.log"
        return self._file_path

    @property
    def records(self) -> list[IssueRecord]:
        return list(self._records)

    def append(self, record: IssueRecord) -> None:
        self._records.append(record)

    def add(self, file: str, issue_type: str, message: str, *, sheet: str = "<FILE_LEVEL>", row: int = -1) -> None:
        self.append(IssueRecord.create(file=file, sheet=sheet, row=row, issue_type=issue_type, message=message))

    def read_error(self, file: str, error: Exception) -> None:
        """The file could not be opened or decoded as a workbook."""
        self.add(file, issue_record.READ_ERROR, str(error))

    def fleet_header_not_found(self, file: str) -> None:
        """A fleet load report whose header row is not within the scanned rows."""
        self.add(file, issue_record.FLEET_HEADER_NOT_FOUND, "fleet header row not found")

    def empty_import(self, file: str, layout: Literal["fleet", "route"]) -> None:
        """The sheet decoded but produced no records."""
        if layout == "fleet":
            message = "no loads with id, driver and unit count"
        else:
            message = "no driver legs found"
        self.add(file, issue_record.EMPTY_IMPORT, message)

    def no_status_match(self, file: str, schema: StatusSchema) -> None:
        self.add(file, issue_record.NO_STATUS_MATCH, f"{schema.value} status sheet matched no record")

    def store_decode_error(self, file: str, message: str) -> None:
        self.add(file, issue_record.STORE_DECODE_ERROR, message)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records; returns the log path, or None if nothing was written."""
        if not self._records:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
