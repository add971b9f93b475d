from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""IssueRecord model for the non-fatal issue log.

The pipeline never aborts on malformed input; instead the orchestrator records
what it had to skip (unreadable file, undetected header, empty import, store
decode failure) as one JSON Lines record per issue. row=-1 marks a file-level
issue where no specific row applies.
"""

__all__ = [
    "IssueRecord",
]

# Known issue types (UPPER_SNAKE)
READ_ERROR = "READ_ERROR"
FLEET_HEADER_NOT_FOUND = "FLEET_HEADER_NOT_FOUND"
EMPTY_IMPORT = "EMPTY_IMPORT"
NO_STATUS_MATCH = "NO_STATUS_MATCH"
STORE_DECODE_ERROR = "STORE_DECODE_ERROR"


@dataclass(frozen=True)
class IssueRecord:
    """Structured issue record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Spreadsheet (or store) file name
        sheet: Sheet name, or "<FILE_LEVEL>"
        row: Row number (1-based). -1 when unknown
        issue_type: Classification in UPPER_SNAKE_CASE
        message: Human readable description
    """
    timestamp: str
    file: str
    sheet: str
    row: int
    issue_type: str
    message: str

    @staticmethod
    def create(file: str, sheet: str, row: int, issue_type: str, message: str) -> IssueRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return IssueRecord(
            timestamp=ts,
            file=file,
            sheet=sheet,
            row=row,
            issue_type=issue_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
