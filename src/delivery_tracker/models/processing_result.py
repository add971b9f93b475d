from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Run result models for the delivery tracker CLI.

A run is one CLI command (import / status) over one or more spreadsheet files.
These models carry the aggregated outcome rendered as the SUMMARY line.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-file outcome."""
    file_name: str
    status: str  # success / failed
    records: int  # records produced (import) or records updated (status)
    elapsed_seconds: float
    schema: str | None = None  # route / fleet, None when unreadable


@dataclass(frozen=True)
class DeliveryTotals:
    """Aggregate counts over a record set."""
    records: int
    total_orders: int
    delivered: int
    pending: int
    unsuccessful: int
    delivery_percentage: int


@dataclass(frozen=True)
class RunResult:
    """Aggregated results of one run."""
    success_files: int
    failed_files: int
    totals: DeliveryTotals  # over the stored record set after the run
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] | None = None

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files
