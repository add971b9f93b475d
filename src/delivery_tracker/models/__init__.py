"""Domain models for the delivery tracker.

DeliveryData / Region are the pipeline's output entity; the status models
support the reconciler; IssueRecord and the run result models support the
orchestration layer.
"""

from .delivery import DeliveryData, Region
from .issue_record import IssueRecord
from .processing_result import DeliveryTotals, FileStat, RunResult
from .status import FleetStatus, StatusEntry, StatusObservation, StatusSchema

__all__ = [
    # Pipeline entities
    "DeliveryData",
    "Region",
    # Status reconciliation
    "FleetStatus",
    "StatusEntry",
    "StatusObservation",
    "StatusSchema",
    # Orchestration
    "DeliveryTotals",
    "FileStat",
    "IssueRecord",
    "RunResult",
]
