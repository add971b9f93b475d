"""Courier delivery tracker.

Normalizes route-planning (VUUPT) and fleet-management (TMS) spreadsheet
exports into per-driver DeliveryData records and reconciles later status
sheets against them.
"""

from .models.delivery import DeliveryData, Region
from .pipeline import import_rows, mark_code, merge_batch, reconcile_status

__version__ = "0.3.0"

__all__ = [
    "DeliveryData",
    "Region",
    "import_rows",
    "reconcile_status",
    "merge_batch",
    "mark_code",
]
