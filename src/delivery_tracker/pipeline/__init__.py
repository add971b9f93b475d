"""Normalization and reconciliation pipeline.

Entry points used by the CLI / any presentation layer:

    import_rows(rows)                 sheet rows -> DeliveryData records
    reconcile_status(records, rows)   apply a status sheet to prior records
    merge_batch(existing, incoming)   accumulate import batches by id

All three are pure: they never raise on malformed input and never persist.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..config.loader import TrackerConfig, default_config
from ..models.delivery import DeliveryData
from .cells import ImportedRow
from .detector import looks_like_fleet_management
from .fleet_import import import_fleet_management
from .merge import merge_batch
from .reconcile import mark_code, reconcile
from .route_import import import_route_export

__all__ = [
    "ImportedRow",
    "import_rows",
    "reconcile_status",
    "merge_batch",
    "mark_code",
]

logger = logging.getLogger(__name__)


def import_rows(rows: Sequence[ImportedRow], config: TrackerConfig | None = None) -> list[DeliveryData]:
    """Detect the sheet schema and run the matching importer."""
    cfg = config or default_config()
    if looks_like_fleet_management(rows):
        logger.info("import sheet schema: fleet")
        return import_fleet_management(rows, cfg)
    logger.info("import sheet schema: route")
    return import_route_export(rows, cfg)


def reconcile_status(
    records: Sequence[DeliveryData],
    status_rows: Sequence[ImportedRow],
    config: TrackerConfig | None = None,
) -> list[DeliveryData]:
    """Update records from a status sheet (fleet counts or per-code statuses)."""
    return reconcile(records, status_rows, config or default_config())
