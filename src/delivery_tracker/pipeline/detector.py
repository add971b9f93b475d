from __future__ import annotations

import logging
from collections.abc import Sequence

from ..models.status import StatusSchema
from .cells import ImportedRow, is_blank

"""Schema sniffing for import sheets and status sheets.

Both checks are heuristics: false positives / negatives are possible and
accepted. Neither raises.
"""

__all__ = [
    "looks_like_fleet_management",
    "detect_status_schema",
]

logger = logging.getLogger(__name__)

SCAN_ROWS = 5

FLEET_STATUS_COLUMNS = ("A", "AI", "AJ")
FLEET_STATUS_KEY_TOKENS = ("carga", "entregues", "baixas")


def looks_like_fleet_management(rows: Sequence[ImportedRow]) -> bool:
    """True iff at least two of the three fleet header markers appear in the first rows.

    Markers: "motorista"; "quantidade" + "volumes"; "usuário" + "carregamento".
    Presence is OR'd across every string cell of the scanned rows.
    """
    has_driver = has_volumes = has_loading_user = False

    for row in rows[:SCAN_ROWS]:
        for value in row.values():
            if not isinstance(value, str) or not value:
                continue
            lower = value.lower()
            if "motorista" in lower:
                has_driver = True
            if "quantidade" in lower and "volumes" in lower:
                has_volumes = True
            if "usuário" in lower and "carregamento" in lower:
                has_loading_user = True

    logger.debug(
        f"fleet detection: driver={has_driver} volumes={has_volumes} loading_user={has_loading_user}"
    )
    return sum((has_driver, has_volumes, has_loading_user)) >= 2


def detect_status_schema(rows: Sequence[ImportedRow]) -> StatusSchema:
    """FLEET if any row fills A / AI / AJ or has a load / delivered / returned header key."""
    for row in rows:
        if any(not is_blank(row.get(col)) for col in FLEET_STATUS_COLUMNS):
            return StatusSchema.FLEET
        for key in row.keys():
            lower = str(key).lower()
            if any(token in lower for token in FLEET_STATUS_KEY_TOKENS):
                return StatusSchema.FLEET
    return StatusSchema.ROUTE
