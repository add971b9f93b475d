from __future__ import annotations

import logging
from collections.abc import Sequence

from ..config.loader import TrackerConfig
from ..models.delivery import DeliveryData
from .cells import ImportedRow, cell_text, parse_int
from .regions import classify_fleet_region

"""Fleet-management (TMS) importer.

Layout (column letters):
    A  load id ("ID Carga")          F  driver ("Motorista")
    K  branch code                   P  unit count ("Quantidade de Volumes")
    Q  loading user ("Usuário Carregamento")

The header row sits somewhere in the first rows; everything after it is data.
Each load becomes one record keyed by its load id so a later status sheet can
update it by exact key. Unit-level service codes are not synthesized.
"""

__all__ = [
    "HEADER_SCAN_ROWS",
    "find_header_row",
    "import_fleet_management",
]

logger = logging.getLogger(__name__)

HEADER_SCAN_ROWS = 10


def _is_header(row: ImportedRow) -> bool:
    load_id = cell_text(row.get("A")).lower()
    driver = cell_text(row.get("F")).lower()
    quantity = cell_text(row.get("P")).lower()
    user = cell_text(row.get("Q")).lower()
    return (
        "id" in load_id
        and "carga" in load_id
        and "motorista" in driver
        and "quantidade" in quantity
        and "usuário" in user
    )


def find_header_row(rows: Sequence[ImportedRow]) -> int | None:
    """Index of the header row within the first HEADER_SCAN_ROWS rows, else None."""
    for i, row in enumerate(rows[:HEADER_SCAN_ROWS]):
        if _is_header(row):
            logger.debug(f"fleet header found at row index {i}")
            return i
    return None


def _is_ignored(driver: str, config: TrackerConfig) -> bool:
    lower = driver.lower()
    return any(name.lower() in lower for name in config.ignored_fleet_drivers)


def import_fleet_management(rows: Sequence[ImportedRow], config: TrackerConfig) -> list[DeliveryData]:
    """Build one DeliveryData per load.

    Returns an empty list when the header row cannot be found. Rows without a
    load id, driver or a positive unit count are skipped.
    """
    header_index = find_header_row(rows)
    if header_index is None:
        logger.warning(f"fleet header not found in the first {HEADER_SCAN_ROWS} rows")
        return []

    result: list[DeliveryData] = []
    for row in rows[header_index + 1:]:
        load_id = cell_text(row.get("A"))
        driver = cell_text(row.get("F")) or load_id
        units = parse_int(row.get("P")) or 0
        loading_user = cell_text(row.get("Q"))
        branch = cell_text(row.get("K"))

        if not (load_id and driver and units > 0):
            continue

        result.append(
            DeliveryData(
                id=load_id,
                driver=driver,
                region=classify_fleet_region(branch, driver, loading_user, config),
                total_orders=units,
                routes=1,
                delivered=0,
                pending=units,
                unsuccessful=0,
                delivery_percentage=0,
                route_percentage=0,
                service_codes=[],
            )
        )

    kept = [r for r in result if not _is_ignored(r.driver, config)]
    logger.info(f"fleet export: loads={len(result)} ignored_drivers={len(result) - len(kept)}")
    return sorted(kept, key=lambda r: r.delivery_percentage)
