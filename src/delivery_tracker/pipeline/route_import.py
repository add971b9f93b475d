from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from functools import reduce

from ..config.loader import TrackerConfig
from ..models.delivery import DeliveryData
from .cells import ImportedRow, cell_text
from .regions import classify_route_region

"""Route-export (VUUPT) importer.

The export is a flat list of rows where column A carries a row-type marker:

    A = "Agente:"   B = driver name     -> start a new leg for that driver
    A = "Veículo:"  B = vehicle label   -> vehicle of the current leg
    A = "Início:"   B = origin label    -> origin of the current leg
    G = code, H = title                 -> one stop on the current leg

Stop rows are recognized by G or H alone: a row whose column A (the stop
sequence number) is blank still counts as a stop.

The scan is a fold over the rows carrying (current driver, legs by driver).
Legs of the same driver are never merged; each becomes its own record.
"""

__all__ = [
    "import_route_export",
]

logger = logging.getLogger(__name__)

AGENT_MARKER = "Agente:"
VEHICLE_MARKER = "Veículo:"
START_MARKER = "Início:"


@dataclass
class _Leg:
    codes: list[str] = field(default_factory=list)
    titles: list[str] = field(default_factory=list)
    vehicle: str | None = None
    origin: str | None = None


@dataclass(frozen=True)
class _ScanState:
    current_driver: str = ""
    # insertion order = first appearance of each driver
    legs: dict[str, list[_Leg]] = field(default_factory=dict)

    def current_leg(self) -> _Leg | None:
        if not self.current_driver:
            return None
        driver_legs = self.legs.get(self.current_driver)
        return driver_legs[-1] if driver_legs else None


def _scan_row(state: _ScanState, row: ImportedRow, config: TrackerConfig) -> _ScanState:
    cell_a = cell_text(row.get("A"))
    value_b = cell_text(row.get("B"))

    if AGENT_MARKER in cell_a and value_b:
        legs = dict(state.legs)
        legs[value_b] = [*legs.get(value_b, []), _Leg()]
        return replace(state, current_driver=value_b, legs=legs)

    leg = state.current_leg()
    if VEHICLE_MARKER in cell_a and value_b:
        if leg is not None:
            leg.vehicle = value_b
        return state
    if START_MARKER in cell_a and value_b:
        if leg is not None:
            leg.origin = value_b
        return state

    code = cell_text(row.get("G"))
    title = cell_text(row.get("H"))
    if leg is None or not (code or title):
        return state

    if config.is_broker(state.current_driver):
        # brokers are tracked by title only; column G is ignored
        if title:
            leg.codes.append(title)
            leg.titles.append(title)
    else:
        leg.codes.append(code or title)
        leg.titles.append(title)
    return state


def _finalize(driver: str, leg: _Leg, route_count: int, config: TrackerConfig) -> DeliveryData:
    broker = config.is_broker(driver)
    total_orders = len(leg.titles) if broker else len(leg.codes)
    region = classify_route_region(leg.vehicle, leg.origin, driver, config)
    return DeliveryData(
        id=str(uuid.uuid4()),
        driver=driver,
        region=region,
        total_orders=total_orders,
        routes=route_count,  # legs of this driver, repeated on each leg
        delivered=0,
        pending=total_orders,
        unsuccessful=0,
        delivery_percentage=0,
        route_percentage=0,
        service_codes=list(leg.titles if broker else leg.codes),
    )


def import_route_export(rows: Sequence[ImportedRow], config: TrackerConfig) -> list[DeliveryData]:
    """Build one DeliveryData per route leg.

    Args:
        rows: letter-keyed rows of a route export
        config: supplies the broker-exception list and region tokens

    Returns:
        Records sorted ascending by delivery_percentage (stable)
    """
    state = reduce(lambda acc, row: _scan_row(acc, row, config), rows, _ScanState())

    result: list[DeliveryData] = []
    for driver, legs in state.legs.items():
        for leg in legs:
            result.append(_finalize(driver, leg, len(legs), config))

    logger.info(f"route export: drivers={len(state.legs)} legs={len(result)}")
    return sorted(result, key=lambda r: r.delivery_percentage)
