from __future__ import annotations

from collections.abc import Sequence
from typing import Literal

from ..models.delivery import DeliveryData, Region
from ..models.processing_result import DeliveryTotals
from ..pipeline.cells import percentage

"""Read-only views over a record set (filtering, ordering, bands, totals).

Nothing here mutates records; the CLI `show` command and the SUMMARY line are
built from these helpers.
"""

__all__ = [
    "SortOrder",
    "filter_by_region",
    "sort_records",
    "route_number",
    "delivery_band",
    "route_band",
    "totals",
]

SortOrder = Literal["asc", "desc", "alpha"]
Band = Literal["green", "yellow", "red"]


def filter_by_region(records: Sequence[DeliveryData], region: Region | None) -> list[DeliveryData]:
    """All records when region is None."""
    if region is None:
        return list(records)
    return [r for r in records if r.region is region]


def sort_records(records: Sequence[DeliveryData], order: SortOrder = "asc") -> list[DeliveryData]:
    """Sort for display.

    Args:
        records: records to sort (not modified)
        order: "asc" / "desc" by delivery_percentage, "alpha" by driver name

    Returns:
        A new sorted list; ties keep input order

    Raises:
        ValueError: on an unknown order
    """
    if order == "asc":
        return sorted(records, key=lambda r: r.delivery_percentage)
    if order == "desc":
        return sorted(records, key=lambda r: r.delivery_percentage, reverse=True)
    if order == "alpha":
        return sorted(records, key=lambda r: r.driver.casefold())
    raise ValueError(f"unknown sort order: {order!r}")


def route_number(records: Sequence[DeliveryData], record: DeliveryData) -> int:
    """1-based position of ``record`` among the same driver's legs ordered by id; 0 if absent."""
    same_driver = sorted((r for r in records if r.driver == record.driver), key=lambda r: r.id)
    for i, r in enumerate(same_driver, start=1):
        if r.id == record.id:
            return i
    return 0


def delivery_band(pct: int) -> Band:
    if pct >= 98:
        return "green"
    if pct >= 91:
        return "yellow"
    return "red"


def route_band(pct: int) -> Band:
    if pct == 100:
        return "green"
    if pct >= 96:
        return "yellow"
    return "red"


def totals(records: Sequence[DeliveryData]) -> DeliveryTotals:
    """Footer totals; the delivery percentage is over summed orders, not averaged."""
    total_orders = sum(r.total_orders for r in records)
    delivered = sum(r.delivered for r in records)
    return DeliveryTotals(
        records=len(records),
        total_orders=total_orders,
        delivered=delivered,
        pending=sum(r.pending for r in records),
        unsuccessful=sum(r.unsuccessful for r in records),
        delivery_percentage=percentage(delivered, total_orders),
    )
