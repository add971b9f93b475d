from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace
from functools import reduce

from ..models.delivery import DeliveryData
from .cells import percentage

"""Merge/dedup of accumulated import batches.

Records sharing an id are combined by summing counts and concatenating code
lists. Merging is not idempotent: folding the same batch in twice doubles
its counts.
"""

__all__ = [
    "merge_batch",
    "combine",
]

logger = logging.getLogger(__name__)


def combine(existing: DeliveryData, current: DeliveryData) -> DeliveryData:
    """Combine two records with the same id; the first keeps driver/region."""
    total = existing.total_orders + current.total_orders
    delivered = existing.delivered + current.delivered
    pending = existing.pending + current.pending
    return replace(
        existing,
        total_orders=total,
        routes=existing.routes + current.routes,
        delivered=delivered,
        pending=pending,
        unsuccessful=existing.unsuccessful + current.unsuccessful,
        delivery_percentage=percentage(delivered, total),
        route_percentage=percentage(total - pending, total),
        service_codes=[*existing.service_codes, *current.service_codes],
        successful_codes=[*existing.successful_codes, *current.successful_codes],
        unsuccessful_codes=[*existing.unsuccessful_codes, *current.unsuccessful_codes],
        sender_map={**existing.sender_map, **current.sender_map},
    )


def _fold(acc: dict[str, DeliveryData], record: DeliveryData) -> dict[str, DeliveryData]:
    previous = acc.get(record.id)
    acc[record.id] = record if previous is None else combine(previous, record)
    return acc


def merge_batch(existing: Sequence[DeliveryData], incoming: Sequence[DeliveryData]) -> list[DeliveryData]:
    """Append ``incoming`` to ``existing``, combining records that share an id.

    First-seen order is kept; non-colliding records pass through unchanged.
    """
    merged = reduce(_fold, [*existing, *incoming], {})
    collisions = len(existing) + len(incoming) - len(merged)
    logger.debug(f"merge: existing={len(existing)} incoming={len(incoming)} combined_ids={collisions}")
    return list(merged.values())
