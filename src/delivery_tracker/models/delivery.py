from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

"""DeliveryData domain model and Region enum.

DeliveryData is the unified per-driver (route-export) or per-load
(fleet-management) record produced by the importers, updated by the status
reconciler and combined by merge/dedup.

Lifecycle: created once per import batch -> replaced (dataclasses.replace)
on every status update -> merged when batches accumulate -> removed only by
an explicit clear.
"""

__all__ = [
    "Region",
    "DeliveryData",
]


class Region(Enum):
    """Closed set of operating regions.

    - UNCLASSIFIED: placeholder before classification / unknown stored label
    - SAO_PAULO: region A (city + Pari depot)
    - RIO_DE_JANEIRO: region B (second city)
    - NESPRESSO: region C (brand operation)
    - DAFITI: region D (Barueri depot, brokers, default)
    """
    UNCLASSIFIED = "Unclassified"
    SAO_PAULO = "São Paulo"
    RIO_DE_JANEIRO = "Rio De Janeiro"
    NESPRESSO = "Nespresso"
    DAFITI = "Dafiti"

    @classmethod
    def from_label(cls, label: Any) -> Region:
        """Resolve a stored/configured label, falling back to UNCLASSIFIED."""
        if isinstance(label, Region):
            return label
        text = str(label or "").strip()
        for region in cls:
            if text == region.value or text.upper() == region.name:
                return region
        return cls.UNCLASSIFIED


@dataclass(frozen=True)
class DeliveryData:
    """One delivery record (a route leg or a fleet load).

    Invariant after every recompute: delivered + unsuccessful + pending ==
    total_orders, with pending clamped at zero. Percentages are integers
    0..100 and 0 when total_orders is 0.
    """
    id: str                      # uuid per route leg / load id for fleet records
    driver: str
    region: Region
    total_orders: int
    routes: int
    delivered: int = 0
    pending: int = 0
    unsuccessful: int = 0
    delivery_percentage: int = 0
    route_percentage: int = 0
    service_codes: list[str] = field(default_factory=list)      # empty for fleet records
    successful_codes: list[str] = field(default_factory=list)
    unsuccessful_codes: list[str] = field(default_factory=list)
    sender_map: dict[str, str] = field(default_factory=dict)    # code -> sender label

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted flat record shape (camelCase keys)."""
        return {
            "id": self.id,
            "driver": self.driver,
            "region": self.region.value,
            "totalOrders": self.total_orders,
            "routes": self.routes,
            "delivered": self.delivered,
            "pending": self.pending,
            "unsuccessful": self.unsuccessful,
            "deliveryPercentage": self.delivery_percentage,
            "routePercentage": self.route_percentage,
            "serviceCodes": list(self.service_codes),
            "successfulCodes": list(self.successful_codes),
            "unsuccessfulCodes": list(self.unsuccessful_codes),
            "senderMap": dict(self.sender_map),
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> DeliveryData:
        """Rebuild a record from its persisted shape.

        Raises:
            KeyError: if ``id`` or ``driver`` is missing
            ValueError / TypeError: if a numeric field is not an integer
        """
        return DeliveryData(
            id=str(data["id"]),
            driver=str(data["driver"]),
            region=Region.from_label(data.get("region")),
            total_orders=int(data.get("totalOrders", 0)),
            routes=int(data.get("routes", 0)),
            delivered=int(data.get("delivered", 0)),
            pending=int(data.get("pending", 0)),
            unsuccessful=int(data.get("unsuccessful", 0)),
            delivery_percentage=int(data.get("deliveryPercentage", 0)),
            route_percentage=int(data.get("routePercentage", 0)),
            service_codes=[str(c) for c in data.get("serviceCodes") or []],
            successful_codes=[str(c) for c in data.get("successfulCodes") or []],
            unsuccessful_codes=[str(c) for c in data.get("unsuccessfulCodes") or []],
            sender_map={str(k): str(v) for k, v in (data.get("senderMap") or {}).items()},
        )
