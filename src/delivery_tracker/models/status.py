from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

"""Status-sheet models used by the status reconciler.

A status sheet comes in one of two schemas:
- FLEET: numeric delivered / returned counts per load id
- ROUTE: one row per service code observation with a status text and timestamp
"""

__all__ = [
    "StatusSchema",
    "StatusObservation",
    "StatusEntry",
    "FleetStatus",
]


class StatusSchema(Enum):
    FLEET = "fleet"
    ROUTE = "route"


@dataclass(frozen=True)
class StatusObservation:
    """A single status row as read from the sheet (kept for diagnostics)."""
    timestamp: datetime
    status: str
    raw_date: str
    agent: str
    title: str
    sender: str


@dataclass
class StatusEntry:
    """Winning status for one service code.

    The entry is replaced only by a strictly newer observation, so the
    first-seen row wins timestamp ties.
    """
    status: str
    timestamp: datetime
    sender: str
    history: list[StatusObservation] = field(default_factory=list)

    def observe(self, observation: StatusObservation) -> None:
        self.history.append(observation)
        if observation.timestamp > self.timestamp:
            self.status = observation.status
            self.timestamp = observation.timestamp
            self.sender = observation.sender


@dataclass(frozen=True)
class FleetStatus:
    delivered: int            # "Entregues" (AI)
    failed_or_returned: int   # "Baixas" (AJ)
    driver: str | None = None
