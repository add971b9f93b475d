from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path

from ..logging.issue_log import IssueLogBuffer
from ..models.delivery import DeliveryData

"""Best-effort record store.

The full record set is kept as one JSON array of DeliveryData.to_dict()
records. It is a cache, not a system of record: a missing, unreadable or
malformed file loads as an empty record set and is only logged. Callers save
explicitly after each pipeline call; last write wins.
"""

__all__ = [
    "JsonRecordStore",
]

logger = logging.getLogger(__name__)


class JsonRecordStore:
    def __init__(self, path: Path, issue_log: IssueLogBuffer | None = None) -> None:
        self.path = Path(path)
        self._issue_log = issue_log

    def _decode_failed(self, message: str) -> list[DeliveryData]:
        logger.warning(f"store: {message} -> starting with an empty record set")
        if self._issue_log is not None:
            self._issue_log.store_decode_error(self.path.name, message)
        return []

    def load(self) -> list[DeliveryData]:
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            return self._decode_failed(f"cannot read {self.path}: {e}")
        if not isinstance(raw, list):
            return self._decode_failed(f"expected a JSON array in {self.path}")
        try:
            records = [DeliveryData.from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            return self._decode_failed(f"malformed record in {self.path}: {e!r}")
        logger.debug(f"store: loaded {len(records)} records from {self.path}")
        return records

    def save(self, records: Sequence[DeliveryData]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [r.to_dict() for r in records]
        self.path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        logger.debug(f"store: saved {len(payload)} records to {self.path}")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
