from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any

import pandas as pd

"""Status timestamp parsing.

parse_datetime() never raises: anything it cannot read becomes EPOCH, which
loses every "most recent wins" comparison against a real timestamp.
"""

__all__ = [
    "EPOCH",
    "parse_datetime",
]

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1)

# (pattern, group order as year, month, day) tried in this order
_FORMATS: list[tuple[re.Pattern[str], tuple[int, int, int]]] = [
    # DD/MM/YYYY HH:mm[:ss]
    (re.compile(r"(\d{2})/(\d{2})/(\d{4})\s+(\d{2}):(\d{2})(?::(\d{2}))?"), (3, 2, 1)),
    # YYYY-MM-DD HH:mm[:ss]
    (re.compile(r"(\d{4})-(\d{2})-(\d{2})\s+(\d{2}):(\d{2})(?::(\d{2}))?"), (1, 2, 3)),
    # MM/DD/YY HH:mm[:ss]
    (re.compile(r"(\d{2})/(\d{2})/(\d{2})\s+(\d{2}):(\d{2})(?::(\d{2}))?"), (3, 1, 2)),
]


def _from_match(m: re.Match[str], order: tuple[int, int, int]) -> datetime | None:
    year, month, day = (int(m.group(i)) for i in order)
    if year < 100:
        year += 2000
    hour, minute = int(m.group(4)), int(m.group(5))
    second = int(m.group(6)) if m.group(6) else 0
    try:
        return datetime(year, month, day, hour, minute, second)
    except ValueError:
        return None


def _naive(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.replace(tzinfo=None)
    return value


def parse_datetime(raw: Any) -> datetime:
    """Parse a status-sheet date string into a naive datetime.

    Args:
        raw: cell value; strings have any "+offset" suffix dropped first.
            datetime / pandas.Timestamp values pass through (made naive).

    Returns:
        The parsed datetime, or EPOCH when nothing matches.
    """
    if raw is None or raw is pd.NaT:
        return EPOCH
    if isinstance(raw, pd.Timestamp):
        return _naive(raw.to_pydatetime())
    if isinstance(raw, datetime):
        return _naive(raw)

    text = str(raw).split("+")[0].strip()
    if not text:
        return EPOCH

    for pattern, order in _FORMATS:
        m = pattern.search(text)
        if m:
            parsed = _from_match(m, order)
            if parsed is not None:
                return parsed

    generic = pd.to_datetime(text, errors="coerce")
    if not pd.isna(generic):
        if generic.tzinfo is not None:
            generic = generic.tz_convert(None)
        return generic.to_pydatetime()

    logger.debug(f"unable to parse date: {text!r}")
    return EPOCH
