from __future__ import annotations

import math
import re
import unicodedata
from collections.abc import Mapping
from datetime import datetime
from typing import Any

import pandas as pd

"""Cell-level helpers shared by the importers and the reconciler.

Rows are ImportedRow mappings (column letter or header name -> scalar). All
access goes through explicit key lookups with fallbacks; nothing here raises
on odd cell content.
"""

__all__ = [
    "ImportedRow",
    "is_blank",
    "cell_text",
    "parse_int",
    "lookup",
    "percentage",
    "js_round",
]

ImportedRow = Mapping[str, Any]

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_WS = re.compile(r"\s+")


def is_blank(value: Any) -> bool:
    """True for None, whitespace-only strings and pandas NA / NaN / NaT."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if not pd.api.types.is_scalar(value):
        return False
    return bool(pd.isna(value))


def cell_text(value: Any) -> str:
    """Stringify a cell the way it reads in the sheet (stripped, "" when blank).

    Whole floats lose their ".0" so numeric ids/codes match their text form.
    """
    if is_blank(value):
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()
    if isinstance(value, datetime):
        return value.strftime("%d/%m/%Y %H:%M:%S")
    return str(value).strip()


def parse_int(value: Any) -> int | None:
    """Leading-integer parse ("12 vol" -> 12, "12.7" -> 12); None when there is none."""
    if is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    m = _LEADING_INT.match(str(value))
    return int(m.group(1)) if m else None


def _normalize_key(key: Any) -> str:
    decomposed = unicodedata.normalize("NFKD", str(key))
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _WS.sub(" ", stripped).strip().casefold()


def lookup(row: ImportedRow, *keys: str) -> str:
    """Text of the first non-blank cell among ``keys``.

    Each key is tried exactly first, then against the row's keys normalized
    (accents stripped, case-folded, whitespace collapsed), so "Situacao -
    Finalizado" finds "Situação -  finalizado".
    """
    normalized: dict[str, Any] | None = None
    for key in keys:
        value = row.get(key)
        if not is_blank(value):
            return cell_text(value)
        if normalized is None:
            normalized = {}
            for k, v in row.items():
                normalized.setdefault(_normalize_key(k), v)
        value = normalized.get(_normalize_key(key))
        if not is_blank(value):
            return cell_text(value)
    return ""


def js_round(x: float) -> int:
    """Round half up (2.5 -> 3), not to even."""
    return math.floor(x + 0.5)


def percentage(part: int, total: int) -> int:
    """round(part / total * 100) clamped to 0..100; 0 when total is 0."""
    if total <= 0:
        return 0
    return max(0, min(100, js_round(part / total * 100)))
