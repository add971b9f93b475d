from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import pandas as pd
from openpyxl.utils import get_column_letter

"""Spreadsheet decoding.

Reads the first sheet of a workbook into ImportedRow mappings:
- keyed_by="letter": column letters A, B, ..., AA (machine exports without a
  usable header row)
- keyed_by="header": first row as keys, following rows as data; blank
  header cells are keyed "__EMPTY", "__EMPTY_1", ...

Fully blank rows are skipped and blank cells are omitted from each row, so a
missing key and an empty cell read the same.
"""

__all__ = [
    "SpreadsheetReadError",
    "decode_spreadsheet",
    "frame_to_rows",
]

KeyedBy = Literal["letter", "header"]

BLANK_HEADER = "__EMPTY"


class SpreadsheetReadError(Exception):
    """Raised when a workbook cannot be opened or parsed."""


def _row_dict(keys: list[str], values: list[Any]) -> dict[str, Any]:
    row: dict[str, Any] = {}
    for key, val in zip(keys, values, strict=False):
        if pd.isna(val):
            continue
        if isinstance(val, str) and val.strip() == "":
            continue
        row[key] = val
    return row


def _header_keys(header: list[Any]) -> list[str]:
    """Header names; repeats get "_1", "_2".

    Blank headers become "__EMPTY", "__EMPTY_1", ..., never a column letter.
    """
    keys: list[str] = []
    seen: dict[str, int] = {}
    for h in header:
        key = BLANK_HEADER if pd.isna(h) or str(h).strip() == "" else str(h).strip()
        if key in seen:
            seen[key] += 1
            key = f"{key}_{seen[key]}"
        else:
            seen[key] = 0
        keys.append(key)
    return keys


def frame_to_rows(df: pd.DataFrame, keyed_by: KeyedBy = "letter") -> list[dict[str, Any]]:
    """Convert a header-less DataFrame into ImportedRow mappings."""
    if keyed_by == "letter":
        keys = [get_column_letter(i + 1) for i in range(df.shape[1])]
        body = df
    elif keyed_by == "header":
        if df.shape[0] == 0:
            return []
        header = df.iloc[0].tolist()
        keys = _header_keys(header)
        body = df.iloc[1:]
    else:
        raise ValueError(f"unknown keyed_by: {keyed_by!r}")

    rows: list[dict[str, Any]] = []
    for _, raw in body.iterrows():
        row = _row_dict(keys, raw.tolist())
        if row:
            rows.append(row)
    return rows


def decode_spreadsheet(path: Path, keyed_by: KeyedBy = "letter") -> list[dict[str, Any]]:
    """Read the first sheet of ``path`` into rows.

    Raises:
        SpreadsheetReadError: if the file is missing or not a readable workbook
    """
    try:
        df = pd.read_excel(path, sheet_name=0, header=None, dtype=object)
    except Exception as e:  # openpyxl / zipfile raise their own types for non-workbooks
        raise SpreadsheetReadError(f"{path.name}: {e}") from e
    return frame_to_rows(df, keyed_by)
