from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

from .parser import SheetStructureError, cell_text

"""Sheet reader for exported workbooks (.xlsx / .csv).

Stands in for the spreadsheet API when running from the command line: it
yields the header row plus RawRows exactly as the API would (every cell as
text, trailing empty cells omitted). Fully empty rows inside the data are
kept so sheet row numbers stay aligned; only trailing empty rows are dropped.
"""

__all__ = [
    "SheetData",
    "list_sheets",
    "read_sheet",
]

SUPPORTED_SUFFIXES = {".xlsx", ".csv"}


@dataclass
class SheetData:
    sheet_name: str
    headers: list[str]
    rows: list[list[str]]  # RawRows, trailing empty cells trimmed


def _trim(cells: list[Any]) -> list[str]:
    values = [cell_text(c) for c in cells]
    while values and values[-1] == "":
        values.pop()
    return values


def list_sheets(path: Path) -> list[str]:
    if path.suffix.lower() == ".csv":
        return [path.stem]
    with pd.ExcelFile(path) as xls:
        return [str(name) for name in xls.sheet_names]


def _read_frame(path: Path, sheet_name: str | None) -> tuple[str, pd.DataFrame]:
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise SheetStructureError(f"unsupported file type: {path.name}")
    if not path.exists():
        raise SheetStructureError(f"file not found: {path}")

    if suffix == ".csv":
        try:
            df = pd.read_csv(path, header=None, dtype=str, keep_default_na=False)
        except pd.errors.EmptyDataError:
            df = pd.DataFrame()
        return sheet_name or path.stem, df

    with pd.ExcelFile(path) as xls:
        names = [str(n) for n in xls.sheet_names]
        if sheet_name is None:
            sheet_name = names[0]
        elif sheet_name not in names:
            raise SheetStructureError(
                f"sheet '{sheet_name}' not found in {path.name} (available: {names})"
            )
        # 수식이 아닌 표시값을 문자열로 읽음
        df = xls.parse(sheet_name, header=None, dtype=str, keep_default_na=False)
    return sheet_name, df


def read_sheet(path: Path, sheet_name: str | None = None, header_rows: int = 1) -> SheetData:
    """Read one sheet tab into headers + RawRows.

    Parameters
    ----------
    path: .xlsx or .csv file
    sheet_name: tab to read (xlsx only; default first tab)
    header_rows: rows above the data; the last of them is the header row
    """
    name, df = _read_frame(path, sheet_name)
    records = [_trim(list(r)) for r in df.itertuples(index=False, name=None)]
    if len(records) < header_rows:
        raise SheetStructureError(f"sheet '{name}' lacks a header row")

    headers = records[header_rows - 1] if header_rows > 0 else []
    rows = records[header_rows:]
    while rows and not rows[-1]:
        rows.pop()
    return SheetData(sheet_name=name, headers=headers, rows=rows)
