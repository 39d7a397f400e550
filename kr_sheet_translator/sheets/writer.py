from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from ..models.config_models import ColumnLayout
from ..models.entity_kind import EntityKind
from ..models.processing_result import WriteInstruction

"""Write-back payloads for the spreadsheet writer.

The sheet itself is written by an external collaborator. This module only
turns WriteInstructions into A1-notation value ranges in the shape a
``values.batchUpdate`` call takes, grouping contiguous rows into one range::

    {"range": "'en'!J5:J7", "values": [["..."], ["..."], ["..."]]}
"""

__all__ = [
    "a1_range",
    "group_contiguous",
    "build_value_ranges",
    "dump_value_ranges",
]


def a1_range(sheet_name: str, column: str, start_row: int, end_row: int | None = None) -> str:
    quoted = "'" + sheet_name.replace("'", "''") + "'"
    if end_row is None or end_row == start_row:
        return f"{quoted}!{column}{start_row}"
    return f"{quoted}!{column}{start_row}:{column}{end_row}"


def group_contiguous(
    sheet_name: str, column: str, row_numbers: Sequence[int], values: Sequence[list[Any]]
) -> list[dict[str, Any]]:
    """One value range per run of consecutive row numbers.

    ``row_numbers`` must be sorted ascending and aligned with ``values``.
    """
    if len(row_numbers) != len(values):
        raise ValueError("row_numbers and values must have the same length")
    updates: list[dict[str, Any]] = []
    if not row_numbers:
        return updates

    start = end = row_numbers[0]
    group: list[list[Any]] = [values[0]]
    for number, value in zip(row_numbers[1:], values[1:], strict=True):
        if number == end + 1:
            end = number
            group.append(value)
            continue
        updates.append({"range": a1_range(sheet_name, column, start, end), "values": group})
        start = end = number
        group = [value]
    updates.append({"range": a1_range(sheet_name, column, start, end), "values": group})
    return updates


def build_value_ranges(
    sheet_name: str,
    instructions: Sequence[WriteInstruction],
    entity_kind: EntityKind,
    layout: ColumnLayout,
) -> dict[str, list[dict[str, Any]]]:
    """Value ranges for the MT name/content columns and the JSON column."""
    ordered = sorted(instructions, key=lambda w: w.row_number)
    content_key = entity_kind.content_field

    translated = [w for w in ordered if w.translated is not None]
    mt_rows = [w.row_number for w in translated]
    mt_updates = group_contiguous(
        sheet_name, layout.name, mt_rows, [[w.translated.get("name", "")] for w in translated]
    )
    mt_updates += group_contiguous(
        sheet_name, layout.content, mt_rows, [[w.translated.get(content_key, "")] for w in translated]
    )

    with_json = [w for w in ordered if w.updated_json is not None]
    json_updates = group_contiguous(
        sheet_name,
        layout.updated_json,
        [w.row_number for w in with_json],
        [[w.updated_json] for w in with_json],
    )
    return {"translations": mt_updates, "json": json_updates}


def dump_value_ranges(path: Path, ranges: dict[str, list[dict[str, Any]]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(ranges, ensure_ascii=False, indent=2), encoding="utf-8")
    return path
