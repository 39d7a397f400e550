from __future__ import annotations

import html
import logging
import math
from collections.abc import Sequence
from typing import Any

from ..models.entity_kind import EntityKind
from ..models.processing_result import DecodeError, DecodeResult, DecodeStatistics
from ..models.row_model import COLUMN_COUNT, Column, RowModel
from ..store.multi_language import MultiLanguageStore

"""Fixed-column sheet row parser.

Turns raw rows (lists of cell values, already rendered as text by the sheet
reader) into RowModel instances for one EntityKind and one target language.

Rows missing ``id`` or ``kr_name`` are rejected as DecodeError and collected
by ``decode_all``; the remaining rows keep being decoded.
"""

__all__ = [
    "MIN_HEADER_COLUMNS",
    "SheetStructureError",
    "sanitize_input",
    "cell_text",
    "decode",
    "decode_all",
    "validate_headers",
    "validate_sheet_structure",
    "get_rows_for_translation",
    "prepare_translation_requests",
    "create_summary_report",
]

logger = logging.getLogger(__name__)

MIN_HEADER_COLUMNS = 4  # id, kr_name, kr_content, language
SAMPLE_ERRORS = 5


class SheetStructureError(Exception):
    """Raised when a sheet cannot be processed at all (header too short, tab missing)."""


def sanitize_input(value: str) -> str:
    """Escape ``&``, ``<`` and ``>`` for safe embedding in HTML/JSON output."""
    return html.escape(value, quote=False)


def cell_text(value: Any) -> str:
    """Normalise one cell to text. ``None`` and NaN become ``""``."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return value if isinstance(value, str) else str(value)


def _cell(row: Sequence[Any], column: Column) -> str:
    # 뒤쪽 빈 셀이 생략된 행은 빈 문자열로 취급
    return cell_text(row[column]) if column < len(row) else ""


def decode(
    raw_row: Sequence[Any],
    entity_kind: EntityKind,
    expected_language: str,
    store: MultiLanguageStore,
    *,
    row_index: int = 0,
    row_number: int | None = None,
) -> RowModel:
    """Decode one raw row.

    Parameters
    ----------
    raw_row: cell values in fixed column order (short rows allowed)
    entity_kind: selects history vs description
    expected_language: language of the run; also the key used to pull
        fallback values out of ``old_json``
    store: parses ``old_json``
    row_index: 0-based position among the data rows
    row_number: 1-based sheet row number for error reports (defaults to
        ``row_index + 2``, one header row)

    Raises
    ------
    DecodeError: ``id`` or ``kr_name`` is empty
    """
    if row_number is None:
        row_number = row_index + 2
    raw = list(raw_row) if raw_row is not None else []

    record_id = _cell(raw, Column.ID).strip()
    kr_name = sanitize_input(_cell(raw, Column.KR_NAME))
    if not record_id or not kr_name:
        raise DecodeError(row_number, "Missing required fields: id or kr_name", raw)

    recorded_language = _cell(raw, Column.LANGUAGE).strip()
    old_json = _cell(raw, Column.OLD_JSON)
    old_json_parsed = store.parse(old_json)
    old_json_values = store.extract_old_json_values(old_json_parsed, expected_language, entity_kind)

    return RowModel(
        entity_kind=entity_kind,
        expected_language=expected_language,
        row_index=row_index,
        row_number=row_number,
        id=record_id,
        kr_name=kr_name,
        kr_content=sanitize_input(_cell(raw, Column.KR_CONTENT)),
        language=recorded_language or expected_language,
        recorded_language=recorded_language,
        old_name=sanitize_input(_cell(raw, Column.OLD_NAME)),
        old_content=sanitize_input(_cell(raw, Column.OLD_CONTENT)),
        old_json=old_json,
        manual_name=sanitize_input(_cell(raw, Column.MANUAL_NAME)),
        manual_content=sanitize_input(_cell(raw, Column.MANUAL_CONTENT)),
        mt_name=sanitize_input(_cell(raw, Column.MT_NAME)),
        mt_content=sanitize_input(_cell(raw, Column.MT_CONTENT)),
        updated_json=_cell(raw, Column.UPDATED_JSON),
        old_json_parsed=old_json_parsed,
        old_json_values=old_json_values,
    )


def decode_all(
    raw_rows: Sequence[Sequence[Any]],
    entity_kind: EntityKind,
    expected_language: str,
    store: MultiLanguageStore,
    *,
    first_data_row: int = 2,
    sheet_name: str = "",
) -> DecodeResult:
    """Decode every data row, collecting rejected rows instead of raising.

    ``first_data_row`` is the 1-based sheet row number of ``raw_rows[0]``.
    """
    rows: list[RowModel] = []
    errors: list[DecodeError] = []
    stats = DecodeStatistics(total_rows=len(raw_rows))

    for index, raw in enumerate(raw_rows):
        row_number = index + first_data_row
        try:
            row = decode(
                raw,
                entity_kind,
                expected_language,
                store,
                row_index=index,
                row_number=row_number,
            )
        except DecodeError as e:
            logger.debug("row=%d rejected: %s", e.row_number, e.reason)
            errors.append(e)
            continue
        stats.add_row(row)
        rows.append(row)

    return DecodeResult(
        rows=rows,
        errors=errors,
        statistics=stats,
        sheet_name=sheet_name,
        language=expected_language,
        entity_kind=entity_kind,
    )


def validate_headers(headers: Sequence[Any], entity_kind: EntityKind) -> list[str]:
    """Soft check of the header row. Returns warning messages.

    Raises SheetStructureError only when fewer than 4 header cells exist.
    """
    if len(headers) < MIN_HEADER_COLUMNS:
        raise SheetStructureError(
            f"Insufficient columns. Expected at least {MIN_HEADER_COLUMNS}, found {len(headers)}"
        )
    warnings: list[str] = []
    expected = entity_kind.expected_headers
    for index, name in enumerate(expected[:MIN_HEADER_COLUMNS]):
        found = cell_text(headers[index]).strip()
        if found and found.lower() != name.lower():
            msg = f'Column {index} expected to be "{name}", found "{found}"'
            logger.warning(msg)
            warnings.append(msg)
    return warnings


def validate_sheet_structure(
    raw_rows: Sequence[Sequence[Any]], entity_kind: EntityKind
) -> dict[str, Any]:
    """Pre-flight check of the data rows.

    Returns ``{"is_valid", "errors", "warnings"}``; invalid only when there
    are no data rows at all.
    """
    result: dict[str, Any] = {"is_valid": True, "errors": [], "warnings": []}
    if not raw_rows:
        result["is_valid"] = False
        result["errors"].append("Sheet contains no data rows")
        return result

    first = raw_rows[0]
    if len(first) < COLUMN_COUNT:
        result["warnings"].append(
            f"Sheet has {len(first)} columns, expected at least {COLUMN_COUNT}"
        )

    empty_source = sum(
        1
        for raw in raw_rows
        if not _cell(raw, Column.KR_NAME) or not _cell(raw, Column.KR_CONTENT)
    )
    if empty_source:
        result["warnings"].append(f"{empty_source} rows have empty Korean source data")
    return result


def get_rows_for_translation(rows: Sequence[RowModel]) -> list[RowModel]:
    return [row for row in rows if row.needs_translation]


def prepare_translation_requests(rows: Sequence[RowModel]) -> list[dict[str, Any]]:
    """Requests for the external translation collaborator, one per row."""
    return [
        {"id": row.id, "row_index": row.row_index, "texts": row.source_texts()}
        for row in rows
    ]


def _percent(part: int, whole: int) -> str:
    if whole <= 0:
        return "0.0%"
    return f"{part / whole * 100:.1f}%"


def create_summary_report(result: DecodeResult) -> dict[str, Any]:
    """Human oriented report of a decode run (coverage, changes, error samples)."""
    stats = result.statistics
    kind = result.entity_kind
    report: dict[str, Any] = {
        "data_type": kind.value if isinstance(kind, EntityKind) else kind,
        "language": result.language,
        "sheet_name": result.sheet_name,
        "statistics": {
            **stats.as_dict(),
            "success_rate": _percent(stats.valid_rows, stats.total_rows),
            "translation_needed": stats.rows_needing_translation,
            "ready_rows": stats.valid_rows - stats.rows_needing_translation,
        },
        "coverage": {
            "manual_coverage": _percent(stats.rows_with_manual_override, stats.valid_rows),
            "mt_coverage": _percent(stats.rows_with_mt_translation, stats.valid_rows),
            "old_values_coverage": _percent(stats.rows_with_old_values, stats.valid_rows),
            "old_json_coverage": _percent(stats.rows_with_valid_old_json, stats.valid_rows),
            "json_coverage": _percent(stats.rows_with_json, stats.valid_rows),
        },
        "changes": {
            "content_changes": stats.rows_with_content_changes,
            "language_mismatches": stats.language_mismatches,
        },
    }
    if result.errors:
        report["errors"] = {
            "count": len(result.errors),
            "samples": [e.as_dict() for e in result.errors[:SAMPLE_ERRORS]],
        }
    return report
