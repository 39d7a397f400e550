from __future__ import annotations

import json
import logging
from collections import Counter
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import TranslatorConfig
from ..models.entity_kind import EntityKind
from ..models.error_record import (
    ROW_DECODE_ERROR,
    ROW_MERGE_ERROR,
    SHEET_STRUCTURE_ERROR,
    TRANSLATION_ERROR,
    ErrorRecord,
)
from ..models.processing_result import DecodeStatistics, RunResult
from ..sheets.parser import (
    SheetStructureError,
    cell_text,
    decode_all,
    validate_headers,
    validate_sheet_structure,
)
from ..sheets.reader import read_sheet
from ..store.multi_language import MultiLanguageStore
from .json_builder import JSONBuilder
from .progress import ProgressTracker
from .value_resolver import FIELDS, resolve_field

"""Run orchestration for one sheet tab.

Pipeline:
1. read the tab (header + RawRows)
2. validate structure, decode rows (rejected rows → error log)
3. merge externally produced translation results into the MT fields
4. build the updated multi-language JSON per row
5. prepare per-row write instructions

The translation API and the spreadsheet writer are not called from here.
Translation results come in as data (``load_translation_results``) and the
write instructions go out as data.
"""

__all__ = [
    "ProcessingError",
    "load_translation_results",
    "process_rows",
    "process_sheet",
]

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Fatal run-level error (bad arguments, unreadable input)."""


def load_translation_results(path: Path) -> list[dict[str, Any]]:
    """Read translation collaborator output.

    Accepts a JSON list of ``{id, rowIndex, translated|error|skipped}``
    entries, or an object with such a list under ``"results"``.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ProcessingError(f"translation results not found: {path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise ProcessingError(f"cannot read translation results {path}: {e}") from e

    if isinstance(data, Mapping):
        data = data.get("results", [])
    if not isinstance(data, list) or not all(isinstance(e, Mapping) for e in data):
        raise ProcessingError(f"translation results must be a list of objects: {path}")
    return [dict(e) for e in data]


def _split_translation_results(
    entries: Sequence[Mapping[str, Any]],
) -> tuple[list[Mapping[str, Any]], list[dict[str, Any]], int]:
    """(usable translations, failed entries, skipped count)."""
    usable: list[Mapping[str, Any]] = []
    failed: list[dict[str, Any]] = []
    skipped = 0
    for entry in entries:
        if entry.get("skipped"):
            skipped += 1
        elif entry.get("error"):
            failed.append(
                {
                    "id": str(entry.get("id", "")),
                    "row_index": entry.get("rowIndex", entry.get("row_index")),
                    "error": str(entry["error"]),
                }
            )
        elif isinstance(entry.get("translated"), Mapping):
            usable.append(entry)
    return usable, failed, skipped


def _empty_result(
    sheet_name: str, entity_kind: EntityKind, language: str, start: datetime, total_rows: int = 0
) -> RunResult:
    end = datetime.now(UTC)
    return RunResult(
        sheet_name=sheet_name,
        entity_kind=entity_kind.value,
        language=language,
        start_time=start,
        end_time=end,
        elapsed_seconds=(end - start).total_seconds(),
        statistics=DecodeStatistics(total_rows=total_rows),
    )


def process_rows(
    raw_rows: Sequence[Sequence[Any]],
    entity_kind: EntityKind,
    language: str,
    config: TranslatorConfig,
    *,
    headers: Sequence[Any] | None = None,
    sheet_name: str = "",
    translation_results: Sequence[Mapping[str, Any]] | None = None,
    store: MultiLanguageStore | None = None,
    error_log: ErrorLogBuffer | None = None,
    progress: ProgressTracker | None = None,
) -> RunResult:
    """Run steps 2-5 over rows already fetched from the sheet.

    Raises:
        ProcessingError: ``language`` is not one of the configured languages
    """
    start = datetime.now(UTC)
    if language not in config.languages:
        raise ProcessingError(f"Invalid language: {language} (configured: {list(config.languages)})")
    store = store or MultiLanguageStore.from_config(config)
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    builder = JSONBuilder(store)
    sheet_name = sheet_name or language

    def _step(name: str) -> None:
        if progress is not None:
            progress.start_step(name)

    def _done() -> None:
        if progress is not None:
            progress.finish_step()

    # --- analyze ---
    _step("Analyzing data")
    if headers:
        try:
            validate_headers(headers, entity_kind)
        except SheetStructureError as e:
            error_log.append(ErrorRecord.create(sheet_name, -1, "", SHEET_STRUCTURE_ERROR, str(e)))
            raise ProcessingError(f"Invalid sheet structure: {e}") from e

    structure = validate_sheet_structure(raw_rows, entity_kind)
    for warning in structure["warnings"]:
        logger.warning("sheet=%s %s", sheet_name, warning)
    if not structure["is_valid"]:
        logger.warning("sheet=%s %s", sheet_name, "; ".join(structure["errors"]))
        _done()
        return _empty_result(sheet_name, entity_kind, language, start)

    decoded = decode_all(
        raw_rows,
        entity_kind,
        language,
        store,
        first_data_row=config.first_data_row,
        sheet_name=sheet_name,
    )
    for err in decoded.errors:
        raw_id = cell_text(err.data[0]).strip() if err.data else ""
        error_log.append(ErrorRecord.create(sheet_name, err.row_number, raw_id, ROW_DECODE_ERROR, err.reason))
    if decoded.errors:
        logger.warning("sheet=%s rejected_rows=%d", sheet_name, len(decoded.errors))
    logger.info(
        "sheet=%s valid=%d/%d needs_translation=%d manual=%d old=%d",
        sheet_name,
        decoded.statistics.valid_rows,
        decoded.statistics.total_rows,
        decoded.statistics.rows_needing_translation,
        decoded.statistics.rows_with_manual_override,
        decoded.statistics.rows_with_old_values,
    )
    _done()

    # --- merge translations ---
    _step("Merging translations")
    rows = decoded.rows
    translated_ids: set[str] = set()
    usable: list[Mapping[str, Any]] = []
    translation_errors: list[dict[str, Any]] = []
    skipped = 0
    if translation_results:
        usable, translation_errors, skipped = _split_translation_results(translation_results)
        known_ids = {row.id for row in rows}
        translated_ids = {str(e.get("id", "")) for e in usable} & known_ids
        for failed in translation_errors:
            error_log.append(
                ErrorRecord.create(
                    sheet_name,
                    _row_number(failed.get("row_index"), config),
                    failed["id"],
                    TRANSLATION_ERROR,
                    failed["error"],
                )
            )
        rows = builder.merge_translations(rows, usable, entity_kind)
        logger.info(
            "sheet=%s translations merged=%d failed=%d skipped=%d",
            sheet_name,
            len(translated_ids),
            len(translation_errors),
            skipped,
        )
    _done()

    # --- build JSON ---
    _step("Generating JSON")
    json_results = builder.build_batch_json(rows, entity_kind, language)
    rows_by_index = {row.row_index: row for row in rows}
    for r in json_results:
        if not r.success:
            row = rows_by_index.get(r.row_index)
            error_log.append(
                ErrorRecord.create(
                    sheet_name,
                    row.row_number if row is not None else -1,
                    r.id,
                    ROW_MERGE_ERROR,
                    r.error or "",
                )
            )
    multi_language = builder.count_multi_language(json_results)
    sources: Counter[str] = Counter()
    for row in rows:
        for field in FIELDS:
            _, source = resolve_field(row, field)
            sources[f"{field}:{source.value}"] += 1
    if progress is not None:
        progress.set_postfix(json=sum(1 for r in json_results if r.success), multi=multi_language)
    _done()

    # --- write-back ---
    _step("Preparing write-back")
    instructions = builder.prepare_write_data(rows, json_results, entity_kind, usable)
    _done()

    end = datetime.now(UTC)
    return RunResult(
        sheet_name=sheet_name,
        entity_kind=entity_kind.value,
        language=language,
        start_time=start,
        end_time=end,
        elapsed_seconds=(end - start).total_seconds(),
        statistics=decoded.statistics,
        decode_errors=decoded.errors,
        translation_errors=translation_errors,
        json_results=json_results,
        write_instructions=instructions,
        rows_translated=len(translated_ids),
        rows_skipped=skipped,
        multi_language_json=multi_language,
        value_sources=dict(sources),
    )


def _row_number(row_index: Any, config: TranslatorConfig) -> int:
    if isinstance(row_index, int) and row_index >= 0:
        return row_index + config.first_data_row
    return -1


def process_sheet(
    path: Path,
    entity_kind: EntityKind,
    language: str,
    config: TranslatorConfig,
    *,
    sheet_name: str | None = None,
    translation_results: Sequence[Mapping[str, Any]] | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> RunResult:
    """Read one tab of ``path`` and run the full pipeline on it.

    The tab defaults to the language code (tabs are named after languages).

    Raises:
        ProcessingError: tab missing/unreadable, or invalid language
    """
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    tab = sheet_name or language
    with ProgressTracker(description=f"Translating {tab}") as progress:
        progress.start_step("Loading spreadsheet")
        try:
            sheet = read_sheet(path, tab, header_rows=config.header_rows)
        except SheetStructureError as e:
            error_log.append(ErrorRecord.create(tab, -1, "", SHEET_STRUCTURE_ERROR, str(e)))
            raise ProcessingError(str(e)) from e
        progress.finish_step()
        logger.info("sheet=%s loaded rows=%d from %s", sheet.sheet_name, len(sheet.rows), path.name)

        return process_rows(
            sheet.rows,
            entity_kind,
            language,
            config,
            headers=sheet.headers,
            sheet_name=sheet.sheet_name,
            translation_results=translation_results,
            error_log=error_log,
            progress=progress,
        )
