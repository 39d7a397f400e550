from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from ..models.entity_kind import EntityKind
from ..models.processing_result import JSONBuildResult, RowMergeError, WriteInstruction
from ..models.row_model import RowModel
from ..sheets.parser import sanitize_input
from ..store.multi_language import MultiLanguageStore
from .value_resolver import get_final_values

"""JSON merge builder.

Builds the updated multi-language JSON of each row: the row's resolved
values (see ``value_resolver``) become the payload of the run's language and
are merged into the row's ``old_json`` object, leaving the other languages
alone.

Also brings fresh machine translations back into the rows
(``merge_translations``) and prepares the per-row write instructions.
"""

__all__ = [
    "JSONBuilder",
]

logger = logging.getLogger(__name__)


def _success_rate(successful: int, total: int) -> str:
    if total <= 0:
        return "0.0%"
    return f"{successful / total * 100:.1f}%"


def _translated_texts(translation: Mapping[str, Any], content_key: str) -> tuple[str, str]:
    """(name, content) of one translation; ``content`` is accepted for the content field."""
    name = translation.get("name") or ""
    content = translation.get(content_key)
    if not content:
        content = translation.get("content")
    return str(name), str(content or "")


class JSONBuilder:
    """Row → multi-language JSON, backed by one MultiLanguageStore."""

    def __init__(self, store: MultiLanguageStore) -> None:
        self.store = store

    def build_updated_json(
        self, row: RowModel, entity_kind: EntityKind, language: str
    ) -> dict[str, Any]:
        """``old_json_parsed`` with ``language`` replaced by the resolved payload."""
        base = row.old_json_parsed or {}
        values = get_final_values(row, entity_kind)
        return self.store.merge(base, language, values.as_payload(entity_kind))

    def build_json(
        self, row: RowModel, entity_kind: EntityKind, language: str | None = None
    ) -> tuple[dict[str, Any], str]:
        """Object and its serialized text. ``language`` defaults to the row's language."""
        obj = self.build_updated_json(row, entity_kind, language or row.language)
        return obj, self.store.stringify(obj)

    def build_batch_json(
        self, rows: Sequence[RowModel], entity_kind: EntityKind, language: str
    ) -> list[JSONBuildResult]:
        """Build JSON for every row; a failing row is reported, never raised."""
        results: list[JSONBuildResult] = []
        for row in rows:
            try:
                obj, text = self.build_json(row, entity_kind, language)
            except Exception as e:
                err = RowMergeError(row.id, row.row_index, e)
                logger.error("%s", err)
                results.append(
                    JSONBuildResult(
                        row_index=row.row_index,
                        id=row.id,
                        success=False,
                        error=str(e),
                    )
                )
                continue
            results.append(
                JSONBuildResult(
                    row_index=row.row_index,
                    id=row.id,
                    success=True,
                    json=text,
                    object=obj,
                )
            )
        return results

    def count_multi_language(self, results: Iterable[JSONBuildResult]) -> int:
        """Objects carrying more than one language (reporting only)."""
        return sum(
            1
            for r in results
            if r.object is not None and len(self.store.available_languages(r.object)) > 1
        )

    @staticmethod
    def validate_results(results: Sequence[JSONBuildResult]) -> dict[str, Any]:
        failed = [r for r in results if not r.success]
        successful = len(results) - len(failed)
        return {
            "total": len(results),
            "successful": successful,
            "failed": len(failed),
            "errors": [{"id": r.id, "row_index": r.row_index, "error": r.error} for r in failed],
            "success_rate": _success_rate(successful, len(results)),
        }

    @staticmethod
    def translations_by_id(
        translation_results: Iterable[Mapping[str, Any]] | Mapping[str, Mapping[str, Any]],
    ) -> dict[str, Mapping[str, Any]]:
        """Fresh translations keyed by record id, exactly as received.

        ``translation_results`` is either a mapping ``id -> {name, <content>}``
        or the collaborator's result list (``{id, rowIndex, translated}``
        entries; entries carrying ``error`` or no ``translated`` are ignored).
        """
        if isinstance(translation_results, Mapping):
            return {str(k): v for k, v in translation_results.items() if isinstance(v, Mapping)}
        by_id: dict[str, Mapping[str, Any]] = {}
        for entry in translation_results:
            translated = entry.get("translated")
            if entry.get("error") or not isinstance(translated, Mapping):
                continue
            by_id[str(entry.get("id", ""))] = translated
        return by_id

    @staticmethod
    def merge_translations(
        rows: Sequence[RowModel],
        translation_results: Iterable[Mapping[str, Any]] | Mapping[str, Mapping[str, Any]],
        entity_kind: EntityKind,
    ) -> list[RowModel]:
        """Overwrite mt_name/mt_content of rows with a fresh translation.

        The row gets the escaped text, the same form ``decode`` produces when
        the written-back cell is read on the next run. Rows without a
        translation pass through unchanged.
        """
        by_id = JSONBuilder.translations_by_id(translation_results)
        content_key = entity_kind.content_field
        merged: list[RowModel] = []
        for row in rows:
            translation = by_id.get(row.id)
            if translation is None:
                merged.append(row)
                continue
            name, content = _translated_texts(translation, content_key)
            merged.append(
                dataclasses.replace(
                    row,
                    mt_name=sanitize_input(name),
                    mt_content=sanitize_input(content),
                )
            )
        return merged

    @staticmethod
    def prepare_write_data(
        rows: Sequence[RowModel],
        results: Sequence[JSONBuildResult],
        entity_kind: EntityKind,
        translations: Iterable[Mapping[str, Any]] | Mapping[str, Mapping[str, Any]] = (),
    ) -> list[WriteInstruction]:
        """Per-row write instructions.

        MT columns are written only for rows with a fresh translation in
        ``translations``, using the raw translated text (the sheet holds
        unescaped text); the JSON column for every row whose build succeeded.
        """
        raw_by_id = JSONBuilder.translations_by_id(translations)
        json_by_index = {r.row_index: r.json for r in results if r.success}
        content_key = entity_kind.content_field
        instructions: list[WriteInstruction] = []
        for row in rows:
            translated = None
            raw = raw_by_id.get(row.id)
            if raw is not None:
                name, content = _translated_texts(raw, content_key)
                if name:
                    translated = {"name": name, content_key: content}
            instructions.append(
                WriteInstruction(
                    row_index=row.row_index,
                    row_number=row.row_number,
                    id=row.id,
                    translated=translated,
                    updated_json=json_by_index.get(row.row_index),
                )
            )
        return instructions

    def extract_single_language(
        self, objects: Iterable[Mapping[str, Any]], language: str
    ) -> list[dict[str, Any]]:
        extracted = (self.store.extract_language(obj, language) for obj in objects)
        return [data for data in extracted if data]

    def build_export_bundle(
        self,
        results: Sequence[JSONBuildResult],
        entity_kind: EntityKind,
        language: str,
        version: str,
    ) -> dict[str, Any]:
        """All successful objects keyed by record id, plus export metadata."""
        data: dict[str, dict[str, Any]] = {}
        for r in results:
            if not r.success or r.object is None or not r.id:
                continue
            data[r.id] = self.store.merge_multiple(data.get(r.id, {}), r.object)

        languages: set[str] = set()
        for obj in data.values():
            languages |= self.store.available_languages(obj)

        return {
            "version": version,
            "data_type": entity_kind.value,
            "primary_language": language,
            "languages": sorted(languages),
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "count": len(data),
            "data": data,
        }

    @staticmethod
    def create_summary_report(
        entity_kind: EntityKind,
        language: str,
        *,
        total_rows: int = 0,
        translated_rows: int = 0,
        manual_overrides: int = 0,
        old_values: int = 0,
        valid_old_json: int = 0,
        json_generated: int = 0,
        multi_language_json: int = 0,
        errors: int = 0,
    ) -> dict[str, Any]:
        stats: dict[str, Any] = {
            "total_rows": total_rows,
            "translated_rows": translated_rows,
            "manual_overrides": manual_overrides,
            "old_values": old_values,
            "valid_old_json": valid_old_json,
            "json_generated": json_generated,
            "multi_language_json": multi_language_json,
            "errors": errors,
        }
        if total_rows > 0:
            stats["translation_coverage"] = _success_rate(translated_rows, total_rows)
            stats["manual_override_coverage"] = _success_rate(manual_overrides, total_rows)
            stats["old_values_coverage"] = _success_rate(old_values, total_rows)
            stats["success_rate"] = _success_rate(json_generated, total_rows)
        return {
            "data_type": entity_kind.value,
            "language": language,
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "statistics": stats,
        }
