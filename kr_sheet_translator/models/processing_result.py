from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any

from .row_model import RowModel

"""Result and statistics models for decode / JSON build / whole runs.

These are plain tallies and containers. None of them hold hidden state: every
counter can be recomputed from the rows and errors they were built from.
"""

__all__ = [
    "DecodeError",
    "RowMergeError",
    "DecodeStatistics",
    "DecodeResult",
    "JSONBuildResult",
    "WriteInstruction",
    "RunResult",
]


class DecodeError(Exception):
    """A raw row could not be turned into a RowModel (missing id / kr_name)."""

    def __init__(self, row_number: int, reason: str, data: list[Any] | None = None) -> None:
        super().__init__(reason)
        self.row_number = row_number
        self.reason = reason
        self.data = data

    def as_dict(self) -> dict[str, Any]:
        return {"row": self.row_number, "error": self.reason}


class RowMergeError(Exception):
    """Unexpected failure while building one row's updated JSON."""

    def __init__(self, record_id: str, row_index: int, cause: BaseException) -> None:
        super().__init__(f"Failed to build JSON for row {record_id}: {cause}")
        self.record_id = record_id
        self.row_index = row_index
        self.cause = cause


@dataclass
class DecodeStatistics:
    """Counters collected while decoding one sheet."""
    total_rows: int = 0
    valid_rows: int = 0
    rows_needing_translation: int = 0
    rows_with_manual_override: int = 0
    rows_with_mt_translation: int = 0
    rows_with_json: int = 0  # updated_json already filled
    rows_with_old_values: int = 0
    rows_with_valid_old_json: int = 0
    rows_with_content_changes: int = 0
    language_mismatches: int = 0

    def add_row(self, row: RowModel) -> None:
        self.valid_rows += 1
        if row.needs_translation:
            self.rows_needing_translation += 1
        if row.has_manual_override:
            self.rows_with_manual_override += 1
        if row.has_mt_translation:
            self.rows_with_mt_translation += 1
        if row.updated_json:
            self.rows_with_json += 1
        if row.has_old_values:
            self.rows_with_old_values += 1
        if row.has_valid_old_json:
            self.rows_with_valid_old_json += 1
        if row.content_changed:
            self.rows_with_content_changes += 1
        if row.language_mismatch:
            self.language_mismatches += 1

    def as_dict(self) -> dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class DecodeResult:
    """Output of ``decode_all``: the working set plus the rejected rows."""
    rows: list[RowModel]
    errors: list[DecodeError]
    statistics: DecodeStatistics
    sheet_name: str = ""
    language: str = ""
    entity_kind: Any = None  # EntityKind


@dataclass(frozen=True)
class JSONBuildResult:
    """Per-row outcome of the JSON merge step."""
    row_index: int
    id: str
    success: bool
    json: str = ""
    object: dict[str, Any] | None = None
    error: str | None = None


@dataclass(frozen=True)
class WriteInstruction:
    """What an external writer should put back into one sheet row.

    ``translated`` is only set for rows whose MT columns were refreshed in
    this run; ``updated_json`` only when the JSON build succeeded.
    """
    row_index: int
    row_number: int
    id: str
    translated: dict[str, str] | None = None
    updated_json: str | None = None


@dataclass(frozen=True)
class RunResult:
    """Aggregated result of processing one sheet tab."""
    sheet_name: str
    entity_kind: str
    language: str
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    statistics: DecodeStatistics
    decode_errors: list[DecodeError] = field(default_factory=list)
    translation_errors: list[dict[str, Any]] = field(default_factory=list)
    json_results: list[JSONBuildResult] = field(default_factory=list)
    write_instructions: list[WriteInstruction] = field(default_factory=list)
    rows_translated: int = 0
    rows_skipped: int = 0
    multi_language_json: int = 0
    value_sources: dict[str, int] = field(default_factory=dict)

    @property
    def json_generated(self) -> int:
        return sum(1 for r in self.json_results if r.success)

    @property
    def merge_errors(self) -> list[JSONBuildResult]:
        return [r for r in self.json_results if not r.success]

    @property
    def error_count(self) -> int:
        return len(self.decode_errors) + len(self.translation_errors) + len(self.merge_errors)
