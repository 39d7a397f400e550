from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from .entity_kind import EntityKind

"""RowModel: one decoded sheet row.

A RowModel is built by ``kr_sheet_translator.sheets.parser.decode`` from a raw
row of 12 positional cells. All derived flags (manual override, old values,
content changed, needs translation ...) are computed from the stored fields so
a row with replaced MT values never carries stale flags.
"""

__all__ = [
    "Column",
    "COLUMN_COUNT",
    "RowModel",
]


class Column(IntEnum):
    """0-based positions of the fixed sheet columns (same for both kinds)."""
    ID = 0
    KR_NAME = 1
    KR_CONTENT = 2
    LANGUAGE = 3
    OLD_NAME = 4
    OLD_CONTENT = 5
    OLD_JSON = 6
    MANUAL_NAME = 7
    MANUAL_CONTENT = 8
    MT_NAME = 9
    MT_CONTENT = 10
    UPDATED_JSON = 11


COLUMN_COUNT = len(Column)


@dataclass(frozen=True)
class RowModel:
    """Decoded row of a Doctor or Hospital sheet.

    Name/content fields are HTML-escaped at decode time. ``old_json_parsed``
    is the parsed ``old_json`` cell (``{}`` when empty or malformed) and
    ``old_json_values`` holds the ``name``/content entries found in it for the
    language of the run.
    """
    entity_kind: EntityKind
    expected_language: str
    row_index: int  # 0-based position among data rows
    row_number: int  # 1-based sheet row number (header offset applied)
    id: str
    kr_name: str
    kr_content: str = ""
    language: str = ""  # recorded language, falls back to expected_language
    recorded_language: str = ""  # raw col 3 value (may be empty)
    old_name: str = ""
    old_content: str = ""
    old_json: str = ""
    manual_name: str = ""
    manual_content: str = ""
    mt_name: str = ""
    mt_content: str = ""
    updated_json: str = ""
    old_json_parsed: dict[str, Any] = field(default_factory=dict)
    old_json_values: dict[str, str] = field(default_factory=dict)

    @property
    def content_field(self) -> str:
        return self.entity_kind.content_field

    @property
    def language_mismatch(self) -> bool:
        return bool(self.recorded_language) and self.recorded_language != self.expected_language

    @property
    def has_manual_override(self) -> bool:
        return bool(self.manual_name or self.manual_content)

    @property
    def has_mt_translation(self) -> bool:
        return bool(self.mt_name or self.mt_content)

    @property
    def has_old_values(self) -> bool:
        return bool(self.old_name or self.old_content)

    @property
    def has_valid_old_json(self) -> bool:
        return bool(self.old_json_parsed)

    @property
    def content_changed(self) -> bool:
        """Korean source differs from the old (published) values.

        Compares kr_* against old_* literally. Those are different languages,
        so with old values present this is almost always True. Without old
        values the row counts as changed.
        """
        if not self.has_old_values:
            return True
        return self.kr_name != self.old_name or self.kr_content != self.old_content

    @property
    def needs_translation(self) -> bool:
        return not self.has_mt_translation or (self.has_old_values and self.content_changed)

    def source_texts(self) -> dict[str, str]:
        """Korean texts to send to the translation collaborator."""
        return {"name": self.kr_name, self.content_field: self.kr_content}
