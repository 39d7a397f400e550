from __future__ import annotations

from dataclasses import dataclass, field

from .entity_kind import EntityKind

"""Config dataclasses for the sheet translator.

Separate from the YAML loader in ``kr_sheet_translator/config/loader.py``.
Defaults reproduce the layout and behaviour of the production sheets
(languages en/ja/th, write-back columns J/K/L, 2-space JSON indent).
"""

__all__ = [
    "DEFAULT_LANGUAGES",
    "CacheConfig",
    "ColumnLayout",
    "TranslatorConfig",
]

DEFAULT_LANGUAGES: tuple[str, ...] = ("en", "ja", "th")


@dataclass(frozen=True)
class CacheConfig:
    """Bounded parse cache for old_json strings."""
    enabled: bool = True
    max_size: int = 100


@dataclass(frozen=True)
class ColumnLayout:
    """Column letters an external writer fills for one EntityKind."""
    name: str = "J"  # MT name column
    content: str = "K"  # MT history/description column
    updated_json: str = "L"


@dataclass(frozen=True)
class TranslatorConfig:
    """Root configuration object."""
    languages: tuple[str, ...] = DEFAULT_LANGUAGES
    json_indent: int = 2
    log_parse_errors: bool = True
    cache: CacheConfig = field(default_factory=CacheConfig)
    columns: dict[EntityKind, ColumnLayout] = field(
        default_factory=lambda: {kind: ColumnLayout() for kind in EntityKind}
    )
    header_rows: int = 1  # rows above the first data row
    version: str = "2.0.0"

    def columns_for(self, kind: EntityKind) -> ColumnLayout:
        return self.columns.get(kind, ColumnLayout())

    @property
    def first_data_row(self) -> int:
        """1-based sheet row number of data index 0."""
        return self.header_rows + 1
