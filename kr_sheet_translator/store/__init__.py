"""Multi-language JSON handling (no spreadsheet knowledge)."""

from .cache import ParseCache
from .multi_language import (
    InvalidLanguageError,
    JSONParseError,
    MultiLanguageJSONError,
    MultiLanguageStore,
)

__all__ = [
    "InvalidLanguageError",
    "JSONParseError",
    "MultiLanguageJSONError",
    "MultiLanguageStore",
    "ParseCache",
]
