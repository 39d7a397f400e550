from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any

from ..models.config_models import DEFAULT_LANGUAGES
from ..models.entity_kind import EntityKind
from .cache import ParseCache

"""Multi-language JSON store.

Handles the per-row JSON blob written to the ``updated_json`` column::

    {"en": {"id": "d1", "name": "...", "history": "..."}, "ja": {...}}

Keys outside the configured language set are carried through ``merge``
untouched but ignored by every language oriented query.

None of the public methods raise. Malformed input degrades to ``{}``,
``None`` or the unchanged base object (plus a log line), so one broken
historical blob cannot abort a batch of hundreds of rows.
"""

__all__ = [
    "MultiLanguageJSONError",
    "JSONParseError",
    "InvalidLanguageError",
    "MultiLanguageStore",
]

logger = logging.getLogger(__name__)


class MultiLanguageJSONError(Exception):
    """Base class for store internal failures (never escapes the store)."""


class JSONParseError(MultiLanguageJSONError):
    """Text is not JSON or its top level is not an object."""


class InvalidLanguageError(MultiLanguageJSONError):
    """Language code outside the configured set."""


def _is_object(value: Any) -> bool:
    return isinstance(value, dict)


class MultiLanguageStore:
    """Parse / merge / extract / serialize multi-language JSON objects.

    One instance is owned by a run. The optional ``cache`` is injected so
    tests (and callers that parallelise across threads) decide its lifetime.
    """

    def __init__(
        self,
        languages: Iterable[str] = DEFAULT_LANGUAGES,
        *,
        cache: ParseCache | None = None,
        indent: int = 2,
        log_parse_errors: bool = True,
    ) -> None:
        self.languages: tuple[str, ...] = tuple(languages)
        self.cache = cache
        self.indent = indent
        self.log_parse_errors = log_parse_errors

    @classmethod
    def from_config(cls, config: Any) -> MultiLanguageStore:
        """Build a store from a ``TranslatorConfig``."""
        cache = ParseCache(config.cache.max_size) if config.cache.enabled else None
        return cls(
            config.languages,
            cache=cache,
            indent=config.json_indent,
            log_parse_errors=config.log_parse_errors,
        )

    # -- validation -----------------------------------------------------

    def is_valid_language(self, code: Any) -> bool:
        return isinstance(code, str) and code in self.languages

    def _require_language(self, code: Any) -> str:
        if not self.is_valid_language(code):
            raise InvalidLanguageError(f"Invalid language code: {code}")
        return code

    def validate(self, obj: Any) -> bool:
        """True if ``obj`` is a JSON object (empty objects included).

        Warns when the object has keys but none of them is a language.
        """
        if not _is_object(obj):
            return False
        if obj and not self.available_languages(obj):
            logger.warning("JSON has keys but no valid language codes: %s", sorted(obj))
        return True

    # -- parsing --------------------------------------------------------

    def _load(self, text: str) -> dict[str, Any]:
        try:
            parsed = json.loads(text)
        except (json.JSONDecodeError, ValueError) as e:
            raise JSONParseError(f"Failed to parse JSON: {e}") from e
        if not _is_object(parsed):
            raise JSONParseError(
                f"Parsed JSON is not a valid object structure (got {type(parsed).__name__})"
            )
        return parsed

    def parse(self, text: str | None) -> dict[str, Any]:
        """Parse ``text`` into a dict, ``{}`` for empty/invalid/non-object input."""
        if text is None or not isinstance(text, str) or text.strip() == "":
            return {}

        if self.cache is not None:
            cached = self.cache.get(text)
            if cached is not None:
                return cached

        try:
            parsed = self._load(text)
        except JSONParseError as e:
            if self.log_parse_errors:
                logger.warning("%s", e)
                logger.debug("Invalid JSON string: %r", text)
            return {}

        if self.cache is not None:
            self.cache.put(text, parsed)
        return parsed

    def clear_cache(self) -> None:
        if self.cache is not None:
            self.cache.clear()

    # -- merging --------------------------------------------------------

    @staticmethod
    def merge_payload(existing: Any, payload: dict[str, Any]) -> dict[str, Any]:
        """Shallow union of two language payloads; ``payload`` keys win."""
        merged: dict[str, Any] = dict(existing) if _is_object(existing) else {}
        for key, value in payload.items():
            merged[key] = value
        return merged

    def merge(self, existing: Any, language: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Return a copy of ``existing`` with ``payload`` merged into ``existing[language]``.

        ``existing`` itself is never mutated. Other languages and unknown keys
        are kept as they are. An unknown ``language`` is logged and the copy
        is returned without changes.
        """
        base: dict[str, Any] = dict(existing) if _is_object(existing) else {}
        try:
            code = self._require_language(language)
        except InvalidLanguageError as e:
            logger.error("%s", e)
            return base
        base[code] = self.merge_payload(base.get(code), payload or {})
        return base

    def merge_multiple(self, *objs: Any) -> dict[str, Any]:
        """Union of language entries across objects; later objects win per key."""
        result: dict[str, Any] = {}
        for obj in objs:
            if not _is_object(obj):
                continue
            for code, data in obj.items():
                if self.is_valid_language(code):
                    result[code] = self.merge_payload(result.get(code), data if _is_object(data) else {})
        return result

    def create(self, language: str, payload: dict[str, Any]) -> dict[str, Any]:
        if not self.is_valid_language(language):
            logger.error("Cannot create JSON with invalid language: %s", language)
            return {}
        return {language: dict(payload)}

    def remove_language(self, obj: Any, language: str) -> dict[str, Any]:
        base: dict[str, Any] = dict(obj) if _is_object(obj) else {}
        if self.is_valid_language(language):
            base.pop(language, None)
        return base

    # -- queries --------------------------------------------------------

    def extract_language(self, obj: Any, language: str) -> dict[str, Any] | None:
        if not _is_object(obj) or not self.is_valid_language(language):
            return None
        value = obj.get(language)
        # non-object entries ("en": "x") are not language payloads
        return value if _is_object(value) else None

    def has_language(self, obj: Any, language: str) -> bool:
        value = obj.get(language) if _is_object(obj) else None
        return _is_object(value) and len(value) > 0

    def available_languages(self, obj: Any) -> set[str]:
        if not _is_object(obj):
            return set()
        return {key for key in obj if self.is_valid_language(key)}

    def extract_old_json_values(
        self, obj: Any, language: str, entity_kind: EntityKind
    ) -> dict[str, str]:
        """``{name, <content field>}`` found in ``obj[language]``.

        Absent, null, empty, ``false`` and ``0`` entries are left out so the
        priority chain treats them as missing. Other non-string values are
        kept as their JSON text (``true``, ``1.5``). A non-object language
        entry yields ``{}``.
        """
        data = self.extract_language(obj, language)
        if not _is_object(data):
            return {}
        values: dict[str, str] = {}
        for key in ("name", entity_kind.content_field):
            value = data.get(key)
            if not value:
                continue
            values[key] = value if isinstance(value, str) else json.dumps(value, ensure_ascii=False)
        return values

    def default_values(self, entity_kind: EntityKind, language: str) -> dict[str, Any]:
        return {language: {"name": "", entity_kind.content_field: ""}}

    # -- serialisation --------------------------------------------------

    def stringify(self, obj: Any) -> str:
        """Deterministic JSON text (insertion order, configured indent)."""
        try:
            return json.dumps(obj, indent=self.indent, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.error("Failed to stringify JSON: %s", e)
            return "{}"
