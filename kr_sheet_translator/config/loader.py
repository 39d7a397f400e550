from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DEFAULT_LANGUAGES,
    CacheConfig,
    ColumnLayout,
    TranslatorConfig,
)
from ..models.entity_kind import EntityKind

"""Config loader.

Responsibilities:
- Load the YAML config (``config/translator.yml`` unless ``KST_CONFIG`` or an
  explicit path says otherwise)
- Validate it against the bundled JSON schema
- Apply defaults and build the frozen ``TranslatorConfig``
"""

__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "ConfigError",
    "config_from_dict",
    "load_config",
    "resolve_config_path",
]

CONFIG_ENV_VAR = "KST_CONFIG"
DEFAULT_CONFIG_PATH = Path("config/translator.yml")
SCHEMA_PATH = Path(__file__).with_name("config_schema.json")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or not JSON, or data fails validation
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _column_layout(raw: dict[str, Any] | None) -> ColumnLayout:
    raw = raw or {}
    default = ColumnLayout()
    return ColumnLayout(
        name=raw.get("name", default.name),
        content=raw.get("content", default.content),
        updated_json=raw.get("updated_json", default.updated_json),
    )


def config_from_dict(data: dict[str, Any]) -> TranslatorConfig:
    """Build a TranslatorConfig from already validated data."""
    json_raw = data.get("json") or {}
    cache_raw = data.get("cache") or {}
    columns_raw = data.get("columns") or {}
    defaults = TranslatorConfig()
    return TranslatorConfig(
        languages=tuple(data.get("languages") or DEFAULT_LANGUAGES),
        json_indent=json_raw.get("indent", defaults.json_indent),
        log_parse_errors=json_raw.get("log_parse_errors", defaults.log_parse_errors),
        cache=CacheConfig(
            enabled=cache_raw.get("enabled", defaults.cache.enabled),
            max_size=cache_raw.get("max_size", defaults.cache.max_size),
        ),
        columns={kind: _column_layout(columns_raw.get(kind.value)) for kind in EntityKind},
        header_rows=data.get("header_rows", defaults.header_rows),
        version=str(data.get("version", defaults.version)),
    )


def resolve_config_path(explicit: Path | None = None) -> tuple[Path, bool]:
    """Config path to use and whether it was asked for explicitly.

    Explicit argument > ``KST_CONFIG`` environment variable > default path.
    """
    if explicit is not None:
        return explicit, True
    env = os.getenv(CONFIG_ENV_VAR)
    if env:
        return Path(env), True
    return DEFAULT_CONFIG_PATH, False


def load_config(path: Path | None = None) -> TranslatorConfig:
    """Load and validate the config.

    A missing file is an error only when it was requested explicitly (argument
    or ``KST_CONFIG``); otherwise the built-in defaults are returned.
    """
    path, explicit = resolve_config_path(path)
    if not path.exists():
        if explicit:
            raise ConfigError(f"config file not found: {path}")
        return TranslatorConfig()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)
    return config_from_dict(data)
