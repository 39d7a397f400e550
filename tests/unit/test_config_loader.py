from __future__ import annotations

from pathlib import Path

import pytest

from kr_sheet_translator.config.loader import (
    ConfigError,
    config_from_dict,
    load_config,
    resolve_config_path,
)
from kr_sheet_translator.models.config_models import ColumnLayout, TranslatorConfig
from kr_sheet_translator.models.entity_kind import EntityKind


def test_load_config_success(write_config: Path):
    cfg = load_config()
    assert cfg.languages == ("en", "ja", "th")
    assert cfg.json_indent == 2
    assert cfg.cache.max_size == 100
    assert cfg.columns_for(EntityKind.HOSPITAL) == ColumnLayout("J", "K", "L")
    assert cfg.first_data_row == 2
    assert cfg.version == "2.0.0"


def test_missing_default_config_uses_defaults(temp_workdir: Path):
    assert load_config() == TranslatorConfig()


def test_missing_explicit_config(temp_workdir: Path):
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(temp_workdir / "config" / "nope.yml")


def test_env_var_path(temp_workdir: Path, monkeypatch):
    custom = temp_workdir / "custom.yml"
    custom.write_text("languages: [en, ko]\nheader_rows: 2\n", encoding="utf-8")
    monkeypatch.setenv("KST_CONFIG", str(custom))
    assert resolve_config_path() == (custom, True)
    cfg = load_config()
    assert cfg.languages == ("en", "ko")
    assert cfg.first_data_row == 3


def test_env_var_missing_file_is_error(temp_workdir: Path, monkeypatch):
    monkeypatch.setenv("KST_CONFIG", str(temp_workdir / "gone.yml"))
    with pytest.raises(ConfigError):
        load_config()


def test_invalid_yaml(temp_workdir: Path):
    p = temp_workdir / "config" / "translator.yml"
    p.write_text("languages: [en\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config()


def test_root_must_be_mapping(temp_workdir: Path):
    p = temp_workdir / "config" / "translator.yml"
    p.write_text("- en\n- ja\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="mapping"):
        load_config()


def test_empty_file_gives_defaults(temp_workdir: Path):
    (temp_workdir / "config" / "translator.yml").write_text("", encoding="utf-8")
    assert load_config() == TranslatorConfig()


@pytest.mark.parametrize(
    "body",
    [
        "languages: []\n",
        "languages: [EN]\n",
        "languages: [en, en]\n",
        "json:\n  indent: 12\n",
        "cache:\n  max_size: 0\n",
        "columns:\n  doctor:\n    name: j\n",
        "columns:\n  clinic: {}\n",
        "header_rows: -1\n",
        "unknown_key: 1\n",
    ],
)
def test_schema_violations(temp_workdir: Path, body: str):
    (temp_workdir / "config" / "translator.yml").write_text(body, encoding="utf-8")
    with pytest.raises(ConfigError, match="config validation failed"):
        load_config()


def test_partial_columns_fall_back_to_defaults():
    cfg = config_from_dict({"columns": {"doctor": {"name": "M"}}, "cache": {"enabled": False}})
    assert cfg.columns_for(EntityKind.DOCTOR) == ColumnLayout(name="M", content="K", updated_json="L")
    assert cfg.columns_for(EntityKind.HOSPITAL) == ColumnLayout()
    assert cfg.cache.enabled is False
    assert cfg.cache.max_size == 100


def test_bundled_default_config_is_valid(monkeypatch):
    root = Path(__file__).resolve().parents[2]
    monkeypatch.chdir(root)
    monkeypatch.delenv("KST_CONFIG", raising=False)
    assert load_config() == TranslatorConfig()
