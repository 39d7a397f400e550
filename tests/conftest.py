# Shared pytest fixtures
from __future__ import annotations

import json
import tempfile
from pathlib import Path

import pandas as pd
import pytest

from kr_sheet_translator.logging.init import reset_logging
from kr_sheet_translator.models.entity_kind import EntityKind
from kr_sheet_translator.store.cache import ParseCache
from kr_sheet_translator.store.multi_language import MultiLanguageStore


@pytest.fixture(autouse=True)
def _clean_logging():
    # CLI 테스트가 stdout 핸들러를 남기지 않도록 매번 초기화
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("KST_CONFIG", raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """languages: [en, ja, th]
json:
  indent: 2
  log_parse_errors: true
cache:
  enabled: true
  max_size: 100
columns:
  doctor:
    name: J
    content: K
    updated_json: L
  hospital:
    name: J
    content: K
    updated_json: L
header_rows: 1
version: "2.0.0"
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "translator.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def store() -> MultiLanguageStore:
    return MultiLanguageStore(("en", "ja", "th"), cache=ParseCache(100))


@pytest.fixture()
def doctor_headers() -> list[str]:
    return EntityKind.DOCTOR.expected_headers


@pytest.fixture()
def doctor_rows() -> list[list[str]]:
    """Three doctor rows covering manual, old_json fallback and untranslated cases."""
    old_json = json.dumps({"ja": {"name": "キム医師", "history": "経歴"}}, ensure_ascii=False)
    return [
        # manual override on name, MT on history
        ["d1", "김의사", "경력", "en", "", "", "", "Dr. Kim (manual)", "", "Dr. Kim", "Career", ""],
        # nothing translated for en, old_json only has ja
        ["d2", "이의사", "약력", "en", "", "", old_json],
        # old values present, MT missing
        ["d3", "박의사", "학력", "en", "Dr. Park", "Education"],
    ]


def _write_workbook(path: Path, sheets: dict[str, list[list[str]]]) -> Path:
    """Write ``{tab: rows}`` (header row included) to an xlsx file."""
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for name, rows in sheets.items():
            width = max((len(r) for r in rows), default=0)
            padded = [list(r) + [""] * (width - len(r)) for r in rows]
            pd.DataFrame(padded).to_excel(writer, sheet_name=name, header=False, index=False)
    return path


@pytest.fixture()
def write_workbook():
    return _write_workbook


@pytest.fixture()
def doctor_workbook(temp_workdir: Path, doctor_headers, doctor_rows) -> Path:
    return _write_workbook(
        temp_workdir / "data" / "doctors.xlsx",
        {"en": [doctor_headers, *doctor_rows]},
    )
