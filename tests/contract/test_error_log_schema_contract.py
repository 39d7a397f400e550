from __future__ import annotations

import json
from pathlib import Path

from kr_sheet_translator.cli import main as cli_main

REQUIRED_KEYS = {"timestamp", "sheet", "row", "record_id", "error_type", "message"}
ERROR_TYPES = {"ROW_DECODE_ERROR", "TRANSLATION_ERROR", "ROW_MERGE_ERROR", "SHEET_STRUCTURE_ERROR"}


def _records(logs_dir: Path) -> list[dict]:
    files = sorted(logs_dir.glob("errors-*.log"))
    assert len(files) == 1
    return [json.loads(line) for line in files[0].read_text(encoding="utf-8").splitlines()]


def test_error_log_schema(temp_workdir: Path, write_workbook, doctor_headers, doctor_rows):
    path = write_workbook(
        temp_workdir / "data" / "hospitals.xlsx",
        {"ja": [doctor_headers, ["", "이름만"], doctor_rows[1], ["h3", ""]]},
    )
    code = cli_main(["--input", str(path), "--kind", "hospital", "--language", "ja"])
    assert code == 2

    records = _records(temp_workdir / "logs")
    assert len(records) == 2
    for rec in records:
        assert set(rec) == REQUIRED_KEYS
        assert rec["error_type"] in ERROR_TYPES
        assert rec["timestamp"].endswith("Z")
        assert isinstance(rec["row"], int)
        assert rec["sheet"] == "ja"
    assert [(r["row"], r["record_id"]) for r in records] == [(2, ""), (4, "h3")]
    assert records[0]["message"] == "Missing required fields: id or kr_name"


def test_sheet_level_error_uses_unknown_row(temp_workdir: Path, doctor_workbook: Path):
    code = cli_main(["--input", str(doctor_workbook), "--kind", "doctor", "--language", "th"])
    assert code == 1
    (rec,) = _records(temp_workdir / "logs")
    assert rec["row"] == -1
    assert rec["error_type"] == "SHEET_STRUCTURE_ERROR"
    assert rec["sheet"] == "th"
