from __future__ import annotations

import json
from pathlib import Path

from kr_sheet_translator.cli import main as cli_main


def test_full_run_with_translations_and_outputs(temp_workdir: Path, write_config, doctor_workbook: Path, capsys):
    results = temp_workdir / "data" / "results.json"
    results.write_text(
        json.dumps(
            {
                "results": [
                    {"id": "d2", "rowIndex": 1, "translated": {"name": "Dr. Lee", "history": "Bio & more"}},
                    {"id": "d3", "rowIndex": 2, "translated": {"name": "Dr. Park", "history": "Education"}},
                ]
            }
        ),
        encoding="utf-8",
    )
    ranges_path = temp_workdir / "out" / "ranges.json"
    export_path = temp_workdir / "out" / "export.json"

    code = cli_main(
        [
            "--input", str(doctor_workbook),
            "--kind", "doctor",
            "--language", "en",
            "--translations", str(results),
            "--output", str(ranges_path),
            "--export", str(export_path),
        ]
    )
    out = capsys.readouterr().out
    assert code == 0
    assert "translated=2" in out

    ranges = json.loads(ranges_path.read_text(encoding="utf-8"))
    assert ranges["translations"] == [
        {"range": "'en'!J3:J4", "values": [["Dr. Lee"], ["Dr. Park"]]},
        {"range": "'en'!K3:K4", "values": [["Bio & more"], ["Education"]]},
    ]
    (json_range,) = ranges["json"]
    assert json_range["range"] == "'en'!L2:L4"
    d2 = json.loads(json_range["values"][1][0])
    assert d2 == {
        "ja": {"name": "キム医師", "history": "経歴"},
        "en": {"id": "d2", "name": "Dr. Lee", "history": "Bio &amp; more"},
    }

    bundle = json.loads(export_path.read_text(encoding="utf-8"))
    assert bundle["count"] == 3
    assert bundle["languages"] == ["en", "ja"]
    assert bundle["data"]["d1"]["en"]["name"] == "Dr. Kim (manual)"


def test_hospital_run_writes_description(temp_workdir: Path, write_workbook, capsys):
    from kr_sheet_translator.models.entity_kind import EntityKind

    headers = EntityKind.HOSPITAL.expected_headers
    old_json = json.dumps({"th": {"id": "h1", "name": "โรงพยาบาล", "description": "คำอธิบาย"}}, ensure_ascii=False)
    path = write_workbook(
        temp_workdir / "data" / "hospitals.xlsx",
        {"th": [headers, ["h1", "서울병원", "설명", "th", "", "", old_json]]},
    )
    ranges_path = temp_workdir / "ranges.json"
    code = cli_main(["--input", str(path), "--kind", "hospital", "--language", "th", "--output", str(ranges_path)])
    assert code == 0

    ranges = json.loads(ranges_path.read_text(encoding="utf-8"))
    assert ranges["translations"] == []
    obj = json.loads(ranges["json"][0]["values"][0][0])
    assert obj == {"th": {"id": "h1", "name": "โรงพยาบาล", "description": "คำอธิบาย"}}


def test_inspect_data(temp_workdir: Path, doctor_workbook: Path, capsys):
    code = cli_main(["--input", str(doctor_workbook), "--kind", "doctor", "--language", "en", "--inspect-data"])
    out = capsys.readouterr().out
    assert code == 0
    assert "SHEET: en" in out
    assert "row=2 id=d1" in out
    assert "old_json_languages=['ja']" in out
