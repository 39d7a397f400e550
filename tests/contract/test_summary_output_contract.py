from __future__ import annotations

import re
from pathlib import Path

from kr_sheet_translator.cli import main as cli_main

SUMMARY_RE = re.compile(
    r"^SUMMARY sheet=\S+ kind=(doctor|hospital) language=[a-z-]+ rows=\d+/\d+ "
    r"translated=\d+ skipped=\d+ manual=\d+ old=\d+ json=\d+ multi_language=\d+ "
    r"errors=\d+ elapsed_sec=[0-9.]+$"
)


def test_summary_line_format(temp_workdir: Path, doctor_workbook: Path, capsys):
    cli_main(["--input", str(doctor_workbook), "--kind", "doctor", "--language", "en"])
    lines = [line for line in capsys.readouterr().out.splitlines() if line.startswith("SUMMARY")]
    assert len(lines) == 1
    assert SUMMARY_RE.match(lines[0]), lines[0]
    assert " manual=1 old=1 json=3 multi_language=1 errors=0 " in lines[0]


def test_every_output_line_is_labeled(temp_workdir: Path, doctor_workbook: Path, capsys):
    cli_main(["--input", str(doctor_workbook), "--kind", "doctor", "--language", "en"])
    for line in capsys.readouterr().out.splitlines():
        assert re.match(r"^(INFO|WARN|ERROR|SUMMARY) ", line), line
