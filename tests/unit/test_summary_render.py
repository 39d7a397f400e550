from __future__ import annotations

from datetime import UTC, datetime

import pytest

from kr_sheet_translator.models.processing_result import (
    DecodeError,
    DecodeStatistics,
    JSONBuildResult,
    RunResult,
)
from kr_sheet_translator.services.summary import format_number, render_summary_line


@pytest.mark.parametrize(
    "value,expected",
    [(0, "0"), (0.0, "0"), (3.0, "3"), (1.23456, "1.235"), (0.001234, "0.001234")],
)
def test_format_number(value, expected):
    assert format_number(value) == expected


def test_render_summary_line():
    now = datetime.now(UTC)
    result = RunResult(
        sheet_name="en",
        entity_kind="doctor",
        language="en",
        start_time=now,
        end_time=now,
        elapsed_seconds=0.5,
        statistics=DecodeStatistics(total_rows=3, valid_rows=2, rows_with_manual_override=1, rows_with_old_values=1),
        decode_errors=[DecodeError(3, "Missing required fields: id or kr_name")],
        json_results=[
            JSONBuildResult(row_index=0, id="d1", success=True, json="{}"),
            JSONBuildResult(row_index=2, id="d3", success=False, error="x"),
        ],
        rows_translated=1,
        multi_language_json=1,
    )
    assert render_summary_line(result) == (
        "SUMMARY sheet=en kind=doctor language=en rows=2/3 translated=1 skipped=0 "
        "manual=1 old=1 json=1 multi_language=1 errors=2 elapsed_sec=0.5"
    )
