from __future__ import annotations

from ..models.processing_result import RunResult

"""SUMMARY line rendering.

Format::

    SUMMARY sheet={sheet} kind={kind} language={lang} rows={valid}/{total}
    translated={n} skipped={n} manual={n} old={n} json={n} multi_language={n}
    errors={n} elapsed_sec={elapsed}

(one line, fields separated by single spaces)
"""

__all__ = [
    "format_number",
    "render_summary_line",
]


def format_number(value: float) -> str:
    """Integers without decimals, tiny values without scientific notation."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def render_summary_line(result: RunResult) -> str:
    stats = result.statistics
    return (
        f"SUMMARY sheet={result.sheet_name} "
        f"kind={result.entity_kind} "
        f"language={result.language} "
        f"rows={stats.valid_rows}/{stats.total_rows} "
        f"translated={result.rows_translated} "
        f"skipped={result.rows_skipped} "
        f"manual={stats.rows_with_manual_override} "
        f"old={stats.rows_with_old_values} "
        f"json={result.json_generated} "
        f"multi_language={result.multi_language_json} "
        f"errors={result.error_count} "
        f"elapsed_sec={format_number(result.elapsed_seconds)}"
    )
