from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for per-row error logging.

Rows that cannot be decoded, translated or merged never stop a run. Each such
failure becomes one ErrorRecord, buffered and written as JSON Lines by
``kr_sheet_translator.logging.error_log.ErrorLogBuffer``. ``row=-1`` marks
sheet-level errors where no specific row applies.
"""

__all__ = [
    "ErrorRecord",
    "ROW_DECODE_ERROR",
    "TRANSLATION_ERROR",
    "ROW_MERGE_ERROR",
    "SHEET_STRUCTURE_ERROR",
]

ROW_DECODE_ERROR = "ROW_DECODE_ERROR"
TRANSLATION_ERROR = "TRANSLATION_ERROR"
ROW_MERGE_ERROR = "ROW_MERGE_ERROR"
SHEET_STRUCTURE_ERROR = "SHEET_STRUCTURE_ERROR"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        sheet: Sheet tab name
        row: 1-based sheet row number, -1 when unknown
        record_id: Record id of the row ("" when the id itself was missing)
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human readable reason
    """
    timestamp: str
    sheet: str
    row: int
    record_id: str
    error_type: str
    message: str

    @staticmethod
    def create(sheet: str, row: int, record_id: str, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            sheet=sheet,
            row=row,
            record_id=record_id,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # Korean/Thai text stays readable in the log file
        return json.dumps(asdict(self), ensure_ascii=False)
