"""Domain models for the sheet translator."""

from .config_models import CacheConfig, ColumnLayout, TranslatorConfig
from .entity_kind import EntityKind
from .error_record import ErrorRecord
from .processing_result import (
    DecodeError,
    DecodeResult,
    DecodeStatistics,
    JSONBuildResult,
    RowMergeError,
    RunResult,
    WriteInstruction,
)
from .row_model import COLUMN_COUNT, Column, RowModel

__all__ = [
    # Configuration models
    "CacheConfig",
    "ColumnLayout",
    "TranslatorConfig",
    # Row models
    "Column",
    "COLUMN_COUNT",
    "EntityKind",
    "RowModel",
    # Processing models
    "DecodeError",
    "DecodeResult",
    "DecodeStatistics",
    "ErrorRecord",
    "JSONBuildResult",
    "RowMergeError",
    "RunResult",
    "WriteInstruction",
]
