from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from ..models.entity_kind import EntityKind
from ..models.row_model import RowModel

"""Value resolver: picks the authoritative translated value per field.

Priority (fixed, not configurable)::

    manual > mt > old > old_json > ""

A candidate counts only when it is a non-empty string; ``None`` and ``""``
are both "absent".
"""

__all__ = [
    "FIELDS",
    "ValueSource",
    "FinalValues",
    "candidates",
    "resolve_field",
    "get_final_values",
    "needs_translation",
]

NAME = "name"
CONTENT = "content"
FIELDS = (NAME, CONTENT)


class ValueSource(Enum):
    MANUAL = "manual"
    MT = "mt"
    OLD = "old"
    OLD_JSON = "old_json"
    NONE = "none"


@dataclass(frozen=True)
class FinalValues:
    """Resolved values of one row."""
    id: str
    name: str
    content: str

    def as_payload(self, entity_kind: EntityKind) -> dict[str, str]:
        """Language payload ``{id, name, history|description}``."""
        return {"id": self.id, "name": self.name, entity_kind.content_field: self.content}


_Getter = Callable[[RowModel], "str | None"]

_CHAINS: dict[str, tuple[tuple[ValueSource, _Getter], ...]] = {
    NAME: (
        (ValueSource.MANUAL, lambda r: r.manual_name),
        (ValueSource.MT, lambda r: r.mt_name),
        (ValueSource.OLD, lambda r: r.old_name),
        (ValueSource.OLD_JSON, lambda r: r.old_json_values.get("name")),
    ),
    CONTENT: (
        (ValueSource.MANUAL, lambda r: r.manual_content),
        (ValueSource.MT, lambda r: r.mt_content),
        (ValueSource.OLD, lambda r: r.old_content),
        (ValueSource.OLD_JSON, lambda r: r.old_json_values.get(r.content_field)),
    ),
}


def candidates(row: RowModel, field: str) -> list[tuple[ValueSource, str | None]]:
    """Candidate values of ``field`` in priority order."""
    try:
        chain = _CHAINS[field]
    except KeyError:
        raise ValueError(f"unknown field: {field!r} (expected one of {FIELDS})") from None
    return [(source, getter(row)) for source, getter in chain]


def resolve_field(row: RowModel, field: str) -> tuple[str, ValueSource]:
    """First non-empty candidate of ``field`` and where it came from."""
    for source, value in candidates(row, field):
        if isinstance(value, str) and value != "":
            return value, source
    return "", ValueSource.NONE


def get_final_values(row: RowModel, entity_kind: EntityKind | None = None) -> FinalValues:
    """Resolved ``id``/``name``/``content`` of a row.

    ``entity_kind`` defaults to the kind the row was decoded with; passing a
    different one is a caller error.
    """
    if entity_kind is not None and entity_kind is not row.entity_kind:
        raise ValueError(
            f"row {row.id} was decoded as {row.entity_kind.value}, not {entity_kind.value}"
        )
    name, _ = resolve_field(row, NAME)
    content, _ = resolve_field(row, CONTENT)
    return FinalValues(id=row.id or "", name=name, content=content)


def needs_translation(row: RowModel) -> bool:
    return row.needs_translation
