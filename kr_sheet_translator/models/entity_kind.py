from __future__ import annotations

from enum import Enum

"""EntityKind enum for the fixed sheet layouts.

Both record types share the same 12 column layout. The only difference is the
name of the free-text "content" field: doctors carry a ``history`` and
hospitals a ``description``.
"""

__all__ = [
    "EntityKind",
]


class EntityKind(Enum):
    """Record type of a sheet tab.

    - DOCTOR: content field is ``history``
    - HOSPITAL: content field is ``description``
    """
    DOCTOR = "doctor"
    HOSPITAL = "hospital"

    @property
    def content_field(self) -> str:
        return "history" if self is EntityKind.DOCTOR else "description"

    @property
    def expected_headers(self) -> list[str]:
        """Header names of the 12 fixed columns, in sheet order."""
        c = self.content_field
        return [
            "id",
            "kr_name",
            f"kr_{c}",
            "language",
            "old_name",
            f"old_{c}",
            "old_json",
            "manual_name",
            f"manual_{c}",
            "LLM_name",
            f"LLM_{c}",
            "updated_json",
        ]

    @classmethod
    def parse(cls, value: str | EntityKind) -> EntityKind:
        """Accept ``"doctor"``/``"Hospital"``/an EntityKind. Raises ValueError otherwise."""
        if isinstance(value, EntityKind):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Invalid data type: {value}") from None
