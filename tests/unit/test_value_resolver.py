from __future__ import annotations

import pytest

from kr_sheet_translator.models.entity_kind import EntityKind
from kr_sheet_translator.models.row_model import RowModel
from kr_sheet_translator.services.value_resolver import (
    FinalValues,
    ValueSource,
    candidates,
    get_final_values,
    needs_translation,
    resolve_field,
)


def make_row(kind: EntityKind = EntityKind.DOCTOR, **kwargs) -> RowModel:
    base = dict(
        entity_kind=kind,
        expected_language="en",
        row_index=0,
        row_number=2,
        id="r1",
        kr_name="김",
    )
    base.update(kwargs)
    return RowModel(**base)


class TestPriority:
    def test_manual_wins(self):
        row = make_row(manual_name="M", mt_name="T", old_name="O", old_json_values={"name": "J"})
        assert resolve_field(row, "name") == ("M", ValueSource.MANUAL)

    def test_mt_when_no_manual(self):
        row = make_row(mt_name="T", old_name="O", old_json_values={"name": "J"})
        assert resolve_field(row, "name") == ("T", ValueSource.MT)

    def test_old_when_no_mt(self):
        row = make_row(old_content="O", old_json_values={"history": "J"})
        assert resolve_field(row, "content") == ("O", ValueSource.OLD)

    def test_old_json_last(self):
        row = make_row(old_json_values={"history": "J"})
        assert resolve_field(row, "content") == ("J", ValueSource.OLD_JSON)

    def test_nothing_resolves_to_empty(self):
        assert resolve_field(make_row(), "name") == ("", ValueSource.NONE)

    def test_content_uses_kind_specific_old_json_key(self):
        row = make_row(
            EntityKind.HOSPITAL,
            old_json_values={"history": "wrong", "description": "D"},
        )
        assert resolve_field(row, "content") == ("D", ValueSource.OLD_JSON)

    def test_fields_resolve_independently(self):
        row = make_row(manual_name="M", mt_content="T")
        assert get_final_values(row) == FinalValues(id="r1", name="M", content="T")

    def test_unknown_field(self):
        with pytest.raises(ValueError):
            candidates(make_row(), "title")


def test_candidates_order():
    row = make_row(manual_name="M", old_name="O")
    assert candidates(row, "name") == [
        (ValueSource.MANUAL, "M"),
        (ValueSource.MT, ""),
        (ValueSource.OLD, "O"),
        (ValueSource.OLD_JSON, None),
    ]


def test_payload_shape_per_kind():
    values = FinalValues(id="r1", name="N", content="C")
    assert values.as_payload(EntityKind.DOCTOR) == {"id": "r1", "name": "N", "history": "C"}
    assert values.as_payload(EntityKind.HOSPITAL) == {"id": "r1", "name": "N", "description": "C"}


def test_kind_mismatch_is_rejected():
    with pytest.raises(ValueError):
        get_final_values(make_row(EntityKind.DOCTOR), EntityKind.HOSPITAL)


def test_needs_translation_delegates_to_row():
    assert needs_translation(make_row()) is True
    assert needs_translation(make_row(mt_name="T")) is False
