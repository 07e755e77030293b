from __future__ import annotations

import copy

import pytest

from taskboard.client.updates import CLEAR, UNCHANGED, SetTo, TaskPatch


def test_from_fields_tags_missing_null_and_values() -> None:
    patch = TaskPatch.from_fields({"title": "New", "priority": None, "ignored": 1})

    assert patch.title == SetTo("New")
    assert patch.priority is CLEAR
    assert patch.dueDate is UNCHANGED
    assert patch.status is UNCHANGED


def test_required_fields_cannot_be_cleared() -> None:
    with pytest.raises(ValueError):
        TaskPatch.from_fields({"title": None})


def test_to_wire_sends_only_touched_fields() -> None:
    patch = TaskPatch.from_fields({"status": "done", "dueDate": None})

    assert patch.to_wire() == {"status": "done", "dueDate": None}
    assert TaskPatch().to_wire() == {}
    assert TaskPatch().is_empty()


def test_apply_removes_cleared_fields_instead_of_nulling_them() -> None:
    record = {"id": "a", "title": "Old", "priority": 5, "dueDate": 1700000000}

    updated = TaskPatch.from_fields({"priority": None, "title": "New"}).apply(record)

    assert "priority" not in updated
    assert updated["title"] == "New"
    assert updated["dueDate"] == 1700000000
    assert record["priority"] == 5


def test_markers_survive_deepcopy() -> None:
    patch = TaskPatch.from_fields({"priority": None})
    assert copy.deepcopy(patch).priority is CLEAR
