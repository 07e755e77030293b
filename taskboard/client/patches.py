"""Patch functions for the create, update and delete mutation shapes.

Each builder returns a ``patch_fn(key, value)`` suitable for
:func:`taskboard.client.optimistic.begin_optimistic`; it receives a private
copy of the cached value and returns the new value for that key.
"""

from __future__ import annotations

from typing import Any, Hashable

from taskboard.client.cache import LIST_KEY
from taskboard.client.updates import TaskPatch


def _index_of(tasks: list[dict[str, Any]], task_id: str) -> int:
    for idx, task in enumerate(tasks):
        if task.get("id") == task_id:
            return idx
    return -1


def insert_head(record: dict[str, Any]):
    def patch(key: Hashable, value: Any) -> Any:
        if key != LIST_KEY:
            return value
        return [dict(record), *(value or [])]

    return patch


def replace_record(task_id: str, record: dict[str, Any]):
    """Swap the entry for ``task_id`` with ``record`` keeping its list position."""

    def patch(key: Hashable, value: Any) -> Any:
        if key == LIST_KEY:
            tasks = list(value or [])
            idx = _index_of(tasks, task_id)
            if idx != -1:
                tasks[idx] = dict(record)
            return tasks
        return dict(record)

    return patch


def merge_update(task_id: str, task_patch: TaskPatch, now: int):
    def merge(task: dict[str, Any]) -> dict[str, Any]:
        merged = task_patch.apply(task)
        merged["updatedAt"] = max(now, merged.get("createdAt") or 0)
        return merged

    def patch(key: Hashable, value: Any) -> Any:
        if key == LIST_KEY:
            tasks = list(value or [])
            idx = _index_of(tasks, task_id)
            if idx != -1:
                tasks[idx] = merge(tasks[idx])
            return tasks
        return merge(value)

    return patch


def remove_record(task_id: str):
    def patch(key: Hashable, value: Any) -> Any:
        if key != LIST_KEY:
            return value
        return [task for task in value or [] if task.get("id") != task_id]

    return patch
