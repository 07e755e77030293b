"""Helpers for normalizing task payloads and ordering task lists."""

from __future__ import annotations

import math
import time
from typing import Any, Dict, Iterable, List
from uuid import uuid4

OPTIONAL_FIELDS = ("priority", "due_date")


def new_task_id() -> str:
    return uuid4().hex[:12]


def _coalesce(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def _seconds(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return int(math.floor(number))


def normalize_task_payload(payload: Dict[str, Any], *, is_new: bool = False) -> Dict[str, Any]:
    """Normalize task payload fields without raising on missing values."""

    payload = dict(payload or {})

    task_id = _coalesce(payload.get("id"), payload.get("task_id"))
    if task_id is not None:
        payload["id"] = str(task_id)
    payload.pop("task_id", None)

    if isinstance(payload.get("title"), str):
        payload["title"] = payload["title"].strip()
    if "description" in payload or is_new:
        payload["description"] = (payload.get("description") or "").strip()
    if is_new:
        payload["status"] = payload.get("status") or "todo"
        now = time.time()
        payload.setdefault("created_at", now)
        payload.setdefault("updated_at", payload["created_at"])
        for key in OPTIONAL_FIELDS:
            payload.setdefault(key, None)

    return payload


def apply_task_patch(current: Dict[str, Any], patch: Dict[str, Any]) -> Dict[str, Any]:
    """Merge a partial update; bump updated_at only when something changed."""

    updated = dict(current)
    changed = False
    for key, value in normalize_task_payload(patch).items():
        if key in ("id", "created_at", "updated_at"):
            continue
        if updated.get(key) != value:
            updated[key] = value
            changed = True
    if changed:
        previous = float(updated.get("updated_at") or updated.get("created_at") or 0.0)
        updated["updated_at"] = max(time.time(), previous)
    return updated


def task_to_wire(task: Dict[str, Any]) -> Dict[str, Any]:
    """Stored payload -> response fields; timestamps become whole seconds."""

    return {
        "id": str(task.get("id")),
        "title": task.get("title") or "",
        "description": task.get("description") or "",
        "status": task.get("status") or "todo",
        "priority": task.get("priority"),
        "due_date": _seconds(task.get("due_date")),
        "created_at": _seconds(task.get("created_at")) or 0,
        "updated_at": _seconds(_coalesce(task.get("updated_at"), task.get("created_at"))) or 0,
    }


def sort_tasks_by_created(tasks: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Return tasks sorted by created_at descending; unparseable values sort last."""

    def sort_key(item: Dict[str, Any]) -> float:
        try:
            return float(item.get("created_at") or 0.0)
        except (TypeError, ValueError):
            return 0.0

    return sorted(list(tasks or []), key=sort_key, reverse=True)
