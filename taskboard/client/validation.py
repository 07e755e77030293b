"""Client-side checks run before a mutation is issued.

Nothing that fails here ever reaches the patch engine or the network.
The messages match the ones the service returns for the same problems.
"""

from __future__ import annotations

from typing import Any, Mapping

from taskboard.core.errors import ValidationError
from taskboard.core.timestamps import seconds_to_datetime, to_seconds

MAX_TITLE = 200
MAX_DESCRIPTION = 2000
STATUSES = ("todo", "in-progress", "done")


def _check_title(value: Any, errors: dict[str, str]) -> str | None:
    if value is None or not isinstance(value, str) or not value.strip():
        errors["title"] = "Title is required"
        return None
    title = value.strip()
    if len(title) > MAX_TITLE:
        errors["title"] = f"Title cannot exceed {MAX_TITLE} characters"
        return None
    return title


def _check_description(value: Any, errors: dict[str, str]) -> str | None:
    if value is None:
        return ""
    if not isinstance(value, str):
        errors["description"] = "Description must be text"
        return None
    description = value.strip()
    if len(description) > MAX_DESCRIPTION:
        errors["description"] = f"Description cannot exceed {MAX_DESCRIPTION} characters"
        return None
    return description


def _check_status(value: Any, errors: dict[str, str]) -> str | None:
    if value not in STATUSES:
        errors["status"] = "Status must be one of: todo, in-progress, done"
        return None
    return value


def _check_priority(value: Any, errors: dict[str, str]) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        else:
            errors["priority"] = "Priority must be an integer"
            return None
    if not 1 <= value <= 9:
        errors["priority"] = "Priority must be between 1 and 9"
        return None
    return value


def _check_due_date(value: Any, errors: dict[str, str]) -> int | None:
    if value is None:
        return None
    seconds = to_seconds(value)
    if seconds is None or seconds_to_datetime(seconds) is None:
        errors["dueDate"] = "Due date is not a valid date"
        return None
    return seconds


def validate_create(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Return normalized create fields or raise :class:`ValidationError`."""

    errors: dict[str, str] = {}
    result: dict[str, Any] = {
        "title": _check_title(fields.get("title"), errors),
        "description": _check_description(fields.get("description"), errors),
        "status": _check_status(fields.get("status") or "todo", errors),
    }
    priority = _check_priority(fields.get("priority"), errors)
    if priority is not None:
        result["priority"] = priority
    due_date = _check_due_date(fields.get("dueDate"), errors)
    if due_date is not None:
        result["dueDate"] = due_date
    if errors:
        raise ValidationError(errors)
    return result


def validate_update(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Normalize a partial update, keeping explicit ``None`` for clearable fields."""

    errors: dict[str, str] = {}
    result: dict[str, Any] = {}
    if "title" in fields:
        result["title"] = _check_title(fields["title"], errors)
    if "description" in fields:
        result["description"] = _check_description(fields["description"], errors)
    if "status" in fields:
        result["status"] = _check_status(fields["status"], errors)
    if "priority" in fields:
        result["priority"] = _check_priority(fields["priority"], errors)
    if "dueDate" in fields:
        result["dueDate"] = _check_due_date(fields["dueDate"], errors)
    if errors:
        raise ValidationError(errors)
    return result
