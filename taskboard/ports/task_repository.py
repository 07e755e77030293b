"""Port interface for task persistence (repository boundary)."""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class ITaskRepository(Protocol):
    """Task repository abstraction.

    Records are plain dicts with snake_case keys (``due_date``, ``created_at``...);
    timestamps are server-assigned floats of seconds since epoch.
    """

    def create(self, task: dict[str, Any]) -> dict[str, Any]:
        """Persist a new task record and return the stored entity."""

    def get(self, task_id: str) -> Optional[dict[str, Any]]:
        """Return a task by id or None when missing."""

    def list(self) -> list[dict[str, Any]]:
        """Return every stored task, newest first."""

    def update(self, task_id: str, patch: dict[str, Any]) -> Optional[dict[str, Any]]:
        """Merge ``patch`` into a task; None values clear the field. None when missing."""

    def delete(self, task_id: str) -> bool:
        """Remove a task; False when it did not exist."""
