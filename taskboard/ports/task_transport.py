"""Port interface for reaching the task service over the network."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ITaskTransport(Protocol):
    """Async create/read/update/delete access to stored tasks.

    Implementations raise ``TransportError`` (``NotFoundError`` for a missing
    task) on any failure, timeouts included.
    """

    async def list(self) -> list[dict[str, Any]]:
        """Return all tasks, newest first."""

    async def get(self, task_id: str) -> dict[str, Any]:
        """Return one task by id."""

    async def create(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Create a task and return the stored record."""

    async def update(self, task_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Apply a partial update and return the stored record."""

    async def delete(self, task_id: str) -> None:
        """Delete a task."""

    async def aclose(self) -> None:
        """Release network resources."""


@runtime_checkable
class INotifier(Protocol):
    """Receives user-facing mutation outcomes (toasts, form errors)."""

    def success(self, message: str) -> None:
        """Report a completed mutation."""

    def error(self, message: str) -> None:
        """Report a failed mutation."""
