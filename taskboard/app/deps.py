"""Dependency providers for the task API (repository wiring)."""

from __future__ import annotations

import logging
from typing import Iterator

from taskboard.adapters.task_repository_file import FileTaskRepository
from taskboard.app.adapters.repo_sql import SQLAlchemyTaskRepository
from taskboard.app.config import get_settings
from taskboard.app.db import SessionLocal
from taskboard.ports.task_repository import ITaskRepository

logger = logging.getLogger(__name__)


def get_task_repository() -> Iterator[ITaskRepository]:
    """Yield the repository selected by TASK_REPO_BACKEND (``sql`` or ``file``)."""
    settings = get_settings()
    backend = (settings.task_repo_backend or "sql").lower()
    if backend == "file":
        yield FileTaskRepository(settings.workspace_root)
        return

    db = SessionLocal()
    try:
        yield SQLAlchemyTaskRepository(db)
    finally:
        db.close()
