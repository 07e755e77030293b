"""File-backed task repository: one JSON document per task."""

from __future__ import annotations

import json
import logging
import os
import re
import threading
from pathlib import Path
from typing import Any, Optional

from taskboard.app.task_repo_utils import apply_task_patch, normalize_task_payload, sort_tasks_by_created

logger = logging.getLogger(__name__)

_LOCK = threading.Lock()
_SAFE_ID = re.compile(r"^[A-Za-z0-9_-]+$")


def _task_path(base: Path, task_id: str) -> Path:
    return base / "tasks" / f"{task_id}.json"


def _atomic_write(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    data = json.dumps(payload, ensure_ascii=False, indent=2).encode("utf-8")
    with open(tmp_path, "wb") as handle:
        handle.write(data)
        handle.flush()
        os.fsync(handle.fileno())
    os.replace(tmp_path, path)


def _load_json(path: Path) -> dict[str, Any]:
    return json.loads(path.read_text(encoding="utf-8"))


class FileTaskRepository:
    """Task repository persisted as JSON files under ``<root>/tasks``."""

    def __init__(self, root: str | Path) -> None:
        self._base = Path(root)

    def get(self, task_id: str) -> Optional[dict[str, Any]]:
        if not _SAFE_ID.match(task_id):
            return None
        path = _task_path(self._base, task_id)
        if not path.exists():
            return None
        return _load_json(path)

    def list(self) -> list[dict[str, Any]]:
        base = self._base / "tasks"
        if not base.exists():
            return []
        return sort_tasks_by_created(_load_json(path) for path in base.glob("*.json"))

    def create(self, task: dict[str, Any]) -> dict[str, Any]:
        payload = normalize_task_payload(task, is_new=True)
        if not payload.get("id"):
            raise ValueError("task payload missing id")
        with _LOCK:
            _atomic_write(_task_path(self._base, payload["id"]), payload)
        return payload

    def update(self, task_id: str, patch: dict[str, Any]) -> Optional[dict[str, Any]]:
        with _LOCK:
            current = self.get(task_id)
            if current is None:
                return None
            updated = apply_task_patch(current, patch)
            _atomic_write(_task_path(self._base, task_id), updated)
        return updated

    def delete(self, task_id: str) -> bool:
        if not _SAFE_ID.match(task_id):
            return False
        path = _task_path(self._base, task_id)
        with _LOCK:
            if not path.exists():
                return False
            path.unlink()
        logger.debug("task file removed id=%s", task_id)
        return True
