import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from taskboard.app.models import Task
from taskboard.app.task_repo_utils import apply_task_patch, normalize_task_payload

logger = logging.getLogger(__name__)

_COLUMNS = ("id", "title", "description", "status", "priority", "due_date", "created_at", "updated_at")


def _row_to_payload(task: Task) -> Dict[str, Any]:
    return {name: getattr(task, name) for name in _COLUMNS}


class SQLAlchemyTaskRepository:
    def __init__(self, session: Session):
        self.session = session

    def _get_row(self, task_id: str) -> Optional[Task]:
        return self.session.query(Task).filter(Task.id == task_id).first()

    def get(self, task_id: str) -> Optional[Dict[str, Any]]:
        task = self._get_row(task_id)
        return _row_to_payload(task) if task else None

    def list(self) -> List[Dict[str, Any]]:
        rows = self.session.query(Task).order_by(Task.created_at.desc()).all()
        return [_row_to_payload(row) for row in rows]

    def create(self, task: Dict[str, Any]) -> Dict[str, Any]:
        payload = normalize_task_payload(task, is_new=True)
        row = Task(**{name: payload.get(name) for name in _COLUMNS})
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        logger.debug("task row inserted id=%s", row.id)
        return _row_to_payload(row)

    def update(self, task_id: str, patch: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        task = self._get_row(task_id)
        if task is None:
            return None
        updated = apply_task_patch(_row_to_payload(task), patch)
        for key, value in updated.items():
            if key != "id":
                setattr(task, key, value)
        self.session.commit()
        self.session.refresh(task)
        return _row_to_payload(task)

    def delete(self, task_id: str) -> bool:
        task = self._get_row(task_id)
        if task is None:
            return False
        self.session.delete(task)
        self.session.commit()
        return True
