"""Task CRUD API."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from taskboard.app.deps import get_task_repository
from taskboard.app.schemas import TaskCreate, TaskDeleted, TaskOut, TaskUpdate
from taskboard.app.task_repo_utils import new_task_id, sort_tasks_by_created, task_to_wire
from taskboard.core.logging_config import log_context

logger = logging.getLogger(__name__)

api_router = APIRouter(prefix="/api", tags=["tasks"])


def _task_out(task: dict) -> TaskOut:
    return TaskOut(**task_to_wire(task))


@api_router.get("/tasks", response_model=list[TaskOut], response_model_exclude_none=True)
def list_tasks(repo=Depends(get_task_repository)):
    """List every task, newest first."""

    return [_task_out(t) for t in sort_tasks_by_created(repo.list())]


@api_router.get("/tasks/{task_id}", response_model=TaskOut, response_model_exclude_none=True)
def get_task(task_id: str, repo=Depends(get_task_repository)):
    """Retrieve a single task by id."""

    t = repo.get(task_id)
    if not t:
        raise HTTPException(status_code=404, detail="Task not found")

    return _task_out(t)


@api_router.post(
    "/tasks",
    response_model=TaskOut,
    response_model_exclude_none=True,
    status_code=201,
)
def create_task(payload: TaskCreate, repo=Depends(get_task_repository)):
    """Create a task; id and timestamps are assigned here."""

    task_id = new_task_id()
    task_payload = {
        "id": task_id,
        "title": payload.title,
        "description": payload.description,
        "status": payload.status,
        "priority": payload.priority,
        "due_date": payload.due_date,
    }
    try:
        stored = repo.create(task_payload)
    except Exception as exc:
        logger.exception("task create failed", extra=log_context(task_id, "create"))
        raise HTTPException(status_code=500, detail="Error creating task") from exc

    logger.info("created task", extra=log_context(task_id, "create"))
    return _task_out(stored)


@api_router.put("/tasks/{task_id}", response_model=TaskOut, response_model_exclude_none=True)
def update_task(task_id: str, payload: TaskUpdate, repo=Depends(get_task_repository)):
    """Apply a partial update. A body naming no known field returns the task unchanged."""

    patch = payload.to_patch()
    if not patch:
        current = repo.get(task_id)
        if not current:
            raise HTTPException(status_code=404, detail="Task not found")
        return _task_out(current)

    updated = repo.update(task_id, patch)
    if not updated:
        raise HTTPException(status_code=404, detail="Task not found")

    logger.info("updated task fields=%s", sorted(patch), extra=log_context(task_id, "update"))
    return _task_out(updated)


@api_router.delete("/tasks/{task_id}", response_model=TaskDeleted)
def delete_task(task_id: str, repo=Depends(get_task_repository)):
    """Delete a task record."""

    if not repo.delete(task_id):
        raise HTTPException(status_code=404, detail="Task not found")

    logger.info("deleted task", extra=log_context(task_id, "delete"))
    return TaskDeleted(id=task_id)

