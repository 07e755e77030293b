from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Optional

import pytest
from sqlalchemy.orm import sessionmaker

from taskboard.core.errors import NotFoundError


class FakeTransport:
    """In-memory stand-in for the task service.

    - ``fail(op, exc)`` makes the next call of ``op`` raise ``exc``
    - ``hold(op)`` parks calls of ``op`` until ``release(op)``
    - ``calls`` records every request in issue order
    """

    def __init__(self, tasks: Optional[list[dict[str, Any]]] = None, now: int = 1000) -> None:
        self.tasks: list[dict[str, Any]] = [dict(t) for t in tasks or []]
        self.now = now
        self.calls: list[tuple] = []
        self.next_record: Optional[dict[str, Any]] = None
        self.closed = False
        self._failures: dict[str, BaseException] = {}
        self._gates: dict[str, asyncio.Event] = {}
        self._seq = 0

    def fail(self, op: str, exc: BaseException) -> None:
        self._failures[op] = exc

    def hold(self, op: str) -> None:
        self._gates[op] = asyncio.Event()

    def release(self, op: str) -> None:
        self._gates.pop(op).set()

    async def _enter(self, op: str, *args: Any) -> None:
        self.calls.append((op, *args))
        gate = self._gates.get(op)
        if gate is not None:
            await gate.wait()
        exc = self._failures.pop(op, None)
        if exc is not None:
            raise exc

    def _find(self, task_id: str) -> dict[str, Any]:
        for task in self.tasks:
            if task["id"] == task_id:
                return task
        raise NotFoundError()

    async def list(self) -> list[dict[str, Any]]:
        await self._enter("list")
        return [dict(t) for t in self.tasks]

    async def get(self, task_id: str) -> dict[str, Any]:
        await self._enter("get", task_id)
        return dict(self._find(task_id))

    async def create(self, fields: dict[str, Any]) -> dict[str, Any]:
        await self._enter("create", dict(fields))
        if self.next_record is not None:
            record, self.next_record = dict(self.next_record), None
        else:
            self._seq += 1
            record = {
                "id": f"srv{self._seq:09d}",
                "description": "",
                "status": "todo",
                **fields,
                "createdAt": self.now,
                "updatedAt": self.now,
            }
        self.tasks.insert(0, record)
        return dict(record)

    async def update(self, task_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        await self._enter("update", task_id, dict(fields))
        task = self._find(task_id)
        for key, value in fields.items():
            if value is None:
                task.pop(key, None)
            else:
                task[key] = value
        task["updatedAt"] = max(self.now, task.get("createdAt", 0))
        return dict(task)

    async def delete(self, task_id: str) -> None:
        await self._enter("delete", task_id)
        self.tasks.remove(self._find(task_id))

    async def aclose(self) -> None:
        self.closed = True


class RecordingNotifier:
    def __init__(self) -> None:
        self.successes: list[str] = []
        self.errors: list[str] = []

    def success(self, message: str) -> None:
        self.successes.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)


def make_task(task_id: str, **overrides: Any) -> dict[str, Any]:
    task = {
        "id": task_id,
        "title": f"Task {task_id}",
        "description": "",
        "status": "todo",
        "createdAt": 900,
        "updatedAt": 900,
    }
    task.update(overrides)
    return task


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def sql_repo_provider(tmp_path: Path):
    """FastAPI dependency yielding a SQLAlchemy repository over a throwaway SQLite file."""
    from taskboard.app.adapters.repo_sql import SQLAlchemyTaskRepository
    from taskboard.app.db import init_db, make_engine

    engine = make_engine(f"sqlite:///{tmp_path / 'tasks.sqlite3'}")
    init_db(engine)
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def provide():
        db = session_factory()
        try:
            yield SQLAlchemyTaskRepository(db)
        finally:
            db.close()

    yield provide
    engine.dispose()


@pytest.fixture()
def api_app(sql_repo_provider):
    from taskboard.app.deps import get_task_repository
    from taskboard.app.main import app

    app.dependency_overrides[get_task_repository] = sql_repo_provider
    try:
        yield app
    finally:
        app.dependency_overrides.clear()
