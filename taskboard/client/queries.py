"""Read side of the client: cached list/detail queries with refetch-on-stale."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from taskboard.client.cache import LIST_KEY, QueryCache, detail_key
from taskboard.core.errors import NotFoundError
from taskboard.ports.task_transport import ITaskTransport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ListView:
    """Snapshot of the list query for rendering."""

    tasks: list[dict[str, Any]]
    is_loading: bool
    is_refreshing: bool
    stale: bool


class TaskQueries:
    def __init__(self, cache: QueryCache, transport: ITaskTransport) -> None:
        self._cache = cache
        self._transport = transport

    async def list_tasks(self, *, force: bool = False) -> list[dict[str, Any]]:
        if not force and not self._cache.is_stale(LIST_KEY):
            return self._cache.read(LIST_KEY)
        self._cache.set_fetching(LIST_KEY, True)
        try:
            tasks = await self._transport.list()
        finally:
            self._cache.set_fetching(LIST_KEY, False)
        self._cache.write(LIST_KEY, tasks)
        logger.debug("fetched task list count=%s", len(tasks))
        return self._cache.read(LIST_KEY)

    async def get_task(self, task_id: str, *, force: bool = False) -> dict[str, Any]:
        key = detail_key(task_id)
        if not force and not self._cache.is_stale(key):
            return self._cache.read(key)
        self._cache.set_fetching(key, True)
        try:
            task = await self._transport.get(task_id)
        except NotFoundError:
            self._cache.remove(key)
            raise
        finally:
            self._cache.set_fetching(key, False)
        self._cache.write(key, task)
        return self._cache.read(key)

    def list_view(self) -> ListView:
        tasks = self._cache.read(LIST_KEY)
        fetching = self._cache.is_fetching(LIST_KEY)
        return ListView(
            tasks=tasks or [],
            is_loading=tasks is None and fetching,
            is_refreshing=tasks is not None and fetching,
            stale=self._cache.is_stale(LIST_KEY),
        )
