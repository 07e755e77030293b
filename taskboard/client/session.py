"""One client session: a cache, a transport, and the query/mutation layers over them."""

from __future__ import annotations

import logging
from typing import Optional

from taskboard.adapters.task_transport_http import HttpTaskTransport
from taskboard.client.cache import QueryCache
from taskboard.client.coordinator import MutationCoordinator
from taskboard.client.queries import TaskQueries
from taskboard.ports.task_transport import INotifier, ITaskTransport

logger = logging.getLogger(__name__)


class TaskSession:
    """Create once per application session and pass to every consumer."""

    def __init__(self, transport: ITaskTransport, *, notifier: Optional[INotifier] = None) -> None:
        self.cache = QueryCache()
        self.transport = transport
        self.queries = TaskQueries(self.cache, transport)
        self.mutations = MutationCoordinator(self.cache, transport, notifier=notifier)

    @classmethod
    def connect(
        cls,
        base_url: Optional[str] = None,
        *,
        notifier: Optional[INotifier] = None,
        timeout: Optional[float] = None,
    ) -> "TaskSession":
        transport = HttpTaskTransport(base_url, timeout=timeout)
        logger.info("task session opened base_url=%s", base_url or "<settings>")
        return cls(transport, notifier=notifier)

    async def close(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> "TaskSession":
        return self

    async def __aexit__(self, *_exc) -> None:
        await self.close()
