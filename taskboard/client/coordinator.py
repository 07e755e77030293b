"""Issue task mutations with optimistic cache edits and reconcile the outcome.

Every mutation moves through ``idle -> patched -> committed | reverted``:

* the speculative edit is applied to the cache before the request is sent;
* on success the server record is written into every view holding the task
  and the patch is committed;
* on failure the patch is reverted, the notifier is told, and
  :class:`MutationFailed` is raised with the user's submitted fields.

Mutations on different tasks run independently. Two mutations racing on the
same task are not serialized; whichever response resolves last wins.
"""

from __future__ import annotations

import enum
import itertools
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, NoReturn, Optional
from uuid import uuid4

from taskboard.client.cache import LIST_KEY, LIST_TAG, QueryCache, detail_key, task_tag
from taskboard.client.optimistic import PatchHandle, begin_optimistic
from taskboard.client.patches import insert_head, merge_update, remove_record, replace_record
from taskboard.client.updates import TaskPatch
from taskboard.client.validation import validate_create, validate_update
from taskboard.core.errors import MutationFailed, TransportError, ValidationError
from taskboard.core.logging_config import log_context
from taskboard.ports.task_transport import INotifier, ITaskTransport

logger = logging.getLogger(__name__)

TEMP_ID_PREFIX = "temp-"

_SUCCESS_MESSAGES = {
    "create": "Task created",
    "update": "Task updated",
    "delete": "Task deleted",
}


def new_temp_id() -> str:
    return f"{TEMP_ID_PREFIX}{uuid4().hex}"


def is_temp_id(task_id: str) -> bool:
    return str(task_id).startswith(TEMP_ID_PREFIX)


class MutationState(str, enum.Enum):
    IDLE = "idle"
    PATCHED = "patched"
    COMMITTED = "committed"
    REVERTED = "reverted"


_ALLOWED = {
    MutationState.IDLE: {MutationState.PATCHED},
    MutationState.PATCHED: {MutationState.COMMITTED, MutationState.REVERTED},
    MutationState.COMMITTED: set(),
    MutationState.REVERTED: set(),
}

_ids = itertools.count(1)


@dataclass
class Mutation:
    op: str
    task_id: Optional[str] = None
    seq: int = field(default_factory=lambda: next(_ids))
    state: MutationState = MutationState.IDLE
    handle: Optional[PatchHandle] = None
    error: Optional[BaseException] = None

    def advance(self, state: MutationState) -> None:
        if state not in _ALLOWED[self.state]:
            raise RuntimeError(f"illegal mutation transition {self.state.value} -> {state.value}")
        self.state = state
        logger.info(
            "mutation %s #%s",
            self.op,
            self.seq,
            extra=log_context(self.task_id, self.op, state.value),
        )


class MutationCoordinator:
    def __init__(
        self,
        cache: QueryCache,
        transport: ITaskTransport,
        *,
        notifier: Optional[INotifier] = None,
        clock: Callable[[], float] = time.time,
        refetch_after: bool = True,
    ) -> None:
        self._cache = cache
        self._transport = transport
        self._notifier = notifier
        self._clock = clock
        self._refetch_after = refetch_after
        self._in_flight: dict[int, Mutation] = {}

    def in_flight(self) -> list[Mutation]:
        return list(self._in_flight.values())

    def _now(self) -> int:
        return int(self._clock())

    # ---- entry points ----

    async def create(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        normalized = validate_create(fields)
        temp_id = new_temp_id()
        now = self._now()
        provisional = {"id": temp_id, **normalized, "createdAt": now, "updatedAt": now}

        mutation = Mutation("create", task_id=temp_id)
        self._patch(mutation, [LIST_KEY], insert_head(provisional))
        try:
            created = await self._transport.create(normalized)
        except BaseException as exc:
            self._fail(mutation, exc, fields, [LIST_TAG])

        tasks = self._cache.read(LIST_KEY)
        if tasks is not None:
            self._cache.write(LIST_KEY, replace_record(temp_id, created)(LIST_KEY, tasks))
        mutation.task_id = created.get("id")
        if mutation.task_id:
            self._cache.write(detail_key(mutation.task_id), created)
        self._commit(mutation, [LIST_TAG])
        return created

    async def update(self, task_id: str, fields: Mapping[str, Any]) -> dict[str, Any]:
        self._reject_temp(task_id)
        normalized = validate_update(fields)
        task_patch = TaskPatch.from_fields(normalized)

        mutation = Mutation("update", task_id=task_id)
        self._patch(
            mutation,
            [LIST_KEY, detail_key(task_id)],
            merge_update(task_id, task_patch, self._now()),
        )
        tags = [task_tag(task_id), LIST_TAG]
        try:
            updated = await self._transport.update(task_id, task_patch.to_wire())
        except BaseException as exc:
            self._fail(mutation, exc, fields, tags)

        self._write_authoritative(task_id, updated)
        self._commit(mutation, tags)
        return updated

    async def delete(self, task_id: str) -> None:
        self._reject_temp(task_id)
        mutation = Mutation("delete", task_id=task_id)
        self._patch(mutation, [LIST_KEY], remove_record(task_id))
        tags = [task_tag(task_id), LIST_TAG]
        try:
            await self._transport.delete(task_id)
        except BaseException as exc:
            self._fail(mutation, exc, {"id": task_id}, tags)

        self._cache.remove(detail_key(task_id))
        self._commit(mutation, tags)

    # ---- helpers ----

    @staticmethod
    def _reject_temp(task_id: str) -> None:
        if is_temp_id(task_id):
            raise ValidationError({"id": "Task is still being saved"})

    def _patch(self, mutation: Mutation, keys: list, patch_fn) -> None:
        mutation.handle = begin_optimistic(
            self._cache, keys, patch_fn, label=f"{mutation.op}#{mutation.seq}"
        )
        self._in_flight[mutation.seq] = mutation
        mutation.advance(MutationState.PATCHED)

    def _write_authoritative(self, task_id: str, record: dict[str, Any]) -> None:
        # only views that already hold the task are refreshed
        tasks = self._cache.read(LIST_KEY)
        if tasks is not None and any(t.get("id") == task_id for t in tasks):
            self._cache.write(LIST_KEY, replace_record(task_id, record)(LIST_KEY, tasks))
        if self._cache.has(detail_key(task_id)):
            self._cache.write(detail_key(task_id), record)

    def _commit(self, mutation: Mutation, tags: list[str]) -> None:
        mutation.handle.commit()
        mutation.advance(MutationState.COMMITTED)
        self._in_flight.pop(mutation.seq, None)
        if self._refetch_after:
            self._cache.invalidate(tags)
        if self._notifier is not None:
            self._notifier.success(_SUCCESS_MESSAGES[mutation.op])

    def _fail(
        self,
        mutation: Mutation,
        exc: BaseException,
        fields: Mapping[str, Any],
        tags: list[str],
    ) -> NoReturn:
        mutation.handle.revert()
        mutation.error = exc
        mutation.advance(MutationState.REVERTED)
        self._in_flight.pop(mutation.seq, None)
        if not isinstance(exc, TransportError):
            logger.exception(
                "mutation %s aborted by unexpected error",
                mutation.op,
                extra=log_context(mutation.task_id, mutation.op, "reverted"),
            )
            raise exc
        logger.warning(
            "mutation %s failed: %s",
            mutation.op,
            exc.message,
            extra=log_context(mutation.task_id, mutation.op, "reverted"),
        )
        if self._refetch_after:
            self._cache.invalidate(tags)
        if self._notifier is not None:
            self._notifier.error(exc.message)
        raise MutationFailed(
            mutation.op,
            exc.message,
            fields=fields,
            task_id=None if mutation.op == "create" else mutation.task_id,
            cause=exc,
        ) from exc
