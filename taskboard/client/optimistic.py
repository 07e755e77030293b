"""Reversible speculative edits applied to cached views."""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Hashable, Iterable

from taskboard.client.cache import QueryCache

logger = logging.getLogger(__name__)

PatchFn = Callable[[Hashable, Any], Any]

PENDING = "pending"
COMMITTED = "committed"
REVERTED = "reverted"


class PatchHandle:
    """Snapshot of every key a speculative edit touched.

    Each handle keeps the values it saw before patching, so reverting one
    handle never depends on what other handles did in the meantime.
    """

    def __init__(self, cache: QueryCache, snapshots: list[tuple[Hashable, Any]], label: str = "") -> None:
        self._cache = cache
        self._snapshots = snapshots
        self.label = label
        self.state = PENDING

    @property
    def keys(self) -> list[Hashable]:
        return [key for key, _ in self._snapshots]

    def commit(self) -> None:
        if self.state != PENDING:
            return
        self._snapshots = []
        self.state = COMMITTED
        logger.debug("patch committed label=%s", self.label)

    def revert(self) -> None:
        if self.state != PENDING:
            return
        for key, old_value in self._snapshots:
            self._cache.write(key, old_value)
        logger.debug("patch reverted label=%s keys=%s", self.label, self.keys)
        self._snapshots = []
        self.state = REVERTED


def begin_optimistic(
    cache: QueryCache,
    affected_keys: Iterable[Hashable],
    patch_fn: PatchFn,
    *,
    label: str = "",
) -> PatchHandle:
    """Apply ``patch_fn`` to each cached key and return a handle to undo it.

    Keys missing from the cache are skipped. Every new value is computed before
    any of them is written, so a failing ``patch_fn`` leaves the cache as it was.
    """

    snapshots: list[tuple[Hashable, Any]] = []
    staged: list[tuple[Hashable, Any]] = []
    for key in dict.fromkeys(affected_keys):
        if not cache.has(key):
            continue
        old_value = cache.read(key)
        new_value = patch_fn(key, copy.deepcopy(old_value))
        snapshots.append((key, old_value))
        staged.append((key, new_value))

    for key, new_value in staged:
        cache.write(key, new_value)
    logger.debug("patch applied label=%s keys=%s", label, [key for key, _ in staged])
    return PatchHandle(cache, snapshots, label=label)
