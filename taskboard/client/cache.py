"""In-memory query cache holding the last known server state of tasks.

One :class:`QueryCache` is created per client session and handed to every
consumer; there is no module-level instance. Values go in and come out as deep
copies so a caller can never mutate cached state in place.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, Iterable, Optional

logger = logging.getLogger(__name__)

LIST_KEY: tuple = ("tasks",)
LIST_TAG = "task-list"


def detail_key(task_id: str) -> tuple:
    return ("task", task_id)


def task_tag(task_id: str) -> str:
    return f"task:{task_id}"


def provided_tags(key: Hashable, value: Any) -> frozenset[str]:
    """Tags a list or detail entry provides, derived from its contents."""

    if key == LIST_KEY:
        tags = {LIST_TAG}
        for item in value or []:
            if isinstance(item, dict) and item.get("id"):
                tags.add(task_tag(str(item["id"])))
        return frozenset(tags)
    if isinstance(key, tuple) and len(key) == 2 and key[0] == "task":
        return frozenset({task_tag(str(key[1]))})
    return frozenset()


@dataclass
class CacheEntry:
    value: Any
    tags: frozenset[str] = frozenset()
    stale: bool = False


@dataclass(frozen=True)
class CacheEvent:
    key: Hashable
    kind: str  # write | invalidate | remove | fetching
    value: Any = None


Observer = Callable[[CacheEvent], None]


@dataclass
class Subscription:
    _cache: "QueryCache"
    _callback: Observer
    closed: bool = field(default=False)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._cache._detach(self._callback)


class QueryCache:
    def __init__(self) -> None:
        self._entries: dict[Hashable, CacheEntry] = {}
        self._fetching: set[Hashable] = set()
        self._observers: list[Observer] = []

    # ---- reads ----

    def has(self, key: Hashable) -> bool:
        return key in self._entries

    def read(self, key: Hashable) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        return copy.deepcopy(entry.value)

    def is_stale(self, key: Hashable) -> bool:
        entry = self._entries.get(key)
        return entry is None or entry.stale

    def is_fetching(self, key: Hashable) -> bool:
        return key in self._fetching

    def tags_for(self, key: Hashable) -> frozenset[str]:
        entry = self._entries.get(key)
        return entry.tags if entry else frozenset()

    def keys(self) -> list[Hashable]:
        return list(self._entries)

    # ---- writes ----

    def write(self, key: Hashable, value: Any, tags: Optional[Iterable[str]] = None) -> None:
        stored = copy.deepcopy(value)
        resolved = frozenset(tags) if tags is not None else provided_tags(key, stored)
        self._entries[key] = CacheEntry(value=stored, tags=resolved)
        self._emit(CacheEvent(key, "write", copy.deepcopy(stored)))

    def remove(self, key: Hashable) -> bool:
        if self._entries.pop(key, None) is None:
            return False
        self._emit(CacheEvent(key, "remove"))
        return True

    def invalidate(self, tags: Iterable[str]) -> list[Hashable]:
        """Mark entries providing any of ``tags`` stale; return the affected keys."""

        wanted = set(tags)
        affected = [key for key, entry in self._entries.items() if entry.tags & wanted]
        for key in affected:
            self._entries[key].stale = True
        logger.debug("invalidated tags=%s keys=%s", sorted(wanted), affected)
        for key in affected:
            self._emit(CacheEvent(key, "invalidate"))
        return affected

    def set_fetching(self, key: Hashable, fetching: bool) -> None:
        if fetching == (key in self._fetching):
            return
        if fetching:
            self._fetching.add(key)
        else:
            self._fetching.discard(key)
        self._emit(CacheEvent(key, "fetching", fetching))

    # ---- observers ----

    def subscribe(self, callback: Observer) -> Subscription:
        self._observers.append(callback)
        return Subscription(self, callback)

    def _detach(self, callback: Observer) -> None:
        try:
            self._observers.remove(callback)
        except ValueError:
            pass

    def _emit(self, event: CacheEvent) -> None:
        for callback in list(self._observers):
            try:
                callback(event)
            except Exception:
                logger.exception("cache observer failed key=%s kind=%s", event.key, event.kind)
