from __future__ import annotations

import pytest
from conftest import make_task

from taskboard.client.cache import LIST_KEY, QueryCache, detail_key
from taskboard.client.optimistic import COMMITTED, PENDING, REVERTED, begin_optimistic
from taskboard.client.patches import insert_head, merge_update, remove_record
from taskboard.client.updates import TaskPatch


def _seeded() -> QueryCache:
    cache = QueryCache()
    cache.write(LIST_KEY, [make_task("a"), make_task("b", priority=5), make_task("c")])
    cache.write(detail_key("b"), make_task("b", priority=5))
    return cache


def test_revert_restores_exact_values_despite_interim_writes() -> None:
    cache = _seeded()
    before_list = cache.read(LIST_KEY)
    before_detail = cache.read(detail_key("b"))

    handle = begin_optimistic(
        cache,
        [LIST_KEY, detail_key("b")],
        merge_update("b", TaskPatch.from_fields({"title": "edited"}), now=2000),
    )
    cache.write(LIST_KEY, [make_task("zzz")])
    cache.write(detail_key("b"), make_task("b", title="server says"))

    handle.revert()

    assert cache.read(LIST_KEY) == before_list
    assert cache.read(detail_key("b")) == before_detail
    assert handle.state == REVERTED


def test_commit_never_touches_the_cache() -> None:
    cache = _seeded()
    handle = begin_optimistic(cache, [LIST_KEY], remove_record("b"))
    patched = cache.read(LIST_KEY)
    events = []
    cache.subscribe(events.append)

    handle.commit()
    handle.commit()

    assert cache.read(LIST_KEY) == patched
    assert events == []
    assert handle.state == COMMITTED


def test_revert_is_idempotent_and_noop_after_commit() -> None:
    cache = _seeded()
    handle = begin_optimistic(cache, [LIST_KEY], remove_record("a"))
    handle.revert()
    once = cache.read(LIST_KEY)
    cache.write(LIST_KEY, [])
    handle.revert()
    assert cache.read(LIST_KEY) == []

    cache.write(LIST_KEY, once)
    other = begin_optimistic(cache, [LIST_KEY], remove_record("c"))
    other.commit()
    other.revert()
    assert other.state == COMMITTED
    assert [t["id"] for t in cache.read(LIST_KEY)] == ["a", "b"]


def test_absent_keys_are_skipped() -> None:
    cache = QueryCache()
    cache.write(LIST_KEY, [make_task("a")])

    handle = begin_optimistic(cache, [LIST_KEY, detail_key("a")], remove_record("a"))

    assert handle.keys == [LIST_KEY]
    assert not cache.has(detail_key("a"))
    assert handle.state == PENDING


def test_failing_patch_function_writes_nothing() -> None:
    cache = _seeded()
    before = {key: cache.read(key) for key in (LIST_KEY, detail_key("b"))}

    def patch(key, value):
        if key == detail_key("b"):
            raise ValueError("boom")
        return []

    with pytest.raises(ValueError):
        begin_optimistic(cache, [LIST_KEY, detail_key("b")], patch)

    assert {key: cache.read(key) for key in before} == before


def test_concurrent_handles_revert_to_their_own_snapshots() -> None:
    cache = QueryCache()
    cache.write(LIST_KEY, [make_task("a")])

    first = begin_optimistic(cache, [LIST_KEY], insert_head(make_task("t1")))
    second = begin_optimistic(cache, [LIST_KEY], insert_head(make_task("t2")))
    assert [t["id"] for t in cache.read(LIST_KEY)] == ["t2", "t1", "a"]

    first.revert()
    # last revert wins: the first handle's snapshot replaces everything
    assert [t["id"] for t in cache.read(LIST_KEY)] == ["a"]

    second.revert()
    assert [t["id"] for t in cache.read(LIST_KEY)] == ["t1", "a"]


def test_delete_patch_reverts_to_original_index() -> None:
    cache = _seeded()
    handle = begin_optimistic(cache, [LIST_KEY], remove_record("b"))
    assert [t["id"] for t in cache.read(LIST_KEY)] == ["a", "c"]

    handle.revert()

    assert [t["id"] for t in cache.read(LIST_KEY)] == ["a", "b", "c"]
