from __future__ import annotations

import asyncio

import pytest
from conftest import FakeTransport, make_task

from taskboard.client.cache import LIST_KEY, LIST_TAG, QueryCache, detail_key, task_tag
from taskboard.client.queries import TaskQueries
from taskboard.core.errors import NotFoundError


def test_list_is_fetched_once_then_served_from_cache() -> None:
    async def scenario():
        transport = FakeTransport([make_task("a")])
        queries = TaskQueries(QueryCache(), transport)
        first = await queries.list_tasks()
        second = await queries.list_tasks()
        return transport, first, second

    transport, first, second = asyncio.run(scenario())
    assert first == second == [make_task("a")]
    assert transport.calls == [("list",)]


def test_invalidated_list_is_refetched_on_next_read() -> None:
    async def scenario():
        cache = QueryCache()
        transport = FakeTransport([make_task("a")])
        queries = TaskQueries(cache, transport)
        await queries.list_tasks()
        transport.tasks.insert(0, make_task("b"))
        cache.invalidate([LIST_TAG])
        return transport, await queries.list_tasks()

    transport, tasks = asyncio.run(scenario())
    assert [t["id"] for t in tasks] == ["b", "a"]
    assert transport.calls == [("list",), ("list",)]


def test_list_view_reports_loading_then_refreshing() -> None:
    async def scenario():
        cache = QueryCache()
        transport = FakeTransport([make_task("a")])
        queries = TaskQueries(cache, transport)
        views = []

        transport.hold("list")
        pending = asyncio.create_task(queries.list_tasks())
        await asyncio.sleep(0)
        views.append(queries.list_view())
        transport.release("list")
        await pending
        views.append(queries.list_view())

        transport.hold("list")
        pending = asyncio.create_task(queries.list_tasks(force=True))
        await asyncio.sleep(0)
        views.append(queries.list_view())
        transport.release("list")
        await pending
        return views

    loading, loaded, refreshing = asyncio.run(scenario())
    assert loading.is_loading and not loading.is_refreshing and loading.tasks == []
    assert not loaded.is_loading and not loaded.is_refreshing and not loaded.stale
    assert refreshing.is_refreshing and refreshing.tasks == [make_task("a")]


def test_detail_not_found_drops_cached_entry() -> None:
    async def scenario():
        cache = QueryCache()
        transport = FakeTransport([make_task("a")])
        queries = TaskQueries(cache, transport)
        await queries.get_task("a")
        transport.tasks.clear()
        cache.invalidate([task_tag("a")])
        with pytest.raises(NotFoundError):
            await queries.get_task("a")
        return cache

    cache = asyncio.run(scenario())
    assert not cache.has(detail_key("a"))
    assert not cache.is_fetching(detail_key("a"))


def test_fetch_failure_clears_fetching_flag() -> None:
    async def scenario():
        cache = QueryCache()
        transport = FakeTransport()
        transport.fail("list", NotFoundError("gone"))
        with pytest.raises(NotFoundError):
            await TaskQueries(cache, transport).list_tasks()
        return cache

    cache = asyncio.run(scenario())
    assert not cache.is_fetching(LIST_KEY)
    assert not cache.has(LIST_KEY)
