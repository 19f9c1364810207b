# tests/test_task_store.py

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime, timezone

import httpx
import pytest

from taskdocs.backend.client import BackendClient
from taskdocs.core.errors import NotFoundError, StoreError, ValidationError
from taskdocs.tasks.task_store import SupabaseTaskStore

BASE = "https://example.supabase.co"

ROW = {
    "id": 5,
    "title": "Buy milk",
    "completed": False,
    "attachment_url": None,
    "created_at": "2025-03-01T10:00:00.123456+00:00",
}


def make_store(
    handler: Callable[[httpx.Request], httpx.Response],
) -> tuple[SupabaseTaskStore, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def recording(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    client = BackendClient(BASE, "anon-key", transport=httpx.MockTransport(recording))
    return SupabaseTaskStore(client, table="tasks"), seen


@pytest.mark.asyncio
async def test_list_tasks_requests_newest_first() -> None:
    store, seen = make_store(lambda r: httpx.Response(200, json=[ROW]))

    tasks = await store.list_tasks()

    (req,) = seen
    assert req.method == "GET"
    assert req.url.path == "/rest/v1/tasks"
    assert req.url.params["order"] == "created_at.desc"
    assert req.url.params["select"] == "id,title,completed,attachment_url,created_at"
    assert req.headers["apikey"] == "anon-key"
    assert req.headers["authorization"] == "Bearer anon-key"

    (task,) = tasks
    assert task.id == "5"
    assert task.title == "Buy milk"
    assert task.completed is False
    assert task.attachment_url is None
    assert task.created_at == datetime(2025, 3, 1, 10, 0, 0, 123456, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_create_task_posts_trimmed_title_and_returns_row() -> None:
    store, seen = make_store(lambda r: httpx.Response(201, json=[ROW]))

    task = await store.create_task("  Buy milk ")

    (req,) = seen
    assert req.method == "POST"
    assert json.loads(req.content) == {"title": "Buy milk"}
    assert req.headers["prefer"] == "return=representation"
    assert task.id == "5"


@pytest.mark.asyncio
async def test_create_task_rejects_blank_title_without_request() -> None:
    store, seen = make_store(lambda r: httpx.Response(201, json=[ROW]))

    with pytest.raises(ValidationError):
        await store.create_task("   ")
    assert seen == []


@pytest.mark.asyncio
async def test_create_task_without_returned_row_is_an_error() -> None:
    store, _ = make_store(lambda r: httpx.Response(201, json=[]))

    with pytest.raises(StoreError):
        await store.create_task("x")


@pytest.mark.asyncio
async def test_update_task_sends_only_provided_fields() -> None:
    store, seen = make_store(lambda r: httpx.Response(200, json=[{"id": 5}]))

    await store.update_task("5", completed=True)

    (req,) = seen
    assert req.method == "PATCH"
    assert req.url.params["id"] == "eq.5"
    assert json.loads(req.content) == {"completed": True}


@pytest.mark.asyncio
async def test_update_task_with_nothing_to_change_makes_no_request() -> None:
    store, seen = make_store(lambda r: httpx.Response(200, json=[{"id": 5}]))

    await store.update_task("5")

    assert seen == []


@pytest.mark.asyncio
async def test_update_unknown_task_raises_not_found() -> None:
    store, _ = make_store(lambda r: httpx.Response(200, json=[]))

    with pytest.raises(NotFoundError):
        await store.update_task("404", title="x")


@pytest.mark.asyncio
async def test_delete_task_is_idempotent() -> None:
    store, seen = make_store(lambda r: httpx.Response(204))

    await store.delete_task("5")
    await store.delete_task("5")

    assert [r.method for r in seen] == ["DELETE", "DELETE"]
    assert seen[0].url.params["id"] == "eq.5"


@pytest.mark.asyncio
async def test_http_error_carries_server_message() -> None:
    store, _ = make_store(
        lambda r: httpx.Response(401, json={"message": "JWT expired", "code": "PGRST301"})
    )

    with pytest.raises(StoreError, match="JWT expired"):
        await store.list_tasks()


@pytest.mark.asyncio
async def test_transport_error_becomes_store_error() -> None:
    def boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    store, _ = make_store(boom)

    with pytest.raises(StoreError, match="connection refused"):
        await store.list_tasks()


@pytest.mark.asyncio
async def test_malformed_payload_is_a_store_error() -> None:
    store, _ = make_store(lambda r: httpx.Response(200, json={"not": "a list"}))

    with pytest.raises(StoreError):
        await store.list_tasks()


@pytest.mark.asyncio
async def test_row_without_id_is_a_store_error() -> None:
    store, _ = make_store(lambda r: httpx.Response(200, json=[{"title": "x"}]))

    with pytest.raises(StoreError):
        await store.list_tasks()


def test_backend_client_requires_url_and_key() -> None:
    with pytest.raises(RuntimeError):
        BackendClient("", "key")
    with pytest.raises(RuntimeError):
        BackendClient(BASE, "  ")
