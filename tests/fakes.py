# tests/fakes.py

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any

from taskdocs.core.errors import NotFoundError, ValidationError
from taskdocs.tasks.task_models import Task

PUBLIC_BASE = "https://example.supabase.co/storage/v1/object/public/task-pdfs"
_EPOCH = datetime(2025, 1, 1, tzinfo=timezone.utc)


class FakeRecordStore:
    """
    In-memory RecordStore.

    - Assigns ids ("1", "2", ...) and increasing created_at, like the server
    - Records every call name in `calls` and every update in `updates`
    - `fail_on[op] = exc` makes that operation raise
    - `list_gate`: if set, list_tasks snapshots the rows and then waits on it;
      a `fail_on["list_tasks"]` error is raised after the wait
    - `update_gate`: if set, update_task waits on it before applying
    """

    def __init__(self) -> None:
        self.rows: dict[str, Task] = {}
        self.calls: list[str] = []
        self.updates: list[tuple[str, dict[str, Any]]] = []
        self.fail_on: dict[str, Exception] = {}
        self.list_gate: asyncio.Event | None = None
        self.update_gate: asyncio.Event | None = None
        self._next_id = 1

    def _enter(self, op: str) -> None:
        self.calls.append(op)
        err = self.fail_on.get(op)
        if err is not None:
            raise err

    def seed(self, title: str, **fields: Any) -> Task:
        task_id = str(self._next_id)
        self._next_id += 1
        task = Task(
            id=task_id,
            title=title,
            completed=False,
            attachment_url=None,
            created_at=_EPOCH + timedelta(seconds=int(task_id)),
        )
        task = replace(task, **fields)
        self.rows[task_id] = task
        return task

    async def list_tasks(self) -> list[Task]:
        self.calls.append("list_tasks")
        gate = self.list_gate
        snapshot = sorted(self.rows.values(), key=lambda t: t.created_at, reverse=True)
        if gate is not None:
            await gate.wait()
        err = self.fail_on.get("list_tasks")
        if err is not None:
            raise err
        return snapshot

    async def create_task(self, title: str) -> Task:
        self._enter("create_task")
        if not title or not title.strip():
            raise ValidationError("title is required")
        return self.seed(title.strip())

    async def update_task(
        self,
        task_id: str,
        *,
        title: str | None = None,
        completed: bool | None = None,
        attachment_url: str | None = None,
    ) -> None:
        self._enter("update_task")
        if self.update_gate is not None:
            await self.update_gate.wait()
        fields = {
            k: v
            for k, v in (("title", title), ("completed", completed), ("attachment_url", attachment_url))
            if v is not None
        }
        self.updates.append((task_id, fields))
        if task_id not in self.rows:
            raise NotFoundError(f"task {task_id} not found")
        self.rows[task_id] = replace(self.rows[task_id], **fields)

    async def delete_task(self, task_id: str) -> None:
        self._enter("delete_task")
        self.rows.pop(task_id, None)


class FakeAttachmentStore:
    """
    In-memory AttachmentStore: key -> (bytes, content_type).

    `fail_put = exc` makes put_object raise; `put_gate` blocks put_object.
    """

    def __init__(self) -> None:
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.puts: list[str] = []
        self.fail_put: Exception | None = None
        self.put_gate: asyncio.Event | None = None

    async def put_object(self, key: str, data: bytes, content_type: str) -> None:
        self.puts.append(key)
        if self.put_gate is not None:
            await self.put_gate.wait()
        if self.fail_put is not None:
            raise self.fail_put
        self.objects[key] = (data, content_type)

    def resolve_public_url(self, key: str) -> str:
        return f"{PUBLIC_BASE}/{key}"


class FakeClock:
    """Millisecond clock that advances by one on every read."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        self.now += 1
        return self.now
