# src/taskdocs/tasks/task_store.py

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..backend.client import BackendClient
from ..core.errors import NotFoundError, StoreError, ValidationError
from .task_models import Task

logger = logging.getLogger(__name__)

_COLUMNS = "id,title,completed,attachment_url,created_at"
_RETURN_ROWS = {"Prefer": "return=representation"}


class SupabaseTaskStore:
    """
    Record store backed by a PostgREST table.

    Expected table:
        id             server-generated primary key
        title          text
        completed      boolean default false
        attachment_url text null
        created_at     timestamptz default now()

    Deleting an unknown id is a success (idempotent); updating one raises
    NotFoundError.
    """

    def __init__(self, client: BackendClient, table: str = "tasks") -> None:
        self._client = client
        self._table = table
        self._path = f"/rest/v1/{table}"

    @staticmethod
    def _rows(resp: httpx.Response, op: str) -> list[dict[str, Any]]:
        try:
            body = resp.json()
        except ValueError as exc:
            raise StoreError(f"{op} failed: response is not JSON") from exc
        if not isinstance(body, list) or not all(isinstance(r, dict) for r in body):
            raise StoreError(f"{op} failed: expected a list of rows")
        return body

    @staticmethod
    def _to_tasks(rows: list[dict[str, Any]], op: str) -> list[Task]:
        try:
            return [Task.from_row(r) for r in rows]
        except KeyError as exc:
            raise StoreError(f"{op} failed: row without {exc}") from exc

    # ---- public API ----

    async def list_tasks(self) -> list[Task]:
        resp = await self._client.request(
            "GET",
            self._path,
            op="list_tasks",
            params={"select": _COLUMNS, "order": "created_at.desc"},
        )
        tasks = self._to_tasks(self._rows(resp, "list_tasks"), "list_tasks")
        logger.debug("Listed %d tasks from %s", len(tasks), self._table)
        return tasks

    async def create_task(self, title: str) -> Task:
        if not title or not title.strip():
            raise ValidationError("title is required")

        resp = await self._client.request(
            "POST",
            self._path,
            op="create_task",
            params={"select": _COLUMNS},
            json={"title": title.strip()},
            headers=_RETURN_ROWS,
        )
        rows = self._rows(resp, "create_task")
        if not rows:
            raise StoreError("create_task failed: insert returned no row")
        task = self._to_tasks(rows[:1], "create_task")[0]
        logger.debug("Task created id=%s", task.id)
        return task

    async def update_task(
        self,
        task_id: str,
        *,
        title: str | None = None,
        completed: bool | None = None,
        attachment_url: str | None = None,
    ) -> None:
        fields: dict[str, Any] = {}

        if title is not None:
            fields["title"] = title

        if completed is not None:
            fields["completed"] = bool(completed)

        if attachment_url is not None:
            fields["attachment_url"] = attachment_url

        if not fields:
            return

        resp = await self._client.request(
            "PATCH",
            self._path,
            op="update_task",
            params={"id": f"eq.{task_id}", "select": "id"},
            json=fields,
            headers=_RETURN_ROWS,
        )
        if not self._rows(resp, "update_task"):
            raise NotFoundError(f"update_task failed: task {task_id} not found")
        logger.debug("Task updated id=%s fields=%s", task_id, sorted(fields))

    async def delete_task(self, task_id: str) -> None:
        await self._client.request(
            "DELETE",
            self._path,
            op="delete_task",
            params={"id": f"eq.{task_id}"},
        )
        logger.debug("Task deleted id=%s", task_id)
