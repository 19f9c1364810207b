# src/taskdocs/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The lifecycle engine depends on Protocols instead of concrete implementations.
This keeps the Supabase adapters swappable and makes testing easier.
"""

from typing import Protocol

from ..tasks.task_models import Task


class RecordStore(Protocol):
    """Remote table of task rows."""

    async def list_tasks(self) -> list[Task]: ...

    async def create_task(self, title: str) -> Task: ...

    async def update_task(
            self,
            task_id: str,
            *,
            title: str | None = None,
            completed: bool | None = None,
            attachment_url: str | None = None,
    ) -> None: ...

    async def delete_task(self, task_id: str) -> None: ...


class AttachmentStore(Protocol):
    """
    Remote key-addressed blob storage.

    put_object overwrites an existing key. resolve_public_url is a pure
    template expansion and never touches the network.
    """

    async def put_object(self, key: str, data: bytes, content_type: str) -> None: ...

    def resolve_public_url(self, key: str) -> str: ...
