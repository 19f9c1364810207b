# src/taskdocs/tasks/task_models.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    title: str
    completed: bool
    attachment_url: str | None
    created_at: datetime | None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Task:
        """Build a Task from a record-store row. Raises KeyError if id is missing."""
        return cls(
            id=str(row["id"]),
            title=str(row.get("title") or ""),
            completed=bool(row.get("completed") or False),
            attachment_url=row.get("attachment_url") or None,
            created_at=_parse_ts(row.get("created_at")),
        )


def _parse_ts(raw: Any) -> datetime | None:
    if isinstance(raw, datetime):
        return raw
    if not raw:
        return None
    try:
        return datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Unparseable created_at=%r", raw)
        return None


@dataclass(frozen=True, slots=True)
class AttachmentFile:
    """A file picked by the user, not yet uploaded."""

    name: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: str | Path) -> AttachmentFile:
        p = Path(path).expanduser()
        return cls(name=p.name, data=p.read_bytes())


class StatusKind(StrEnum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True, slots=True)
class Status:
    kind: StatusKind
    message: str

    @classmethod
    def success(cls, message: str) -> Status:
        return cls(StatusKind.SUCCESS, message)

    @classmethod
    def failure(cls, message: str) -> Status:
        return cls(StatusKind.FAILURE, message)

    @property
    def ok(self) -> bool:
        return self.kind is StatusKind.SUCCESS


@dataclass(frozen=True, slots=True)
class Draft:
    """Uncommitted form input: a title and an optional replacement file."""

    title: str = ""
    file: AttachmentFile | None = None


@dataclass(frozen=True, slots=True)
class ViewModel:
    """
    Read-only snapshot of the engine state handed to the presentation layer.

    tasks are ordered newest created_at first, as returned by the record store.
    """

    tasks: tuple[Task, ...] = ()
    busy: bool = False
    status: Status | None = None
    editing_id: str | None = None
    edit_draft: Draft = field(default_factory=Draft)
    new_draft: Draft = field(default_factory=Draft)

    def find(self, task_id: str) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None
