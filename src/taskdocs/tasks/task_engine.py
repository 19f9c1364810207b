# src/taskdocs/tasks/task_engine.py

from __future__ import annotations

"""
Task lifecycle engine.

Orchestrates the record store and the attachment store into one
create/read/update/delete/toggle/attach workflow and owns the view-model
consumed by the presentation layer.

The two stores are written by separate network calls; there is no
transaction between them. add_task is an explicit two-phase sequence:

    1. create the record                      (failure: nothing was written)
    2. upload the file, link its URL          (failure: PartialFailureError,
                                               the record stays without attachment)

Superseded or orphaned attachment objects are never deleted.
"""

import contextlib
import logging
from collections.abc import Callable, Iterator
from enum import StrEnum

from ..core.errors import PartialFailureError, StoreError
from ..core.ports import AttachmentStore, RecordStore
from .task_api import DEFAULT_CONTENT_TYPE, now_millis, upload_attachment
from .task_models import AttachmentFile, Draft, Status, Task, ViewModel

logger = logging.getLogger(__name__)


class RefreshOutcome(StrEnum):
    APPLIED = "applied"
    STALE = "stale"  # a newer refresh was issued; result dropped
    FAILED = "failed"


class TaskLifecycleEngine:
    """
    Single-context (asyncio) engine behind the task screen.

    `busy` is advisory: it is set while any mutating operation or refresh is
    in flight, and presentation code is expected to disable mutating controls
    while it is set. The engine itself does not reject overlapping calls.

    Each refresh() is tagged with a sequence number; only the most recently
    issued refresh may write `tasks`, so an older list request that resolves
    late is discarded. A mutation whose own refresh is discarded as stale
    still reports success.
    """

    def __init__(
        self,
        records: RecordStore,
        attachments: AttachmentStore,
        *,
        clock: Callable[[], int] = now_millis,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> None:
        self._records = records
        self._attachments = attachments
        self._clock = clock
        self._content_type = content_type

        self._tasks: tuple[Task, ...] = ()
        self._inflight = 0
        self._status: Status | None = None
        self._editing_id: str | None = None
        self._edit_draft = Draft()
        self._new_draft = Draft()
        self._refresh_seq = 0

    # ---- read access ----

    @property
    def view(self) -> ViewModel:
        return ViewModel(
            tasks=self._tasks,
            busy=self.busy,
            status=self._status,
            editing_id=self._editing_id,
            edit_draft=self._edit_draft,
            new_draft=self._new_draft,
        )

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self._tasks

    @property
    def busy(self) -> bool:
        return self._inflight > 0

    @property
    def status(self) -> Status | None:
        return self._status

    @property
    def editing_id(self) -> str | None:
        return self._editing_id

    @property
    def edit_draft(self) -> Draft:
        return self._edit_draft

    @property
    def new_draft(self) -> Draft:
        return self._new_draft

    # ---- helpers ----

    @contextlib.contextmanager
    def _busy(self) -> Iterator[None]:
        # Counter, so a nested refresh() does not clear busy for its caller.
        self._inflight += 1
        try:
            yield
        finally:
            self._inflight -= 1

    def _find(self, task_id: str) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    async def _upload(self, task_id: str, file: AttachmentFile) -> str:
        return await upload_attachment(
            self._attachments,
            task_id,
            file,
            now_ms=self._clock(),
            content_type=self._content_type,
        )

    async def _create_with_attachment(self, title: str, file: AttachmentFile | None) -> Task:
        task = await self._records.create_task(title)
        logger.info("Task created id=%s", task.id)

        if file is None:
            return task

        try:
            url = await self._upload(task.id, file)
            await self._records.update_task(task.id, attachment_url=url)
        except StoreError as exc:
            raise PartialFailureError(task.id, exc) from exc

        logger.info("Attachment linked task_id=%s", task.id)
        return task

    # ---- operations ----

    async def refresh(self) -> bool:
        """
        Reload the task list.

        On failure the list is cleared rather than left stale.
        Returns True if this call's result was applied successfully.
        """
        return await self._reload() is RefreshOutcome.APPLIED

    async def _reload(self) -> RefreshOutcome:
        self._refresh_seq += 1
        seq = self._refresh_seq

        with self._busy():
            try:
                tasks = await self._records.list_tasks()
            except StoreError as exc:
                if seq != self._refresh_seq:
                    logger.debug("Discarding stale refresh failure seq=%s", seq)
                    return RefreshOutcome.STALE
                logger.warning("refresh failed: %s", exc)
                self._tasks = ()
                self._status = Status.failure(f"Failed to load tasks: {exc}")
                return RefreshOutcome.FAILED

            if seq != self._refresh_seq:
                logger.debug("Discarding stale refresh seq=%s latest=%s", seq, self._refresh_seq)
                return RefreshOutcome.STALE

            self._tasks = tuple(tasks)
            self._status = None
            return RefreshOutcome.APPLIED

    async def add_task(self, title: str, file: AttachmentFile | None = None) -> bool:
        clean = (title or "").strip()
        if not clean:
            return False

        with self._busy():
            self._status = None
            try:
                await self._create_with_attachment(clean, file)
            except PartialFailureError as exc:
                logger.warning("add_task: %s", exc)
                # The record exists without its attachment; show it.
                await self.refresh()
                self._status = Status.failure(f"Task added, but the attachment failed: {exc.cause}")
                return False
            except StoreError as exc:
                logger.warning("add_task failed: %s", exc)
                self._status = Status.failure(f"Failed to add task: {exc}")
                return False

            # A stale inner refresh still means the mutation succeeded.
            if await self._reload() is not RefreshOutcome.FAILED:
                self._status = Status.success("Task added.")
            self._new_draft = Draft()
            return True

    async def save_edit(self, task_id: str, title: str, file: AttachmentFile | None = None) -> bool:
        clean = (title or "").strip()
        if not clean:
            return False

        current = self._find(task_id)
        attachment_url = current.attachment_url if current is not None else None

        with self._busy():
            try:
                if file is not None:
                    attachment_url = await self._upload(task_id, file)
                # attachment_url=None means "not sent": an existing link is never erased.
                await self._records.update_task(task_id, title=clean, attachment_url=attachment_url)
            except StoreError as exc:
                logger.warning("save_edit failed task_id=%s: %s", task_id, exc)
                self._status = Status.failure(f"Failed to save task: {exc}")
                return False

            logger.info("Task saved id=%s new_attachment=%s", task_id, file is not None)
            if await self._reload() is not RefreshOutcome.FAILED:
                self._status = Status.success("Task saved.")
            if self._editing_id == task_id:
                self._editing_id = None
                self._edit_draft = Draft()
            return True

    async def toggle_completed(self, task_id: str, current: bool | None = None) -> bool:
        """
        Flip `completed`. Does not mark the engine busy.

        `current` defaults to the value in the last loaded list.
        """
        if current is None:
            task = self._find(task_id)
            if task is None:
                self._status = Status.failure(f"Task {task_id} is not in the list.")
                return False
            current = task.completed

        try:
            await self._records.update_task(task_id, completed=not current)
        except StoreError as exc:
            logger.warning("toggle_completed failed task_id=%s: %s", task_id, exc)
            self._status = Status.failure(f"Failed to update task: {exc}")
            return False

        await self.refresh()
        return True

    async def delete_task(self, task_id: str) -> bool:
        """Delete the record. Its attachment object, if any, stays in storage."""
        with self._busy():
            try:
                await self._records.delete_task(task_id)
            except StoreError as exc:
                logger.warning("delete_task failed task_id=%s: %s", task_id, exc)
                self._status = Status.failure(f"Failed to delete task: {exc}")
                return False

            logger.info("Task deleted id=%s", task_id)
            if await self._reload() is not RefreshOutcome.FAILED:
                self._status = Status.success("Task deleted.")
            if self._editing_id == task_id:
                self._editing_id = None
                self._edit_draft = Draft()
            return True

    # ---- local state transitions (no network) ----

    def enter_edit(self, task_id: str) -> bool:
        task = self._find(task_id)
        if task is None:
            logger.debug("enter_edit: unknown task_id=%s", task_id)
            return False
        self._editing_id = task.id
        self._edit_draft = Draft(title=task.title)
        return True

    def cancel_edit(self) -> None:
        self._editing_id = None
        self._edit_draft = Draft()

    def set_new_draft(self, title: str, file: AttachmentFile | None = None) -> None:
        self._new_draft = Draft(title=title, file=file)

    def set_edit_draft(self, title: str, file: AttachmentFile | None = None) -> bool:
        if self._editing_id is None:
            return False
        self._edit_draft = Draft(title=title, file=file)
        return True

    async def submit_new_draft(self) -> bool:
        return await self.add_task(self._new_draft.title, self._new_draft.file)

    async def submit_edit(self) -> bool:
        if self._editing_id is None:
            return False
        return await self.save_edit(self._editing_id, self._edit_draft.title, self._edit_draft.file)
