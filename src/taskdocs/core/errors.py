# src/taskdocs/core/errors.py

"""
Error types raised by the store adapters and handled by the lifecycle engine.

The engine never lets these escape: every operation converts them into a
Status value for the presentation layer.
"""

from __future__ import annotations


class TaskDocsError(Exception):
    """Base class for all taskdocs errors."""


class ValidationError(TaskDocsError, ValueError):
    """Input rejected before any remote call (e.g. a blank title)."""


class StoreError(TaskDocsError):
    """Any failure reported by the record store or the attachment store."""


class NotFoundError(StoreError):
    """The addressed row or object does not exist."""


class PartialFailureError(TaskDocsError):
    """
    The task record was created but linking its attachment failed.

    The record is NOT rolled back; it stays in the store without an
    attachment. The underlying StoreError is chained as __cause__.
    """

    def __init__(self, task_id: str, cause: Exception) -> None:
        super().__init__(f"task {task_id} was created but its attachment was not saved: {cause}")
        self.task_id = task_id
        self.cause = cause
