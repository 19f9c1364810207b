# src/taskdocs/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- builds the one BackendClient and wires the record/attachment stores
  and the lifecycle engine into AppState.
"""

from __future__ import annotations

import logging

import httpx

from ..backend.client import BackendClient
from ..config import get_settings
from ..core.state import AppState
from ..storage.attachment_store import SupabaseAttachmentStore
from ..tasks.task_engine import TaskLifecycleEngine
from ..tasks.task_store import SupabaseTaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *, settings=None, transport: httpx.AsyncBaseTransport | None = None
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    Raises RuntimeError if the backend URL or key is missing.
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    backend = BackendClient.from_settings(settings, transport=transport)
    engine = TaskLifecycleEngine(
        SupabaseTaskStore(backend, table=settings.tasks_table),
        SupabaseAttachmentStore(backend, bucket=settings.attachments_bucket),
        content_type=settings.attachment_content_type,
    )
    logger.info(
        "Backend ready url=%s table=%s bucket=%s",
        backend.base_url,
        settings.tasks_table,
        settings.attachments_bucket,
    )
    return AppState(settings=settings, backend=backend, engine=engine)


async def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        await state.backend.aclose()
    except Exception:
        logger.debug("Backend close failed.", exc_info=True)
