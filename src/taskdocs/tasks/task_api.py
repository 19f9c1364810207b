# src/taskdocs/tasks/task_api.py

from __future__ import annotations

import logging
import time

from ..core.ports import AttachmentStore
from .task_models import AttachmentFile

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = "pdf"
DEFAULT_CONTENT_TYPE = "application/pdf"


def now_millis() -> int:
    return int(time.time() * 1000)


def file_extension(filename: str) -> str:
    """
    Text after the last dot of the file name.

    "invoice.pdf" -> "pdf"; names without a usable extension ("README",
    "archive.") fall back to DEFAULT_EXTENSION.
    """
    name = (filename or "").strip()
    if "." not in name:
        return DEFAULT_EXTENSION
    ext = name.rsplit(".", 1)[1].strip()
    if not ext or "/" in ext:
        return DEFAULT_EXTENSION
    return ext


def build_object_key(task_id: str, *, now_ms: int, extension: str) -> str:
    """Storage key for an attachment: {task_id}_{millis}.{ext}"""
    return f"{task_id}_{int(now_ms)}.{extension}"


async def upload_attachment(
    store: AttachmentStore,
    task_id: str,
    file: AttachmentFile,
    *,
    now_ms: int | None = None,
    content_type: str = DEFAULT_CONTENT_TYPE,
) -> str:
    """
    Upload `file` under a fresh key derived from task_id + time and
    return its public URL.

    Every call writes a new key; superseded objects are left in place.
    """
    if now_ms is None:
        now_ms = now_millis()

    key = build_object_key(task_id, now_ms=now_ms, extension=file_extension(file.name))
    await store.put_object(key, file.data, content_type)
    url = store.resolve_public_url(key)
    logger.info("Attachment uploaded task_id=%s key=%s bytes=%d", task_id, key, file.size)
    return url
