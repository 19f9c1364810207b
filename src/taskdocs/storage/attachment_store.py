# src/taskdocs/storage/attachment_store.py

from __future__ import annotations

import logging
from urllib.parse import quote

from ..backend.client import BackendClient

logger = logging.getLogger(__name__)


class SupabaseAttachmentStore:
    """
    Attachment store backed by one Supabase Storage bucket.

    Objects are written with upsert (an existing key is overwritten) and are
    never deleted. The bucket must be public for resolve_public_url to work.
    """

    def __init__(self, client: BackendClient, bucket: str = "task-pdfs") -> None:
        self._client = client
        self._bucket = bucket

    def _object_path(self, key: str) -> str:
        return f"/storage/v1/object/{quote(self._bucket)}/{quote(key)}"

    async def put_object(self, key: str, data: bytes, content_type: str) -> None:
        await self._client.request(
            "POST",
            self._object_path(key),
            op="put_object",
            content=data,
            headers={"Content-Type": content_type, "x-upsert": "true"},
        )
        logger.debug("Stored object bucket=%s key=%s bytes=%d", self._bucket, key, len(data))

    def resolve_public_url(self, key: str) -> str:
        return f"{self._client.base_url}/storage/v1/object/public/{quote(self._bucket)}/{quote(key)}"
