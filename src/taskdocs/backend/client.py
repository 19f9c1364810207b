# src/taskdocs/backend/client.py

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..core.errors import NotFoundError, StoreError

logger = logging.getLogger(__name__)


def _error_detail(resp: httpx.Response) -> str:
    """Best-effort extraction of the server's error message."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "error_description", "error", "msg"):
            val = body.get(key)
            if val:
                return str(val)
    text = (resp.text or "").strip()
    return text[:200] if text else resp.reason_phrase


class BackendClient:
    """
    Connection to one Supabase project (PostgREST + Storage).

    Owns the base URL, the API key headers and the pooled httpx.AsyncClient.
    Constructed once by the composition root and passed to every store
    adapter; nothing in the package reaches for a global client.

    timeout=None disables httpx timeouts: requests fail or hang per the
    remote service.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url or not base_url.strip():
            raise RuntimeError("Backend URL is not set. Set TASKDOCS_SUPABASE_URL in your .env.")
        if not api_key or not api_key.strip():
            raise RuntimeError("Backend API key is not set. Set TASKDOCS_SUPABASE_KEY in your .env.")

        self._base_url = base_url.strip().rstrip("/")
        key = api_key.strip()
        self._http = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"apikey": key, "Authorization": f"Bearer {key}"},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings, *, transport: httpx.AsyncBaseTransport | None = None
    ) -> BackendClient:
        return cls(
            getattr(settings, "supabase_url", ""),
            getattr(settings, "supabase_key", ""),
            timeout=getattr(settings, "http_timeout_seconds", None),
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def request(self, method: str, path: str, *, op: str, **kwargs: Any) -> httpx.Response:
        """
        Send one request and map failures to StoreError.

        - transport errors (DNS, connect, timeout) -> StoreError
        - HTTP 404 -> NotFoundError
        - any other 4xx/5xx -> StoreError with the server's message
        """
        try:
            resp = await self._http.request(method, path, **kwargs)
        except httpx.RequestError as exc:
            logger.warning("%s: transport error %s %s: %s", op, method, path, exc)
            raise StoreError(f"{op} failed: {exc}") from exc

        if resp.status_code == 404:
            raise NotFoundError(f"{op} failed: {_error_detail(resp)}")
        if resp.is_error:
            detail = _error_detail(resp)
            logger.warning("%s: HTTP %s %s %s: %s", op, resp.status_code, method, path, detail)
            raise StoreError(f"{op} failed (HTTP {resp.status_code}): {detail}")
        return resp

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> BackendClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
