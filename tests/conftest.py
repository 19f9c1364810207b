# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import httpx
import pytest

from taskdocs.backend.client import BackendClient
from taskdocs.core.state import AppState
from taskdocs.tasks.task_engine import TaskLifecycleEngine

from .fakes import FakeAttachmentStore, FakeClock, FakeRecordStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the bootstrap and commands.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskdocs-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        supabase_url="https://example.supabase.co",
        supabase_key="test-key",
        http_timeout_seconds=None,
        tasks_table="tasks",
        attachments_bucket="task-pdfs",
        attachment_content_type="application/pdf",
    )


@pytest.fixture()
def records() -> FakeRecordStore:
    return FakeRecordStore()


@pytest.fixture()
def attachments() -> FakeAttachmentStore:
    return FakeAttachmentStore()


@pytest.fixture()
def engine(records: FakeRecordStore, attachments: FakeAttachmentStore) -> TaskLifecycleEngine:
    return TaskLifecycleEngine(records, attachments, clock=FakeClock())


@pytest.fixture()
def state(settings: SimpleNamespace, engine: TaskLifecycleEngine) -> AppState:
    """
    AppState wired with the in-memory stores.

    The backend client is only used for its base URL here; any request
    through it would fail loudly.
    """

    def refuse(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"unexpected HTTP call {request.method} {request.url}")

    backend = BackendClient(
        settings.supabase_url, settings.supabase_key, transport=httpx.MockTransport(refuse)
    )
    return AppState(settings=settings, backend=backend, engine=engine)
