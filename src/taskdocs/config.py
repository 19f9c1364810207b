# src/taskdocs/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time (the backend client checks them when built).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKDOCS"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_float_opt(name: str, default: float | None) -> float | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    # 0 or negative means "no timeout".
    return value if value > 0 else None


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Backend (Supabase) ----
    supabase_url: str
    supabase_key: str
    http_timeout_seconds: float | None

    # ---- Record / attachment stores ----
    tasks_table: str
    attachments_bucket: str
    attachment_content_type: str

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskdocs")
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskdocs"))

        supabase_url = (_first_env(_k("SUPABASE_URL"), "SUPABASE_URL", default="") or "").strip()
        supabase_key = (_first_env(_k("SUPABASE_KEY"), "SUPABASE_KEY", default="") or "").strip()
        http_timeout_seconds = _env_float_opt(_k("HTTP_TIMEOUT_SECONDS"), None)

        tasks_table = _env(_k("TASKS_TABLE"), "tasks").strip() or "tasks"
        attachments_bucket = _env(_k("ATTACHMENTS_BUCKET"), "task-pdfs").strip() or "task-pdfs"
        attachment_content_type = (
            _env(_k("ATTACHMENT_CONTENT_TYPE"), "application/pdf").strip() or "application/pdf"
        )

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            supabase_url=supabase_url,
            supabase_key=supabase_key,
            http_timeout_seconds=http_timeout_seconds,
            tasks_table=tasks_table,
            attachments_bucket=attachments_bucket,
            attachment_content_type=attachment_content_type,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
