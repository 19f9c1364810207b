# src/taskdocs/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..backend.client import BackendClient
from ..tasks.task_engine import TaskLifecycleEngine


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    backend: BackendClient
    engine: TaskLifecycleEngine
