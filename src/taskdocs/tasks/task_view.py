# src/taskdocs/tasks/task_view.py

from __future__ import annotations

"""
Projection of the engine's ViewModel into display-ready rows.

Pure functions only: the presentation layer renders what these return and
never reads engine internals.
"""

from dataclasses import dataclass

from .task_models import Status, ViewModel


@dataclass(frozen=True, slots=True)
class TaskRow:
    id: str
    title: str
    completed: bool
    attachment_url: str | None
    editing: bool

    @property
    def has_attachment(self) -> bool:
        return bool(self.attachment_url)


@dataclass(frozen=True, slots=True)
class Screen:
    rows: tuple[TaskRow, ...]
    controls_enabled: bool
    show_loading: bool
    status_line: str | None
    status_is_error: bool


def project_rows(view: ViewModel) -> list[TaskRow]:
    return [
        TaskRow(
            id=t.id,
            title=t.title,
            completed=t.completed,
            attachment_url=t.attachment_url,
            editing=(t.id == view.editing_id),
        )
        for t in view.tasks
    ]


def _status_line(status: Status | None) -> tuple[str | None, bool]:
    if status is None:
        return None, False
    return status.message, not status.ok


def project_screen(view: ViewModel) -> Screen:
    line, is_error = _status_line(view.status)
    return Screen(
        rows=tuple(project_rows(view)),
        controls_enabled=not view.busy,
        # Spinner only when there is nothing to show yet.
        show_loading=view.busy and not view.tasks,
        status_line=line,
        status_is_error=is_error,
    )


def render_text(view: ViewModel) -> str:
    """Plain-text screen used by the console connector."""
    screen = project_screen(view)
    lines: list[str] = []

    if screen.status_line:
        prefix = "ERROR" if screen.status_is_error else "OK"
        lines.append(f"[{prefix}] {screen.status_line}")

    if screen.show_loading:
        lines.append("Loading...")
        return "\n".join(lines)

    if not screen.rows:
        lines.append("No tasks yet. Use /add <title> [--file PATH].")
        return "\n".join(lines)

    for row in screen.rows:
        mark = "x" if row.completed else " "
        edit = "  (editing)" if row.editing else ""
        lines.append(f"[{mark}] {row.id}  {row.title}{edit}")
        if row.has_attachment:
            lines.append(f"      attachment: {row.attachment_url}")

    if view.editing_id is not None:
        draft = view.edit_draft
        file_note = f", new file: {draft.file.name}" if draft.file is not None else ""
        lines.append(f"Editing {view.editing_id}: title={draft.title!r}{file_note}. /save or /cancel")

    return "\n".join(lines)
