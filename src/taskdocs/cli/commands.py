# src/taskdocs/cli/commands.py

from __future__ import annotations

import contextlib
import logging
import shlex
from collections.abc import Awaitable, Callable

from ..core.state import AppState
from ..tasks.task_models import AttachmentFile
from ..tasks.task_view import render_text

CommandEmitter = Callable[[str], None]
CommandHandler = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]

logger = logging.getLogger(__name__)

BUSY_REPLY = "Busy: another operation is still running."


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}
        self._mutating: set[str] = set()

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
        *,
        mutating: bool = False,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in [key, *(a.lower() for a in aliases)]:
            self._handlers[alias] = handler
            if mutating:
                self._mutating.add(alias)

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        # Quoted arguments keep their spaces: /add "Q3  report" --file "My Docs/a.pdf"
        try:
            parts = shlex.split(line[1:])
        except ValueError as exc:
            logger.debug("Cannot parse command line %r: %s", line, exc)
            return f"Cannot parse command: {exc}. Check your quotes."
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        # Mutating controls are disabled while the engine is busy.
        if name in self._mutating and state.engine.busy:
            logger.debug("Refused /%s while busy", name)
            return BUSY_REPLY

        return await handler(state, args, emit)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def split_file_option(args: list[str]) -> tuple[str, str | None]:
    """
    Split "words ... --file PATH" into (title, path).

    The path is the single token after --file (quote it if it has spaces);
    everything else is the title.
    """
    if "--file" not in args:
        return " ".join(args), None
    idx = args.index("--file")
    path = args[idx + 1] if idx + 1 < len(args) else None
    rest = args[:idx] + args[idx + 2 :]
    return " ".join(rest), path


def _load_file(path: str | None) -> AttachmentFile | None:
    """Raises OSError if the path cannot be read."""
    if path is None:
        return None
    return AttachmentFile.from_path(path)


async def cmd_help(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return registry.build_help()


async def cmd_status(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    settings = state.settings
    busy = "yes" if state.engine.busy else "no"
    return (
        "Status:\n"
        f"  Backend: {state.backend.base_url}\n"
        f"  Table: {getattr(settings, 'tasks_table', '?')}\n"
        f"  Bucket: {getattr(settings, 'attachments_bucket', '?')}\n"
        f"  Tasks loaded: {len(state.engine.tasks)}\n"
        f"  Busy: {busy}"
    )


async def cmd_list(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    await state.engine.refresh()
    return render_text(state.engine.view)


async def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /add <title>                 -> create a task
    /add <title> --file PATH     -> create a task and attach PATH
    """
    title, path = split_file_option(args)
    if not title.strip():
        return "Usage: /add <title> [--file PATH]"
    try:
        file = _load_file(path)
    except OSError as exc:
        return f"Cannot read file: {exc}"

    if emit and file is not None:
        with contextlib.suppress(Exception):
            emit(f"Uploading {file.name} ({file.size} bytes)...")

    state.engine.set_new_draft(title, file)
    await state.engine.submit_new_draft()
    return render_text(state.engine.view)


async def cmd_edit(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return "Usage: /edit <id>"
    if not state.engine.enter_edit(args[0]):
        return f"No task with id {args[0]}. Use /list to reload."
    return render_text(state.engine.view)


async def cmd_save(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /save <title>               -> save the edited title, keep the attachment
    /save <title> --file PATH   -> save and replace the attachment
    """
    if state.engine.editing_id is None:
        return "Not editing. Use /edit <id> first."
    title, path = split_file_option(args)
    if not title.strip():
        return "Usage: /save <title> [--file PATH]"
    try:
        file = _load_file(path)
    except OSError as exc:
        return f"Cannot read file: {exc}"

    state.engine.set_edit_draft(title, file)
    await state.engine.submit_edit()
    return render_text(state.engine.view)


async def cmd_cancel(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if state.engine.editing_id is None:
        return "Not editing."
    state.engine.cancel_edit()
    return "Edit cancelled."


async def cmd_toggle(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return "Usage: /toggle <id>"
    await state.engine.toggle_completed(args[0])
    return render_text(state.engine.view)


async def cmd_delete(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return "Usage: /delete <id>"
    await state.engine.delete_task(args[0])
    return render_text(state.engine.view)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show backend settings and engine state.")
registry.register("list", cmd_list, help_text="Reload and show tasks.", aliases=["ls"])
registry.register(
    "add", cmd_add, help_text="Add a task: /add <title> [--file PATH].", mutating=True
)
registry.register("edit", cmd_edit, help_text="Start editing a task: /edit <id>.", mutating=True)
registry.register(
    "save", cmd_save, help_text="Save the edit: /save <title> [--file PATH].", mutating=True
)
registry.register("cancel", cmd_cancel, help_text="Leave edit mode without saving.")
# Toggling never waits on busy.
registry.register("toggle", cmd_toggle, help_text="Flip completed: /toggle <id>.")
registry.register(
    "delete", cmd_delete, help_text="Delete a task: /delete <id>.", aliases=["rm"], mutating=True
)
