# src/task_timer/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import cast

from ..core.errors import (
    IndexOutOfRangeError,
    StorageReadError,
    StorageWriteError,
    TaskTimerError,
)
from ..core.state import AppState
from ..tasks.task_models import Duration, Priority, Tag, Task

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], Awaitable[str]]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /list, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

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

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return await h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return await h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def friendly_error_message(e: BaseException) -> str:
    if isinstance(e, IndexOutOfRangeError):
        return f"No task #{e.index + 1} (there are {e.size}). Use /list to refresh."
    if isinstance(e, StorageReadError):
        return f"Could not read saved tasks: {e}"
    if isinstance(e, StorageWriteError):
        return f"Could not save: {e}"
    if isinstance(e, TaskTimerError):
        return str(e)
    if isinstance(e, ValueError):
        return f"Invalid input: {e}"
    return "Internal error while handling a command."


def parse_duration(text: str) -> Duration:
    """Accept "1h 30m", "1h 5m", "45m", "2h" or a bare minute count."""
    raw = text.strip().lower()
    if raw.isdigit():
        return Duration.from_minutes(int(raw))
    if raw.endswith("h") and " " not in raw:
        raw = f"{raw} 0m"
    elif raw.endswith("m") and "h" not in raw and raw[:-1].strip().isdigit():
        return Duration.from_minutes(int(raw[:-1]))
    return Duration.parse(raw)


def parse_index(args: list[str]) -> int:
    if not args or not args[0].isdigit() or int(args[0]) < 1:
        raise ValueError("expected a task number (see /list)")
    return int(args[0]) - 1


def parse_task_form(text: str) -> Task:
    """
    Parse "title | link | duration [| tag [| priority]]".

    Tag defaults to Personal, priority to Low.
    """
    fields = [f.strip() for f in text.split("|")]
    if len(fields) < 3:
        raise ValueError("expected: title | link | duration [| tag [| priority]]")
    title, link, duration = fields[0], fields[1], fields[2]
    if not title:
        raise ValueError("title is required")
    return Task(
        title=title,
        description=link,
        duration=parse_duration(duration),
        tag=Tag.parse(fields[3] if len(fields) > 3 else None),
        priority=Priority.parse(fields[4] if len(fields) > 4 else None),
    )


def render_list(state: AppState) -> str:
    rows = state.board.rows()
    if not rows:
        return "No tasks yet. Add one with /add."
    lines = ["Tasks:"]
    for r in rows:
        marker = "Doing" if r.running else "Start"
        lines.append(
            f"  {r.index + 1}. {r.title}  [{r.tag}] priority={r.priority}  "
            f"remaining={r.remaining}  ({marker})"
        )
    return "\n".join(lines)


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_list(state: AppState, args: list[str]) -> str:
    await state.board.load()
    return render_list(state)


async def cmd_add(state: AppState, args: list[str]) -> str:
    """/add Write report | docs.example.com | 0h 30m | Office | High"""
    saved = await state.board.save_task(parse_task_form(" ".join(args)))
    return f"Added: {saved.title} ({saved.duration}) -> {saved.description or '-'}"


async def cmd_edit(state: AppState, args: list[str]) -> str:
    """/edit 2 New title | example.org | 1h 00m"""
    index = parse_index(args)
    saved = await state.board.save_task(parse_task_form(" ".join(args[1:])), editing_index=index)
    return f"Saved #{index + 1}: {saved.title} ({saved.duration})"


async def cmd_delete(state: AppState, args: list[str]) -> str:
    index = parse_index(args)
    removed = await state.board.delete_task(index)
    return f"Deleted: {removed.title}"


async def cmd_toggle(state: AppState, args: list[str]) -> str:
    index = parse_index(args)
    running = await state.board.toggle(index)
    status = state.board.status_at(index)
    if running:
        return f"Started #{index + 1}: {status.remaining} remaining."
    return f"Stopped #{index + 1}: reset to {status.original}."


async def cmd_open(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    index = parse_index(args)
    if emit:
        emit("Opening link in the browser...")
    opened = await state.board.open_link(index)
    return "Opened." if opened else "This task has no link (or no browser is available)."


async def cmd_status(state: AppState, args: list[str]) -> str:
    running = [r for r in state.board.rows() if r.running]
    settings = state.settings
    lines = [
        "Status:",
        f"  Tick: {getattr(settings, 'tick_seconds', '?')}s",
        f"  Notifier: {type(state.notifier).__name__}",
        f"  Running timers: {len(running)}",
    ]
    for r in running:
        lines.append(f"    {r.index + 1}. {r.title} - {r.remaining} left")
    return "\n".join(lines)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="Reload and show tasks.", aliases=["ls"])
registry.register(
    "add", cmd_add, help_text="Add a task: /add title | link | 1h 30m [| tag [| priority]]."
)
registry.register(
    "edit", cmd_edit, help_text="Replace task N: /edit N title | link | 1h 30m [| tag [| priority]]."
)
registry.register("delete", cmd_delete, help_text="Delete task N: /delete N.", aliases=["rm"])
registry.register(
    "toggle", cmd_toggle, help_text="Start/stop the timer of task N: /toggle N.", aliases=["t"]
)
registry.register("open", cmd_open, help_text="Open the link of task N: /open N.")
registry.register("status", cmd_status, help_text="Show running timers and settings.")
