# src/task_timer/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (storage/notifier/board).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.board import TaskBoard
from ..core.ports import CompletionNotifier, KeyValueStore
from ..core.state import AppState
from ..notify import LogNotifier, PlyerNotifier
from ..storage.kv_store import MemoryKeyValueStore, SqliteKeyValueStore
from ..tasks.countdown import CountdownEngine
from ..tasks.status_table import StatusTable
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)


def build_board(
    kv: KeyValueStore,
    notifier: CompletionNotifier,
    *,
    tick_seconds: float = 60.0,
) -> TaskBoard:
    table = StatusTable(kv)
    engine = CountdownEngine(table, notifier, tick_seconds=tick_seconds)
    return TaskBoard(TaskStore(kv), table, engine)


def create_initial_state(*, settings=None, in_memory: bool = False) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    kv: KeyValueStore
    if in_memory:
        kv = MemoryKeyValueStore()
    else:
        _ensure_local_dirs(settings)
        kv = SqliteKeyValueStore(settings.db_path)

    notifier: CompletionNotifier
    if settings.notifications_enabled:
        notifier = PlyerNotifier(app_name=settings.app_name, timeout=settings.notify_timeout)
    else:
        notifier = LogNotifier()

    board = build_board(kv, notifier, tick_seconds=settings.tick_seconds)
    logger.info(
        "State ready storage=%s notifier=%s tick=%ss",
        type(kv).__name__,
        type(notifier).__name__,
        settings.tick_seconds,
    )
    return AppState(settings=settings, kv=kv, notifier=notifier, board=board)
