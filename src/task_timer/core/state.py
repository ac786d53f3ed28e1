# src/task_timer/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from .board import TaskBoard
from .ports import CompletionNotifier, KeyValueStore


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    kv: KeyValueStore
    notifier: CompletionNotifier
    board: TaskBoard
