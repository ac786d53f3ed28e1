# src/task_timer/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the storage medium and the notification mechanism swappable
and makes testing easier.
"""

from typing import TYPE_CHECKING, Awaitable, Protocol

if TYPE_CHECKING:
    from ..tasks.task_models import Task

TASKS_KEY = "tasks"
STATUSES_KEY = "taskStatuses"


class KeyValueStore(Protocol):
    """
    Abstract string key-value persistence.

    Values are JSON-encoded collections. get() returns None for a missing key.
    Implementations raise StorageReadError / StorageWriteError on medium failures.
    """

    def get(self, key: str) -> Awaitable[str | None]: ...
    def set(self, key: str, value: str) -> Awaitable[None]: ...


class CompletionNotifier(Protocol):
    """
    Surfaces a countdown expiry to the user.

    Fire-and-forget from the engine's point of view: failures may raise
    NotificationError, the engine logs and drops them.
    """

    def notify(self, title: str, body: str, payload: Task) -> Awaitable[None]: ...


class TimerControl(Protocol):
    """What the status table needs from the countdown engine."""

    def start(self, task_id: str) -> bool: ...
    def stop(self, task_id: str) -> bool: ...
