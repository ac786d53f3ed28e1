# src/task_timer/core/errors.py

"""Error taxonomy shared by the store, the status table and the engine."""

from __future__ import annotations


class TaskTimerError(Exception):
    """Base class for all task_timer errors."""


class StorageReadError(TaskTimerError):
    """Persisted collection is unreadable or unparsable."""


class StorageWriteError(TaskTimerError):
    """Underlying store rejected a write."""


class NotificationError(TaskTimerError):
    """Notifier is unavailable or the platform denied the notification."""


class IndexOutOfRangeError(TaskTimerError, IndexError):
    """Operation referenced a position that does not exist (stale index)."""

    def __init__(self, index: int, size: int) -> None:
        super().__init__(f"index {index} out of range (size={size})")
        self.index = index
        self.size = size
