# src/task_timer/tasks/status_table.py

from __future__ import annotations

"""
Task status table.

Holds one TaskStatus per task, keyed by the task's stable id, plus the
current task order so callers can still address rows by position.

Persistence:
- the whole table is written under one key after every mutation
- the JSON is built when the write is issued, not when it completes
- writes go through a FIFO lock so they land in issue order

Reset-on-load: statuses read back from storage always start idle.
A countdown never outlives the process that started it.
"""

import asyncio
import json
import logging

from ..core.errors import IndexOutOfRangeError, StorageReadError
from ..core.ports import STATUSES_KEY, KeyValueStore, TimerControl
from .task_models import Duration, Task, TaskStatus

logger = logging.getLogger(__name__)


class StatusTable:
    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv
        self._statuses: dict[str, TaskStatus] = {}
        self._tasks: list[Task] = []
        self._timers: TimerControl | None = None
        self._write_lock = asyncio.Lock()

    def attach_timers(self, timers: TimerControl) -> None:
        self._timers = timers

    # ---- persistence ----

    async def load(self) -> None:
        raw = await self._kv.get(STATUSES_KEY)
        if raw is None:
            self._statuses = {}
            return
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageReadError(f"stored statuses are not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise StorageReadError(f"stored statuses must be an object, got {type(data).__name__}")

        statuses: dict[str, TaskStatus] = {}
        for task_id, item in data.items():
            try:
                status = TaskStatus.from_dict(item)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                raise StorageReadError(f"status {task_id} is malformed: {e}") from e
            status.reset()
            statuses[str(task_id)] = status
        self._statuses = statuses
        logger.info("Loaded task statuses: %d entries (all idle)", len(statuses))

    async def persist(self) -> None:
        payload = json.dumps(
            {task_id: s.to_dict() for task_id, s in self._statuses.items()},
            ensure_ascii=False,
        )
        async with self._write_lock:
            await self._kv.set(STATUSES_KEY, payload)

    # ---- derivation ----

    async def initialize(self, tasks: list[Task]) -> dict[str, TaskStatus]:
        """
        Align the table with `tasks`.

        Unknown ids get a fresh idle status from the task duration.
        Known ids are left untouched (a running countdown survives a re-fetch).
        Ids that disappeared are dropped.
        """
        self._tasks = list(tasks)
        live_ids = {t.id for t in tasks}
        for task_id in [tid for tid in self._statuses if tid not in live_ids]:
            self._stop_timer(task_id)
            del self._statuses[task_id]

        for task in tasks:
            if task.id not in self._statuses:
                self._statuses[task.id] = TaskStatus.idle(task.duration)

        await self.persist()
        return dict(self._statuses)

    async def refresh(self, task: Task) -> None:
        """Reset a task's status to its (possibly edited) duration."""
        self._stop_timer(task.id)
        self._statuses[task.id] = TaskStatus.idle(task.duration)
        self._replace_task(task)
        await self.persist()

    async def remove(self, task_id: str) -> None:
        self._stop_timer(task_id)
        self._statuses.pop(task_id, None)
        self._tasks = [t for t in self._tasks if t.id != task_id]
        await self.persist()

    def _replace_task(self, task: Task) -> None:
        for pos, known in enumerate(self._tasks):
            if known.id == task.id:
                self._tasks[pos] = task
                return
        self._tasks.append(task)

    # ---- accessors ----

    def __len__(self) -> int:
        return len(self._tasks)

    def task_id_at(self, index: int) -> str:
        if not 0 <= index < len(self._tasks):
            raise IndexOutOfRangeError(index, len(self._tasks))
        return self._tasks[index].id

    def status_at(self, index: int) -> TaskStatus:
        return self._statuses[self.task_id_at(index)]

    def get(self, task_id: str) -> TaskStatus | None:
        return self._statuses.get(task_id)

    def task(self, task_id: str) -> Task | None:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    # ---- transitions ----

    async def toggle(self, index: int) -> bool:
        """
        Flip `running` for the task at `index`.

        idle -> running starts a countdown.
        running -> idle stops it and restores the full duration.
        Returns the new running flag.
        """
        task_id = self.task_id_at(index)
        status = self._statuses[task_id]

        if not status.running:
            status.running = True
            if self._timers is not None:
                self._timers.start(task_id)
            logger.info("Task %s started remaining=%s", task_id, status.remaining)
        else:
            self._stop_timer(task_id)
            status.reset()
            logger.info("Task %s stopped, reset to %s", task_id, status.original)

        await self.persist()
        return status.running

    async def set_remaining(self, task_id: str, remaining: Duration) -> None:
        status = self._statuses[task_id]
        status.remaining = min(remaining, status.original)
        await self.persist()

    async def finish(self, task_id: str) -> None:
        """Expiry bookkeeping: idle again with the full duration."""
        status = self._statuses.get(task_id)
        if status is None:
            return
        status.reset()
        await self.persist()

    def _stop_timer(self, task_id: str) -> None:
        if self._timers is not None:
            self._timers.stop(task_id)
