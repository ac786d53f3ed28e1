# src/task_timer/core/board.py

"""
Task board: the contract screen controllers talk to.

Wraps the record store, the status table and the countdown engine so every
add/edit/delete keeps the three consistent:
- add:    store append, then a fresh idle status
- edit:   store replace (id kept); status refreshed only if the duration changed
- delete: timer stopped, store removal, status dropped
"""

from __future__ import annotations

import asyncio
import logging
import webbrowser
from dataclasses import dataclass

from ..tasks.countdown import CountdownEngine
from ..tasks.status_table import StatusTable
from ..tasks.task_models import Priority, Tag, Task, TaskStatus
from ..tasks.task_store import TaskStore
from .errors import IndexOutOfRangeError

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class TaskRow:
    """Everything a list view needs for one task."""

    index: int
    title: str
    remaining: str
    tag: Tag
    priority: Priority
    running: bool
    link: str


class TaskBoard:
    def __init__(self, store: TaskStore, table: StatusTable, engine: CountdownEngine) -> None:
        self.store = store
        self.table = table
        self.engine = engine
        self._tasks: list[Task] = []
        self._loaded = False

    async def load(self) -> list[Task]:
        """
        (Re)fetch tasks and align statuses.

        The first call also reads persisted statuses (always idle after a restart).
        Later calls keep in-memory statuses for tasks that are still present.
        """
        if not self._loaded:
            await self.table.load()
            self._loaded = True
        self._tasks = await self.store.list_tasks()
        await self.table.initialize(self._tasks)
        return list(self._tasks)

    def list_tasks(self) -> list[Task]:
        return list(self._tasks)

    def _task_at(self, index: int) -> Task:
        if not 0 <= index < len(self._tasks):
            raise IndexOutOfRangeError(index, len(self._tasks))
        return self._tasks[index]

    async def save_task(self, task: Task, editing_index: int | None = None) -> Task:
        previous = None if editing_index is None else self._task_at(editing_index)
        saved = await self.store.save_task(task, editing_index)
        self._tasks = await self.store.list_tasks()
        await self.table.initialize(self._tasks)

        if previous is not None and previous.duration != saved.duration:
            logger.info(
                "Task %s duration changed %s -> %s; status refreshed",
                saved.id,
                previous.duration,
                saved.duration,
            )
            await self.table.refresh(saved)
        return saved

    async def delete_task(self, index: int) -> Task:
        self._task_at(index)
        # Store first: a failed write must leave the countdown untouched.
        removed = await self.store.delete_task(index)
        self.engine.stop(removed.id)
        self._tasks = await self.store.list_tasks()
        await self.table.remove(removed.id)
        await self.table.initialize(self._tasks)
        return removed

    async def toggle(self, index: int) -> bool:
        return await self.table.toggle(index)

    def status_at(self, index: int) -> TaskStatus:
        return self.table.status_at(index)

    def rows(self) -> list[TaskRow]:
        out: list[TaskRow] = []
        for i, t in enumerate(self._tasks):
            status = self.table.get(t.id) or TaskStatus.idle(t.duration)
            out.append(
                TaskRow(
                    index=i,
                    title=t.title,
                    remaining=str(status.remaining),
                    tag=t.tag,
                    priority=t.priority,
                    running=status.running,
                    link=t.description,
                )
            )
        return out

    async def open_link(self, index: int) -> bool:
        """Open the task's link in the default browser. False if it has none."""
        task = self._task_at(index)
        if not task.description:
            return False
        return await asyncio.to_thread(webbrowser.open, task.description)

    async def shutdown(self) -> None:
        await self.engine.shutdown()
        await self.table.persist()
