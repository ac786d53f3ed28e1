# src/task_timer/tasks/task_store.py

from __future__ import annotations

import json
import logging
from dataclasses import replace

from ..core.errors import IndexOutOfRangeError, StorageReadError
from ..core.ports import TASKS_KEY, KeyValueStore
from .task_models import Task, normalize_link

logger = logging.getLogger(__name__)


class TaskStore:
    """
    Ordered task list persisted under a single key.

    Every operation is a whole-collection read-modify-write:
    - read the full JSON list
    - change it in memory
    - write the full list back once

    Concurrent callers are not supported.
    """

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv

    # ---- low-level helpers ----

    async def _read(self) -> tuple[list[Task], bool]:
        raw = await self._kv.get(TASKS_KEY)
        if raw is None:
            return [], False
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageReadError(f"stored tasks are not valid JSON: {e}") from e
        if not isinstance(data, list):
            raise StorageReadError(f"stored tasks must be a list, got {type(data).__name__}")

        tasks: list[Task] = []
        missing_ids = False
        for pos, item in enumerate(data):
            if not isinstance(item, dict):
                raise StorageReadError(f"task #{pos} is not an object")
            missing_ids = missing_ids or not item.get("id")
            try:
                tasks.append(Task.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                raise StorageReadError(f"task #{pos} is malformed: {e}") from e
        return tasks, missing_ids

    async def _write(self, tasks: list[Task]) -> None:
        payload = json.dumps([t.to_dict() for t in tasks], ensure_ascii=False)
        await self._kv.set(TASKS_KEY, payload)

    @staticmethod
    def _check_index(index: int, tasks: list[Task]) -> None:
        if not 0 <= index < len(tasks):
            raise IndexOutOfRangeError(index, len(tasks))

    # ---- public API ----

    async def list_tasks(self) -> list[Task]:
        tasks, missing_ids = await self._read()
        if missing_ids:
            # Legacy records had no id; pin the freshly assigned ones.
            logger.info("Assigned ids to legacy task records count=%d", len(tasks))
            await self._write(tasks)
        return tasks

    async def get_task(self, index: int) -> Task:
        tasks = await self.list_tasks()
        self._check_index(index, tasks)
        return tasks[index]

    async def save_task(self, task: Task, editing_index: int | None = None) -> Task:
        """
        Append `task`, or replace the record at `editing_index`.

        The replaced record's id is kept so status and timers stay attached.
        Returns the record as stored (normalized link, final id).
        """
        tasks = await self.list_tasks()
        saved = replace(task, description=normalize_link(task.description))

        if editing_index is None:
            tasks.append(saved)
            logger.debug("Task added id=%s title=%r", saved.id, saved.title)
        else:
            self._check_index(editing_index, tasks)
            saved = replace(saved, id=tasks[editing_index].id)
            tasks[editing_index] = saved
            logger.debug("Task replaced index=%s id=%s", editing_index, saved.id)

        await self._write(tasks)
        return saved

    async def delete_task(self, index: int) -> Task:
        tasks = await self.list_tasks()
        self._check_index(index, tasks)
        removed = tasks.pop(index)
        await self._write(tasks)
        logger.debug("Task deleted index=%s id=%s", index, removed.id)
        return removed
