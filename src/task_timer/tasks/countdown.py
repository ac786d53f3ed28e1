# src/task_timer/tasks/countdown.py

from __future__ import annotations

"""
Countdown engine.

One asyncio task per running countdown that:
- sleeps one tick (default one minute), relative to the previous tick,
- checks it is still the current timer for its task,
- decrements the remaining time in the status table,
- on reaching zero resets the status and dispatches the notifier.

Stopping drops the handle first, then cancels the asyncio task unless it is
mid-write. A runner that resumes after stop sees a different (or no) handle
and exits without writing again.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from ..core.ports import CompletionNotifier
from .status_table import StatusTable
from .task_models import Duration, Task

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]

EXPIRY_TITLE = "Time's up!"


def expiry_body(task: Task) -> str:
    return f'The timer for "{task.title}" has ended.'


@dataclass(slots=True, eq=False)
class TimerHandle:
    task_id: str
    runner: asyncio.Task[None] | None = field(default=None)
    writing: bool = False


class CountdownEngine:
    def __init__(
        self,
        table: StatusTable,
        notifier: CompletionNotifier,
        *,
        tick_seconds: float = 60.0,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._table = table
        self._notifier = notifier
        self._tick_s = max(0.0, float(tick_seconds))
        self._sleep = sleep
        self._handles: dict[str, TimerHandle] = {}
        self._background: set[asyncio.Task[None]] = set()
        table.attach_timers(self)

    def is_running(self, task_id: str) -> bool:
        return task_id in self._handles

    def running_ids(self) -> list[str]:
        return list(self._handles)

    def start(self, task_id: str) -> bool:
        """
        Start a countdown from the task's current remaining time.

        Rejected (returns False) if a timer is already live for this task.
        Must be called from within the running event loop.
        """
        if task_id in self._handles:
            logger.warning("Timer already running for task %s; start ignored", task_id)
            return False

        handle = TimerHandle(task_id=task_id)
        self._handles[task_id] = handle
        handle.runner = asyncio.get_running_loop().create_task(
            self._run(handle), name=f"countdown-{task_id}"
        )
        return True

    def stop(self, task_id: str) -> bool:
        handle = self._handles.pop(task_id, None)
        if handle is None:
            return False
        # Mid-write runners are left alone; the handle check ends them.
        if handle.runner is not None and not handle.writing:
            handle.runner.cancel()
        logger.debug("Timer stopped task=%s", task_id)
        return True

    async def shutdown(self) -> None:
        for task_id in list(self._handles):
            self.stop(task_id)
        pending = list(self._background)
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    def _is_current(self, handle: TimerHandle) -> bool:
        return self._handles.get(handle.task_id) is handle

    async def _run(self, handle: TimerHandle) -> None:
        task_id = handle.task_id
        status = self._table.get(task_id)
        if status is None:
            self._handles.pop(task_id, None)
            return

        total = status.remaining.total_minutes
        logger.info("Countdown started task=%s minutes=%d", task_id, total)

        while True:
            await self._sleep(self._tick_s)
            if not self._is_current(handle):
                return

            total -= 1
            if total > 0:
                handle.writing = True
                try:
                    await self._table.set_remaining(task_id, Duration.from_minutes(total))
                except Exception:
                    logger.exception("Persisting remaining time failed task=%s", task_id)
                finally:
                    handle.writing = False
                if not self._is_current(handle):
                    return
                continue

            await self._expire(handle)
            return

    async def _expire(self, handle: TimerHandle) -> None:
        task_id = handle.task_id
        self._handles.pop(task_id, None)
        task = self._table.task(task_id)
        logger.info("Countdown expired task=%s", task_id)

        try:
            await self._table.finish(task_id)
        except Exception:
            logger.exception("Persisting expiry failed task=%s", task_id)

        # Dispatched after the transition; its outcome never feeds back.
        if task is not None:
            self._spawn(self._notify(task))

    def _spawn(self, coro: Awaitable[None]) -> None:
        t = asyncio.ensure_future(coro)
        self._background.add(t)
        t.add_done_callback(self._background.discard)

    async def _notify(self, task: Task) -> None:
        try:
            await self._notifier.notify(EXPIRY_TITLE, expiry_body(task), task)
        except Exception:
            logger.exception("Completion notification failed task=%s", task.id)
