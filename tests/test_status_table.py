# tests/test_status_table.py

from __future__ import annotations

import json

import pytest

from task_timer.core.errors import IndexOutOfRangeError, StorageReadError
from task_timer.core.ports import STATUSES_KEY
from task_timer.storage.kv_store import MemoryKeyValueStore
from task_timer.tasks.status_table import StatusTable
from task_timer.tasks.task_models import Duration, Task, TaskStatus


class RecordingTimers:
    def __init__(self) -> None:
        self.started: list[str] = []
        self.stopped: list[str] = []

    def start(self, task_id: str) -> bool:
        self.started.append(task_id)
        return True

    def stop(self, task_id: str) -> bool:
        self.stopped.append(task_id)
        return True


def _tasks() -> list[Task]:
    return [
        Task(title="a", duration=Duration(0, 5), id="a"),
        Task(title="b", duration=Duration(1, 30), id="b"),
    ]


@pytest.mark.asyncio
async def test_initialize_creates_idle_entries_and_persists(kv) -> None:
    table = StatusTable(kv)
    statuses = await table.initialize(_tasks())

    assert statuses["a"] == TaskStatus.idle(Duration(0, 5))
    assert table.status_at(1).remaining == Duration(1, 30)
    stored = json.loads(kv.data[STATUSES_KEY])
    assert stored["b"] == {
        "running": False,
        "originalDuration": "1h 30m",
        "remainingDuration": "1h 30m",
    }


@pytest.mark.asyncio
async def test_initialize_keeps_known_entries_and_drops_missing(kv) -> None:
    table = StatusTable(kv)
    timers = RecordingTimers()
    table.attach_timers(timers)
    await table.initialize(_tasks())
    await table.set_remaining("a", Duration(0, 2))

    await table.initialize([_tasks()[0]])
    assert table.get("a").remaining == Duration(0, 2)
    assert table.get("b") is None
    assert "b" in timers.stopped
    assert len(table) == 1


@pytest.mark.asyncio
async def test_toggle_flips_and_drives_timers(kv) -> None:
    table = StatusTable(kv)
    timers = RecordingTimers()
    table.attach_timers(timers)
    await table.initialize(_tasks())

    assert await table.toggle(0) is True
    assert timers.started == ["a"]
    await table.set_remaining("a", Duration(0, 3))

    assert await table.toggle(0) is False
    assert timers.stopped == ["a"]
    assert table.get("a") == TaskStatus.idle(Duration(0, 5))

    with pytest.raises(IndexOutOfRangeError):
        await table.toggle(2)


@pytest.mark.asyncio
async def test_load_resets_running_entries() -> None:
    persisted = {
        "a": {"running": True, "originalDuration": "0h 05m", "remainingDuration": "0h 01m"},
    }
    kv = MemoryKeyValueStore({STATUSES_KEY: json.dumps(persisted)})
    table = StatusTable(kv)

    await table.load()
    await table.initialize(_tasks())
    assert table.get("a") == TaskStatus.idle(Duration(0, 5))


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["]]", "[]", json.dumps({"a": {"running": False}})])
async def test_load_malformed_raises(raw: str) -> None:
    table = StatusTable(MemoryKeyValueStore({STATUSES_KEY: raw}))
    with pytest.raises(StorageReadError):
        await table.load()
