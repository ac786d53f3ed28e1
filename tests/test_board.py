# tests/test_board.py

from __future__ import annotations

import json

import pytest

from task_timer.core.board import TaskBoard
from task_timer.core.errors import IndexOutOfRangeError, StorageWriteError
from task_timer.core.ports import STATUSES_KEY, TASKS_KEY
from task_timer.storage.kv_store import MemoryKeyValueStore
from task_timer.tasks.task_models import Duration, Priority, Tag, Task, TaskStatus

from .conftest import make_board
from .fakes import FailingWriteStore, FakeNotifier, ManualTicker


async def _seed(board: TaskBoard, *entries: tuple[str, Duration]) -> None:
    await board.load()
    for title, duration in entries:
        await board.save_task(Task(title=title, duration=duration))


@pytest.mark.asyncio
async def test_write_report_scenario(board: TaskBoard, notifier: FakeNotifier, ticker: ManualTicker) -> None:
    await board.load()
    saved = await board.save_task(
        Task(
            title="Write report",
            description="docs.example.com",
            tag=Tag.OFFICE,
            priority=Priority.HIGH,
            duration=Duration(0, 2),
        )
    )
    assert saved.description == "https://docs.example.com"

    await board.load()
    row = board.rows()[0]
    assert (row.title, row.remaining, row.tag, row.priority, row.running) == (
        "Write report",
        "0h 02m",
        Tag.OFFICE,
        Priority.HIGH,
        False,
    )

    assert await board.toggle(0) is True
    await ticker.tick()
    assert board.rows()[0].remaining == "0h 01m"
    await ticker.tick()

    status = board.status_at(0)
    assert status.running is False
    assert str(status.remaining) == "0h 02m"
    assert len(notifier.sent) == 1
    assert notifier.sent[0].payload.title == "Write report"
    assert "Write report" in notifier.sent[0].body


@pytest.mark.asyncio
async def test_delete_shifts_statuses_down(board: TaskBoard, ticker: ManualTicker) -> None:
    await _seed(board, ("a", Duration(0, 10)), ("b", Duration(0, 20)), ("c", Duration(0, 30)))
    await board.toggle(1)
    await board.toggle(2)
    await ticker.tick()

    before = [board.status_at(i) for i in range(3)]
    removed = await board.delete_task(1)

    assert removed.title == "b"
    assert len(board.list_tasks()) == 2
    assert board.status_at(1) == before[2]
    assert board.status_at(1).remaining == Duration(0, 29)
    assert board.engine.running_ids() == [board.list_tasks()[1].id]

    await ticker.tick()
    assert board.status_at(1).remaining == Duration(0, 28)
    assert board.status_at(0) == TaskStatus.idle(Duration(0, 10))
    await board.shutdown()


@pytest.mark.asyncio
async def test_edit_refreshes_status_only_when_duration_changes(board: TaskBoard, ticker: ManualTicker) -> None:
    await _seed(board, ("a", Duration(0, 10)), ("b", Duration(0, 10)))
    await board.toggle(0)
    await board.toggle(1)
    await ticker.tick()

    # Same duration: countdown keeps going, new title is used.
    await board.save_task(Task(title="a renamed", duration=Duration(0, 10)), editing_index=0)
    assert board.status_at(0).running is True
    assert board.status_at(0).remaining == Duration(0, 9)

    # New duration: timer stopped, status rebuilt from the new value.
    await board.save_task(Task(title="b", duration=Duration(1, 0)), editing_index=1)
    assert board.status_at(1) == TaskStatus.idle(Duration(1, 0))
    assert board.engine.running_ids() == [board.list_tasks()[0].id]
    await board.shutdown()


@pytest.mark.asyncio
async def test_duplicate_titles_edit_by_position(board: TaskBoard) -> None:
    await _seed(board, ("same", Duration(0, 5)), ("same", Duration(0, 5)))
    await board.save_task(Task(title="same", tag=Tag.URGENT, duration=Duration(0, 5)), editing_index=1)

    tasks = board.list_tasks()
    assert [t.tag for t in tasks] == [Tag.PERSONAL, Tag.URGENT]


@pytest.mark.asyncio
async def test_reload_keeps_running_countdown(board: TaskBoard, ticker: ManualTicker) -> None:
    await _seed(board, ("a", Duration(0, 10)))
    await board.toggle(0)
    await ticker.tick(3)

    await board.load()
    assert board.status_at(0).running is True
    assert board.status_at(0).remaining == Duration(0, 7)
    await board.shutdown()


@pytest.mark.asyncio
async def test_restart_starts_idle(kv, notifier: FakeNotifier, ticker: ManualTicker) -> None:
    first = make_board(kv, notifier, ticker)
    await _seed(first, ("a", Duration(0, 10)))
    await first.toggle(0)
    await ticker.tick(3)
    await first.shutdown()

    second = make_board(kv, notifier, ManualTicker())
    await second.load()
    assert second.status_at(0) == TaskStatus.idle(Duration(0, 10))
    assert second.engine.running_ids() == []


@pytest.mark.asyncio
async def test_stale_index_rejected(board: TaskBoard) -> None:
    await _seed(board, ("a", Duration(0, 1)))
    with pytest.raises(IndexOutOfRangeError):
        await board.toggle(1)
    with pytest.raises(IndexOutOfRangeError):
        await board.delete_task(5)
    with pytest.raises(IndexOutOfRangeError):
        await board.save_task(Task(title="x"), editing_index=1)
    assert [t.title for t in board.list_tasks()] == ["a"]


@pytest.mark.asyncio
async def test_write_failure_surfaces_to_caller(notifier: FakeNotifier, ticker: ManualTicker) -> None:
    kv = FailingWriteStore()
    board = make_board(kv, notifier, ticker)
    await board.load()

    kv.fail_writes = True
    with pytest.raises(StorageWriteError):
        await board.save_task(Task(title="lost"))

    kv.fail_writes = False
    assert await board.load() == []


@pytest.mark.asyncio
async def test_failed_delete_keeps_countdown_live(notifier: FakeNotifier, ticker: ManualTicker) -> None:
    kv = FailingWriteStore()
    board = make_board(kv, notifier, ticker)
    await _seed(board, ("a", Duration(0, 5)))
    await board.toggle(0)
    await ticker.tick()

    kv.fail_writes = True
    with pytest.raises(StorageWriteError):
        await board.delete_task(0)
    kv.fail_writes = False

    task_id = board.list_tasks()[0].id
    assert board.status_at(0).running is True
    assert board.engine.running_ids() == [task_id]

    await ticker.tick(2)
    assert board.status_at(0).remaining == Duration(0, 2)
    await board.shutdown()


@pytest.mark.asyncio
async def test_load_store_written_in_index_keyed_format(notifier: FakeNotifier, ticker: ManualTicker) -> None:
    legacy_tasks = [
        {"title": "a", "description": "https://a.example", "tag": "Office", "time": "0h 5m", "priority": "High"},
        {"title": "b", "description": "https://b.example", "tag": "Personal", "time": "1h 0m", "priority": "Low"},
    ]
    legacy_statuses = {
        "0": {"doing": True, "originalTime": "0h 5m", "remainingTime": "0h 2m"},
        "1": {"doing": False, "originalTime": "1h 0m", "remainingTime": "1h 0m"},
    }
    kv = MemoryKeyValueStore(
        {TASKS_KEY: json.dumps(legacy_tasks), STATUSES_KEY: json.dumps(legacy_statuses)}
    )
    board = make_board(kv, notifier, ticker)

    tasks = await board.load()

    assert [t.title for t in tasks] == ["a", "b"]
    assert board.status_at(0) == TaskStatus.idle(Duration(0, 5))
    assert board.status_at(1) == TaskStatus.idle(Duration(1, 0))
    stored = json.loads(kv.data[STATUSES_KEY])
    assert set(stored) == {t.id for t in tasks}
