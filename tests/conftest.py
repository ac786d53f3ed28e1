# tests/conftest.py

from __future__ import annotations

from types import SimpleNamespace

import pytest

from task_timer.core.board import TaskBoard
from task_timer.core.state import AppState
from task_timer.storage.kv_store import MemoryKeyValueStore
from task_timer.tasks.countdown import CountdownEngine
from task_timer.tasks.status_table import StatusTable
from task_timer.tasks.task_store import TaskStore

from .fakes import FakeNotifier, ManualTicker


@pytest.fixture()
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def ticker() -> ManualTicker:
    return ManualTicker()


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


def make_board(kv, notifier, ticker: ManualTicker) -> TaskBoard:
    table = StatusTable(kv)
    engine = CountdownEngine(table, notifier, tick_seconds=60.0, sleep=ticker.sleep)
    return TaskBoard(TaskStore(kv), table, engine)


@pytest.fixture()
def board(kv, notifier, ticker) -> TaskBoard:
    """
    Board wired with an in-memory store and a manual ticker.

    Real TaskStore/StatusTable/CountdownEngine: their interplay is what we test.
    """
    return make_board(kv, notifier, ticker)


@pytest.fixture()
def state(kv, notifier, board) -> AppState:
    settings = SimpleNamespace(tick_seconds=60.0, app_name="task_timer")
    return AppState(settings=settings, kv=kv, notifier=notifier, board=board)
