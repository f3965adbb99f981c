from pathlib import Path

import pytest

from todo_cli.manager import TaskManager
from todo_cli.store import TaskStore

from fakes import FakeClock


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "todo.db"


@pytest.fixture
def store(db_path: Path, clock: FakeClock):
    with TaskStore(db_path, clock=clock) as s:
        s.initialize()
        yield s


@pytest.fixture
def manager(store: TaskStore, clock: FakeClock) -> TaskManager:
    return TaskManager(store, clock=clock)
