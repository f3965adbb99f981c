"""Tests for the SQLite task store."""

import itertools
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from todo_cli.errors import StorageError, TaskNotFoundError, TaskValidationError
from todo_cli.schema import Priority, Task
from todo_cli.store import TaskStore

from fakes import FakeClock


def make_task(store: TaskStore, title: str, priority: Priority = Priority.MEDIUM, **fields) -> int:
    return store.create(Task.create(title, priority=priority, clock=store._clock, **fields))


def assert_ordered(tasks):
    for a, b in zip(tasks, tasks[1:]):
        assert (a.priority_level, b.created_at) >= (b.priority_level, a.created_at)


class TestSchema:

    def test_initialize_is_idempotent(self, store):
        store.initialize()
        store.initialize()
        assert store.count() == 0

    def test_creates_file_and_parent_directories(self, tmp_path: Path):
        path = tmp_path / "nested" / "dir" / "todo.db"
        with TaskStore(path) as s:
            s.initialize()
        assert path.exists()

    def test_data_survives_reopen(self, db_path, clock):
        with TaskStore(db_path, clock=clock) as s:
            s.initialize()
            task_id = make_task(s, "persisted")

        with TaskStore(db_path, clock=clock) as s:
            s.initialize()
            assert s.get(task_id).title == "persisted"

    def test_closed_store_raises(self, db_path):
        s = TaskStore(db_path)
        s.close()
        s.close()
        with pytest.raises(StorageError, match="closed"):
            s.exists(1)

    def test_expands_home_directory(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        with TaskStore("~/todo.db") as s:
            s.initialize()
        assert s.db_path == tmp_path / "todo.db"
        assert (tmp_path / "todo.db").exists()

    def test_unwritable_location(self, tmp_path: Path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x")
        with pytest.raises(StorageError):
            TaskStore(blocker / "todo.db")


class TestCreate:

    def test_assigns_unique_ids(self, store):
        ids = [make_task(store, f"task {i}") for i in range(5)]
        assert len(set(ids)) == 5

    def test_writes_id_back_to_task(self, store):
        task = Task.create("x")
        task_id = store.create(task)
        assert task.id == task_id

    def test_rejects_task_with_id(self, store):
        task = Task.create("x")
        store.create(task)
        with pytest.raises(TaskValidationError, match="already has id"):
            store.create(task)
        assert store.count() == 1

    def test_persists_every_field(self, store, clock):
        due = datetime(2030, 1, 1, tzinfo=timezone.utc)
        task = Task.create("Pay rent", "flat 4", due, Priority.HIGH, clock=clock)
        stored = store.get(store.create(task))

        assert stored.title == "Pay rent"
        assert stored.description == "flat 4"
        assert stored.due_date == due
        assert stored.priority == Priority.HIGH
        assert stored.completed is False
        assert stored.created_at == task.created_at
        assert stored.updated_at == task.updated_at

    def test_ids_not_reused_after_delete(self, store):
        first = make_task(store, "a")
        store.delete(first)
        assert make_task(store, "b") != first


class TestList:

    def test_empty(self, store):
        assert store.list_tasks() == []
        assert store.list_tasks(include_completed=True, priority=Priority.HIGH) == []

    def test_high_before_low(self, store):
        a = make_task(store, "A", Priority.HIGH)
        b = make_task(store, "B", Priority.LOW)
        assert [t.id for t in store.list_tasks(include_completed=True)] == [a, b]

    def test_priority_desc_then_oldest_first(self, store):
        low_old = make_task(store, "low old", Priority.LOW)
        med_old = make_task(store, "med old", Priority.MEDIUM)
        high = make_task(store, "high", Priority.HIGH)
        med_new = make_task(store, "med new", Priority.MEDIUM)
        low_new = make_task(store, "low new", Priority.LOW)

        tasks = store.list_tasks(include_completed=True)
        assert [t.id for t in tasks] == [high, med_old, med_new, low_old, low_new]
        assert_ordered(tasks)

    def test_ordering_holds_for_all_pairs(self, store):
        for i, level in zip(range(12), itertools.cycle([Priority.LOW, Priority.HIGH, Priority.MEDIUM])):
            make_task(store, f"t{i}", level)
        assert_ordered(store.list_tasks(include_completed=True))

    def test_ordering_uses_created_at_not_id(self, store, clock):
        later = Task.create("later", clock=lambda: clock.now + timedelta(hours=1))
        earlier = Task.create("earlier", clock=clock)
        store.create(later)
        store.create(earlier)
        assert [t.title for t in store.list_tasks()] == ["earlier", "later"]

    def test_hides_completed_by_default(self, store):
        done = make_task(store, "done")
        todo = make_task(store, "todo")
        store.complete(done)

        assert [t.id for t in store.list_tasks()] == [todo]
        assert all(not t.completed for t in store.list_tasks(include_completed=False))
        assert {t.id for t in store.list_tasks(include_completed=True)} == {done, todo}

    def test_priority_filter(self, store):
        make_task(store, "low", Priority.LOW)
        high = make_task(store, "high", Priority.HIGH)
        assert [t.id for t in store.list_tasks(priority=Priority.HIGH)] == [high]
        assert [t.id for t in store.list_tasks(priority=2)] == [high]

    def test_priority_filter_with_completed(self, store):
        high_done = make_task(store, "high done", Priority.HIGH)
        store.complete(high_done)
        assert store.list_tasks(priority=Priority.HIGH) == []
        assert [t.id for t in store.list_tasks(True, Priority.HIGH)] == [high_done]


class TestGetExists:

    def test_missing_is_none(self, store):
        assert store.get(999) is None
        assert store.exists(999) is False

    def test_present(self, store):
        task_id = make_task(store, "here")
        assert store.exists(task_id) is True
        assert store.get(task_id).id == task_id

    def test_count(self, store):
        make_task(store, "a")
        store.complete(make_task(store, "b"))
        assert store.count() == 2
        assert store.count(include_completed=False) == 1


class TestUpdate:

    def test_overwrites_mutable_fields(self, store, clock):
        task_id = make_task(store, "old", Priority.LOW)
        original = store.get(task_id)

        due = datetime(2031, 6, 1, tzinfo=timezone.utc)
        changed = original.with_changes(
            title="new", description="more", due_date=due, priority=Priority.HIGH,
        )
        updated = store.update(task_id, changed)

        assert updated.title == "new"
        assert updated.description == "more"
        assert updated.due_date == due
        assert updated.priority == Priority.HIGH
        assert updated.created_at == original.created_at
        assert updated.updated_at > original.updated_at

    def test_updated_at_comes_from_store_clock(self, store, clock):
        task_id = make_task(store, "x")
        stale = store.get(task_id)
        clock.advance(days=3)
        expected = clock.now

        updated = store.update(task_id, stale)
        assert updated.updated_at == expected

    def test_missing_id_creates_nothing(self, store):
        with pytest.raises(TaskNotFoundError) as exc_info:
            store.update(42, Task.create("ghost"))
        assert exc_info.value.task_id == 42
        assert store.count() == 0
        assert store.get(42) is None


class TestComplete:

    def test_only_completion_and_timestamp_change(self, store):
        due = datetime(2030, 1, 1, tzinfo=timezone.utc)
        task_id = make_task(store, "finish", Priority.HIGH, description="d", due_date=due)
        before = store.get(task_id)

        store.complete(task_id)
        after = store.get(task_id)

        assert after.completed is True
        assert (after.title, after.description, after.due_date, after.priority) == (
            before.title, before.description, before.due_date, before.priority,
        )
        assert after.created_at == before.created_at
        assert after.updated_at > before.updated_at

    def test_missing_id(self, store):
        with pytest.raises(TaskNotFoundError):
            store.complete(7)


class TestDelete:

    def test_removes_permanently(self, store):
        task_id = make_task(store, "bye")
        store.delete(task_id)
        assert store.get(task_id) is None
        assert store.exists(task_id) is False

    def test_missing_id(self, store):
        with pytest.raises(TaskNotFoundError, match="Task with ID 3 not found"):
            store.delete(3)


class TestCorruptRows:

    def _corrupt(self, store, sql, *params):
        store.conn.execute(sql, params)
        store.conn.commit()

    def test_out_of_range_priority_reads_as_medium(self, store):
        task_id = make_task(store, "odd")
        self._corrupt(store, "UPDATE tasks SET priority = 7 WHERE id = ?", task_id)

        task = store.get(task_id)
        assert task.priority == 7
        assert task.priority_label() == "MEDIUM"

    def test_out_of_range_priority_sorts_and_filters_as_medium(self, store):
        low = make_task(store, "low", Priority.LOW)
        odd = make_task(store, "odd", Priority.LOW)
        high = make_task(store, "high", Priority.HIGH)
        self._corrupt(store, "UPDATE tasks SET priority = 7 WHERE id = ?", odd)

        assert [t.id for t in store.list_tasks()] == [high, odd, low]
        assert [t.id for t in store.list_tasks(priority=Priority.MEDIUM)] == [odd]

    def test_bad_timestamp_is_storage_error(self, store):
        task_id = make_task(store, "x")
        self._corrupt(store, "UPDATE tasks SET created_at = 'garbage' WHERE id = ?", task_id)
        with pytest.raises(StorageError):
            store.get(task_id)

    def test_empty_title_is_storage_error(self, store):
        task_id = make_task(store, "x")
        self._corrupt(store, "UPDATE tasks SET title = '' WHERE id = ?", task_id)
        with pytest.raises(StorageError, match="Corrupt task row"):
            store.list_tasks()

    def test_non_numeric_priority_is_storage_error(self, store):
        task_id = make_task(store, "x")
        self._corrupt(store, "UPDATE tasks SET priority = 'abc' WHERE id = ?", task_id)
        with pytest.raises(StorageError, match="Corrupt task row"):
            store.get(task_id)
        with pytest.raises(StorageError):
            store.list_tasks()


def test_fixed_clock_makes_timestamps_deterministic(db_path):
    clock = FakeClock(tick=timedelta(0))
    with TaskStore(db_path, clock=clock) as s:
        s.initialize()
        task_id = make_task(s, "x")
        s.complete(task_id)
        task = s.get(task_id)
    assert task.created_at == task.updated_at == clock.now
