"""
todo - Task Store
=================
SQLite persistence for tasks. One connection per TaskStore; open it once
per process and close it on the way out:

    with TaskStore(path) as store:
        store.initialize()
        task_id = store.create(Task.create("Write report"))

Each operation commits on its own. Lookups return None for a missing id,
mutations raise TaskNotFoundError.
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Union

from pydantic import ValidationError

from .dates import from_storage, to_storage
from .errors import StorageError, TaskNotFoundError, TaskValidationError
from .schema import Clock, Priority, Task, describe_validation_error, utc_now

logger = logging.getLogger("todo.store")

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS tasks (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    title       TEXT NOT NULL,
    description TEXT,
    due_date    TEXT,       -- RFC 3339, UTC (nullable)
    priority    INTEGER NOT NULL DEFAULT 1,
    completed   BOOLEAN NOT NULL DEFAULT 0,
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_tasks_completed_priority ON tasks(completed, priority);
"""

# Out-of-range ordinals sort and filter as MEDIUM, same as they display.
EFFECTIVE_PRIORITY_SQL = (
    f"CASE WHEN priority IN ({Priority.LOW.value}, {Priority.MEDIUM.value}, {Priority.HIGH.value}) "
    f"THEN priority ELSE {Priority.MEDIUM.value} END"
)

COLUMNS = "id, title, description, due_date, priority, completed, created_at, updated_at"


class TaskStore:
    """
    Durable table of tasks.

    All access is by primary key or by filtered scan. The clock is used for
    every updated_at refresh, so tests can pin time.
    """

    def __init__(self, db_path: Union[str, Path], clock: Clock = utc_now):
        self.db_path = Path(db_path).expanduser()
        self._clock = clock
        self._conn: Optional[sqlite3.Connection] = None

        with self._translate_errors("open"):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        self._conn = conn
        logger.debug(f"Opened task store: {self.db_path}")

    def __enter__(self) -> "TaskStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        logger.debug(f"Closed task store: {self.db_path}")

    # ========================================
    # LOW-LEVEL HELPERS
    # ========================================

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageError(f"Task store is closed: {self.db_path}")
        return self._conn

    @contextmanager
    def _translate_errors(self, action: str) -> Iterator[None]:
        """Re-raise engine and filesystem failures as StorageError"""
        try:
            yield
        except (sqlite3.Error, OSError) as e:
            raise StorageError(f"Could not {action} task database {self.db_path}: {e}") from e

    @contextmanager
    def _transaction(self, action: str) -> Iterator[sqlite3.Connection]:
        conn = self.conn
        with self._translate_errors(action):
            try:
                yield conn
                conn.commit()
            except BaseException:
                conn.rollback()
                raise

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        due_text = row["due_date"]
        try:
            return Task(
                id=int(row["id"]),
                title=str(row["title"]),
                description=row["description"],
                due_date=from_storage(due_text) if due_text else None,
                priority=int(row["priority"]),
                completed=bool(row["completed"]),
                created_at=from_storage(str(row["created_at"])),
                updated_at=from_storage(str(row["updated_at"])),
            )
        except ValidationError as e:
            raise StorageError(
                f"Corrupt task row {row['id']}: {describe_validation_error(e)}"
            ) from e
        except (TypeError, ValueError) as e:
            raise StorageError(f"Corrupt task row {row['id']}: {e}") from e

    # ========================================
    # SCHEMA
    # ========================================

    def initialize(self) -> None:
        """Create the tasks table if missing; safe on every startup"""
        with self._transaction("initialize") as conn:
            conn.executescript(SCHEMA_SQL)
        logger.debug("Schema ready")

    # ========================================
    # CRUD OPERATIONS
    # ========================================

    def create(self, task: Task) -> int:
        """Insert a new task and return its id (also written to task.id)"""
        if task.id is not None:
            raise TaskValidationError(f"Task already has id {task.id}; use update()")

        with self._transaction("insert into") as conn:
            cur = conn.execute(
                """
                INSERT INTO tasks (title, description, due_date, priority, completed, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    task.title,
                    task.description,
                    to_storage(task.due_date) if task.due_date else None,
                    int(task.priority),
                    task.completed,
                    to_storage(task.created_at),
                    to_storage(task.updated_at),
                ),
            )
            task_id = int(cur.lastrowid)

        task.id = task_id
        logger.info(f"Created task {task_id}: {task.title}")
        return task_id

    def list_tasks(
        self,
        include_completed: bool = False,
        priority: Optional[int] = None,
    ) -> List[Task]:
        """
        Matching tasks, highest priority first, oldest first within a priority.

        include_completed=False hides completed tasks; priority keeps only
        tasks at exactly that level.
        """
        conditions = []
        params: List[int] = []
        if not include_completed:
            conditions.append("completed = 0")
        if priority is not None:
            conditions.append(f"{EFFECTIVE_PRIORITY_SQL} = ?")
            params.append(int(priority))

        query = f"SELECT {COLUMNS} FROM tasks"
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += f" ORDER BY {EFFECTIVE_PRIORITY_SQL} DESC, created_at ASC, id ASC"

        with self._translate_errors("read"):
            rows = self.conn.execute(query, params).fetchall()
        tasks = [self._row_to_task(r) for r in rows]
        logger.debug(
            f"Listed {len(tasks)} tasks (include_completed={include_completed}, priority={priority})"
        )
        return tasks

    def get(self, task_id: int) -> Optional[Task]:
        with self._translate_errors("read"):
            row = self.conn.execute(
                f"SELECT {COLUMNS} FROM tasks WHERE id = ?", (task_id,)
            ).fetchone()
        return self._row_to_task(row) if row else None

    def exists(self, task_id: int) -> bool:
        with self._translate_errors("read"):
            row = self.conn.execute(
                "SELECT COUNT(*) FROM tasks WHERE id = ?", (task_id,)
            ).fetchone()
        return row[0] > 0

    def count(self, include_completed: bool = True) -> int:
        query = "SELECT COUNT(*) FROM tasks"
        if not include_completed:
            query += " WHERE completed = 0"
        with self._translate_errors("read"):
            return int(self.conn.execute(query).fetchone()[0])

    def update(self, task_id: int, task: Task) -> Task:
        """
        Overwrite every mutable field of task_id with the values in task.

        updated_at is always set from the store clock, whatever the caller
        passed. id and created_at are never touched.
        """
        now = self._clock()
        with self._transaction("update") as conn:
            cur = conn.execute(
                """
                UPDATE tasks
                SET title = ?, description = ?, due_date = ?, priority = ?,
                    completed = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    task.title,
                    task.description,
                    to_storage(task.due_date) if task.due_date else None,
                    int(task.priority),
                    task.completed,
                    to_storage(now),
                    task_id,
                ),
            )
            if cur.rowcount == 0:
                raise TaskNotFoundError(task_id)

        logger.info(f"Updated task {task_id}")
        stored = self.get(task_id)
        if stored is None:
            raise TaskNotFoundError(task_id)
        return stored

    def complete(self, task_id: int) -> None:
        """Mark done and refresh updated_at; no other field changes"""
        now = self._clock()
        with self._transaction("update") as conn:
            cur = conn.execute(
                "UPDATE tasks SET completed = 1, updated_at = ? WHERE id = ?",
                (to_storage(now), task_id),
            )
            if cur.rowcount == 0:
                raise TaskNotFoundError(task_id)
        logger.info(f"Completed task {task_id}")

    def delete(self, task_id: int) -> None:
        """Remove permanently. Deleting a missing id is an error, not a no-op."""
        with self._transaction("delete from") as conn:
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            if cur.rowcount == 0:
                raise TaskNotFoundError(task_id)
        logger.info(f"Deleted task {task_id}")
