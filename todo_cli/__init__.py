"""
todo - Command-Line Task Manager
================================

Single-user task list stored in a local SQLite file.

Usage:
    from todo_cli import TaskManager, TaskStore

    with TaskStore("~/.todo.db") as store:
        store.initialize()
        manager = TaskManager(store)

        task_id = manager.add_task("Write report", due="2030-01-15", priority="high")
        manager.complete_task(task_id)

        for task in manager.list_tasks(include_completed=True):
            print(task.title, task.priority_label())
"""

from .errors import (
    TodoError,
    TaskValidationError,
    InvalidDateFormatError,
    DueDateNotInFutureError,
    TaskNotFoundError,
    StorageError
)

from .schema import Task, Priority, priority_label, utc_now
from .dates import parse_due_date
from .store import TaskStore
from .manager import TaskManager

__version__ = "1.0.0"
__all__ = [
    "TaskManager",
    "TaskStore",
    "Task",
    "Priority",
    "priority_label",
    "parse_due_date",
    "utc_now",
    "TodoError",
    "TaskValidationError",
    "InvalidDateFormatError",
    "DueDateNotInFutureError",
    "TaskNotFoundError",
    "StorageError"
]
