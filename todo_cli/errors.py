"""
todo - Error Taxonomy
=====================
Every failure the core reports is one of three kinds:

    TaskValidationError   bad input (empty title, bad/past due date)
    TaskNotFoundError     no task with the requested id
    StorageError          the SQLite file or engine failed

The CLI maps each kind to its own exit code without reading message text.
"""

from typing import Optional


class TodoError(Exception):
    """Base class for all todo failures"""


class TaskValidationError(TodoError):
    """Input rejected before anything was written"""


class InvalidDateFormatError(TaskValidationError):
    """Due date is neither YYYY-MM-DD nor RFC 3339"""

    def __init__(self, text: str):
        super().__init__("Invalid date format. Please use YYYY-MM-DD or RFC3339 format")
        self.text = text


class DueDateNotInFutureError(TaskValidationError):
    """Due date resolves to an instant that is not after now"""

    def __init__(self, text: str):
        super().__init__("Due date must be in the future")
        self.text = text


class TaskNotFoundError(TodoError):
    """No task with the given id"""

    def __init__(self, task_id: int, message: Optional[str] = None):
        super().__init__(message or f"Task with ID {task_id} not found")
        self.task_id = task_id


class StorageError(TodoError):
    """Underlying store failed (I/O, corrupt data, engine error)"""
