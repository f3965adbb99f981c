"""
todo - Task Manager
===================
The boundary the command line talks to. Takes user-level input (date
strings, priority names, optional field overrides), validates it, checks
that ids exist, and drives the TaskStore.
"""

import logging
from datetime import datetime
from typing import List, Optional

from .dates import parse_due_date
from .errors import TaskNotFoundError
from .schema import Clock, Priority, PriorityLike, Task, coerce_priority, utc_now
from .store import TaskStore

logger = logging.getLogger("todo")


class TaskManager:
    """
    Task operations for one store.

    Key behaviour:
    - Due dates arrive as text and must be in the future
    - Every mutation first checks the id, so callers get a clear
      "not found" before anything is written
    - The clock is shared with the store for deterministic tests
    """

    def __init__(self, store: TaskStore, clock: Clock = utc_now):
        self.store = store
        self._clock = clock

    # ========================================
    # HELPERS
    # ========================================

    def _parse_due(self, due: Optional[str]) -> Optional[datetime]:
        if due is None:
            return None
        return parse_due_date(due, now=self._clock())

    def _require(self, task_id: int) -> None:
        if not self.store.exists(task_id):
            logger.warning(f"Task {task_id} not found")
            raise TaskNotFoundError(task_id)

    # ========================================
    # QUERIES
    # ========================================

    def list_tasks(
        self,
        include_completed: bool = False,
        priority: Optional[PriorityLike] = None,
    ) -> List[Task]:
        level = coerce_priority(priority) if priority is not None else None
        return self.store.list_tasks(
            include_completed=include_completed,
            priority=int(level) if level is not None else None,
        )

    def get_task(self, task_id: int) -> Optional[Task]:
        return self.store.get(task_id)

    def show_task(self, task_id: int) -> Task:
        """Like get_task, but a missing id is an error"""
        task = self.store.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def task_exists(self, task_id: int) -> bool:
        return self.store.exists(task_id)

    # ========================================
    # MUTATIONS
    # ========================================

    def add_task(
        self,
        title: str,
        description: Optional[str] = None,
        due: Optional[str] = None,
        priority: PriorityLike = Priority.MEDIUM,
    ) -> int:
        """Validate and store a new task; returns its id"""
        task = Task.create(
            title=title,
            description=description,
            due_date=self._parse_due(due),
            priority=priority,
            clock=self._clock,
        )
        task_id = self.store.create(task)
        logger.info(f"✅ Added task {task_id}: {task.title} [{task.priority_label()}]")
        return task_id

    def update_task(
        self,
        task_id: int,
        title: Optional[str] = None,
        description: Optional[str] = None,
        due: Optional[str] = None,
        priority: Optional[PriorityLike] = None,
    ) -> Task:
        """
        Change only the fields that were given.

        All input is validated before the write, so a bad date or an empty
        title leaves the stored task untouched.
        """
        current = self.store.get(task_id)
        if current is None:
            logger.warning(f"Task {task_id} not found")
            raise TaskNotFoundError(task_id)

        changes = {}
        if title is not None:
            changes["title"] = title
        if description is not None:
            changes["description"] = description
        if due is not None:
            changes["due_date"] = self._parse_due(due)
        if priority is not None:
            changes["priority"] = int(coerce_priority(priority))

        updated = self.store.update(task_id, current.with_changes(**changes))
        logger.info(f"✏️ Updated task {task_id}: {', '.join(changes) or 'timestamp only'}")
        return updated

    def complete_task(self, task_id: int) -> None:
        self._require(task_id)
        self.store.complete(task_id)
        logger.info(f"✅ Completed task {task_id}")

    def delete_task(self, task_id: int) -> None:
        self._require(task_id)
        self.store.delete(task_id)
        logger.info(f"🗑️ Deleted task {task_id}")
