"""
todo - Rendering
================
Text views of tasks for the terminal. Pure functions of a Task (and "now"
for the overdue check); color is opt-in so the same views work in pipes,
tests and JSON-producing callers.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from .dates import format_date, format_timestamp
from .schema import Priority, Task, utc_now

RESET = "\033[0m"
RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
WHITE = "\033[37m"

PRIORITY_COLOR = {
    Priority.LOW: BLUE,
    Priority.MEDIUM: YELLOW,
    Priority.HIGH: RED,
}

RULE = "─" * 80
NO_DUE_DATE = "No due date"


def paint(text: str, code: str, enabled: bool) -> str:
    return f"{code}{text}{RESET}" if enabled else text


def priority_text(task: Task, color: bool = False) -> str:
    level = task.priority_level
    return paint(level.label, PRIORITY_COLOR[level], color)


def status_text(task: Task, color: bool = False) -> str:
    if task.completed:
        return paint("✓ COMPLETED", GREEN, color)
    return paint("○ PENDING", WHITE, color)


def due_text(task: Task, now: Optional[datetime] = None, color: bool = False) -> str:
    text = format_date(task.due_date) if task.due_date else NO_DUE_DATE
    return paint(text, RED if task.is_overdue(now) else WHITE, color)


def summary_line(task: Task, now: Optional[datetime] = None, color: bool = False) -> str:
    """One line: [id] title PRIORITY STATUS due"""
    return " ".join([
        f"[{task.id or 0}]",
        task.title,
        priority_text(task, color),
        status_text(task, color),
        due_text(task, now, color),
    ])


def detail_view(task: Task, now: Optional[datetime] = None, color: bool = False) -> str:
    lines = [
        f"Task #{task.id or 0}: {task.title}",
        f"Priority: {priority_text(task, color)}",
        f"Status: {status_text(task, color)}",
        f"Due: {due_text(task, now, color)}",
    ]
    if task.description:
        lines.append(f"Description: {task.description}")
    lines.extend([
        f"Created: {format_timestamp(task.created_at)}",
        f"Updated: {format_timestamp(task.updated_at)}",
    ])
    return "\n".join(lines)


def list_report(tasks: Iterable[Task], now: Optional[datetime] = None, color: bool = False) -> str:
    tasks = list(tasks)
    if not tasks:
        return "📝 No tasks found."

    now = now or utc_now()
    lines = ["📋 Your tasks:", RULE]
    lines.extend(summary_line(t, now, color) for t in tasks)
    lines.extend([RULE, f"Total: {len(tasks)} tasks"])
    return "\n".join(lines)


def detail_report(task: Task, now: Optional[datetime] = None, color: bool = False) -> str:
    return "\n".join(["📋 Task Details:", RULE, detail_view(task, now, color), RULE])


def task_to_dict(task: Task, now: Optional[datetime] = None) -> Dict[str, Any]:
    data = task.model_dump(mode="json")
    data["priority_label"] = task.priority_label()
    data["overdue"] = task.is_overdue(now)
    return data


def tasks_to_dicts(tasks: Iterable[Task], now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    now = now or utc_now()
    return [task_to_dict(t, now) for t in tasks]
