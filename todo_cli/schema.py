"""
todo - Task Schema Definition
=============================
The single entity of the system and the priority scale it uses.

A Task is pure data: rendering lives in todo_cli.render, persistence in
todo_cli.store. The only impurity is timestamp capture, and that goes
through an injectable clock.
"""

from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Callable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import TaskValidationError

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock: the current instant, timezone-aware UTC"""
    return datetime.now(timezone.utc)


class Priority(IntEnum):
    """Task priority levels, stored as their ordinal"""
    LOW = 0
    MEDIUM = 1
    HIGH = 2

    @property
    def label(self) -> str:
        return self.name

    @classmethod
    def from_ordinal(cls, value: int) -> "Priority":
        """
        Map a stored ordinal back to a level.

        Anything outside 0..2 (e.g. a hand-edited database) is read as
        MEDIUM instead of raising.
        """
        try:
            return cls(value)
        except ValueError:
            return cls.MEDIUM

    @classmethod
    def from_name(cls, name: str) -> "Priority":
        try:
            return cls[name.strip().upper()]
        except KeyError:
            choices = ", ".join(p.name.lower() for p in cls)
            raise TaskValidationError(f"Invalid priority '{name}'. Choose one of: {choices}") from None


PriorityLike = Union[Priority, int, str]


def coerce_priority(value: PriorityLike) -> Priority:
    """Accept a Priority, a name ("high") or an ordinal (2)"""
    if isinstance(value, Priority):
        return value
    if isinstance(value, str):
        return Priority.from_name(value)
    if value not in (p.value for p in Priority):
        raise TaskValidationError(f"Invalid priority ordinal: {value}")
    return Priority(value)


def priority_label(ordinal: int) -> str:
    """Ordinal -> "LOW" / "MEDIUM" / "HIGH"; unknown ordinals fall back to "MEDIUM"."""
    return Priority.from_ordinal(ordinal).label


def describe_validation_error(exc: ValidationError) -> str:
    """First pydantic error as a plain sentence"""
    err = exc.errors()[0]
    cause = err.get("ctx", {}).get("error")
    if cause is not None:
        return str(cause)
    field = ".".join(str(part) for part in err.get("loc", ()))
    return f"{field}: {err['msg']}" if field else err["msg"]


class Task(BaseModel):
    """Individual task definition"""
    model_config = ConfigDict(validate_assignment=True)

    id: Optional[int] = None                 # assigned by the store
    title: str
    description: Optional[str] = None
    due_date: Optional[datetime] = None      # UTC instant
    priority: int = Priority.MEDIUM.value    # raw ordinal, see priority_level
    completed: bool = False

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("title")
    @classmethod
    def _title_not_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Task title cannot be empty")
        return value

    @field_validator("priority", mode="before")
    @classmethod
    def _plain_ordinal(cls, value: Any) -> Any:
        return int(value) if isinstance(value, Priority) else value

    @field_validator("due_date", "created_at", "updated_at")
    @classmethod
    def _as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @model_validator(mode="after")
    def _updated_not_before_created(self) -> "Task":
        if self.updated_at < self.created_at:
            raise ValueError("updated_at cannot be earlier than created_at")
        return self

    @classmethod
    def create(
        cls,
        title: str,
        description: Optional[str] = None,
        due_date: Optional[datetime] = None,
        priority: PriorityLike = Priority.MEDIUM,
        clock: Clock = utc_now,
    ) -> "Task":
        """New unsaved task: no id, not completed, both timestamps = clock()"""
        now = clock()
        try:
            return cls(
                title=title,
                description=description,
                due_date=due_date,
                priority=coerce_priority(priority),
                created_at=now,
                updated_at=now,
            )
        except ValidationError as e:
            raise TaskValidationError(describe_validation_error(e)) from e

    def with_changes(self, **changes: Any) -> "Task":
        """Validated copy with some fields replaced; the original is untouched"""
        data = self.model_dump()
        data.update(changes)
        try:
            return Task.model_validate(data)
        except ValidationError as e:
            raise TaskValidationError(describe_validation_error(e)) from e

    @property
    def priority_level(self) -> Priority:
        return Priority.from_ordinal(self.priority)

    def priority_label(self) -> str:
        return priority_label(self.priority)

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        """Incomplete, has a due date, and that date is strictly in the past"""
        if self.completed or self.due_date is None:
            return False
        return self.due_date < (now or utc_now())
