"""Pydantic models for tasks."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator


class Priority(str, Enum):
    """Task priority enumeration."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


PRIORITY_RANK = {Priority.HIGH: 3, Priority.MEDIUM: 2, Priority.LOW: 1}


def priority_rank(priority: Priority) -> int:
    """Numeric weight of a priority, used only for ordering."""
    return PRIORITY_RANK[priority]


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes; aware ones are left as they are."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def clean_tags(tags: list[str]) -> list[str]:
    """Strip tags, drop blanks and duplicates, keep first-seen order."""
    seen: dict[str, None] = {}
    for tag in tags:
        tag = tag.strip()
        if tag:
            seen.setdefault(tag, None)
    return list(seen)


class Task(BaseModel):
    """A task as acknowledged by the store."""

    id: str
    title: str
    description: str = ""
    completed: bool = False
    priority: Priority = Priority.MEDIUM
    tags: list[str] = Field(default_factory=list)
    due_date: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @field_validator("due_date", "created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)


class TaskCreate(BaseModel):
    """Request model for creating a task."""

    title: str = Field(..., min_length=1, max_length=500)
    description: str = ""
    priority: Priority = Priority.MEDIUM
    tags: list[str] = Field(default_factory=list)
    due_date: datetime | None = None

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, value: list[str]) -> list[str]:
        return clean_tags(value)

    @field_validator("due_date")
    @classmethod
    def ensure_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)


class TaskUpdate(BaseModel):
    """Request model for a partial task update.

    Only fields present in ``model_fields_set`` are written. ``due_date`` and
    ``description`` may be explicitly set to ``None`` to clear them; the
    other fields cannot be cleared.
    """

    title: str | None = Field(None, min_length=1, max_length=500)
    description: str | None = None
    completed: bool | None = None
    priority: Priority | None = None
    tags: list[str] | None = None
    due_date: datetime | None = None

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, value: list[str] | None) -> list[str] | None:
        return None if value is None else clean_tags(value)

    @field_validator("due_date")
    @classmethod
    def ensure_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)

    @model_validator(mode="after")
    def check_fields(self) -> "TaskUpdate":
        if not self.model_fields_set:
            raise ValueError("at least one field must be provided")
        for name in ("title", "completed", "priority", "tags"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be cleared")
        return self

    def changes(self) -> dict:
        """JSON-ready dict of the provided fields, explicit nulls included."""
        return self.model_dump(mode="json", exclude_unset=True)


def is_overdue(task: Task, now: datetime | None = None) -> bool:
    """True when an open task's due date lies before ``now``."""
    if task.due_date is None or task.completed:
        return False
    now = as_utc(now) if now is not None else datetime.now(timezone.utc)
    return task.due_date < now


class TaskListResponse(BaseModel):
    """Response model for task list."""

    tasks: list[Task]
    count: int
    is_loading: bool = False
