"""Models package."""

from .task import (
    Priority,
    Task,
    TaskCreate,
    TaskListResponse,
    TaskUpdate,
    is_overdue,
    priority_rank,
)
from .view import (
    DateRange,
    FilterCriteria,
    FilterStatus,
    FilterUpdate,
    PriorityFilter,
    SortBy,
    SortCriteria,
    SortOrder,
    SortUpdate,
    TagListResponse,
    TaskStats,
)

__all__ = [
    "Priority",
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "TaskListResponse",
    "is_overdue",
    "priority_rank",
    "FilterStatus",
    "PriorityFilter",
    "DateRange",
    "FilterCriteria",
    "FilterUpdate",
    "SortBy",
    "SortOrder",
    "SortCriteria",
    "SortUpdate",
    "TaskStats",
    "TagListResponse",
]
