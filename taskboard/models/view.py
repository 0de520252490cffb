"""Pydantic models for list filtering, sorting and statistics."""

from datetime import date
from enum import Enum

from pydantic import BaseModel, Field

from .task import Priority


class FilterStatus(str, Enum):
    """Completion state filter."""

    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"


class PriorityFilter(str, Enum):
    """Priority filter; ``all`` disables it."""

    ALL = "all"
    LOW = Priority.LOW.value
    MEDIUM = Priority.MEDIUM.value
    HIGH = Priority.HIGH.value


class DateRange(BaseModel):
    """Inclusive due-date window; either bound may be open."""

    start: date | None = None
    end: date | None = None

    @property
    def is_set(self) -> bool:
        return self.start is not None or self.end is not None


class FilterCriteria(BaseModel):
    """Active predicates narrowing the visible task list."""

    status: FilterStatus = FilterStatus.ALL
    priority: PriorityFilter = PriorityFilter.ALL
    tags: list[str] = Field(default_factory=list)
    search_query: str = ""
    date_range: DateRange = Field(default_factory=DateRange)


class FilterUpdate(BaseModel):
    """Request model for changing some filter fields."""

    status: FilterStatus | None = None
    priority: PriorityFilter | None = None
    tags: list[str] | None = None
    search_query: str | None = None
    date_range: DateRange | None = None


class SortBy(str, Enum):
    """Sort key."""

    CREATED_AT = "created_at"
    DUE_DATE = "due_date"
    PRIORITY = "priority"
    TITLE = "title"


class SortOrder(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


class SortCriteria(BaseModel):
    """Key and direction of the visible task list."""

    by: SortBy = SortBy.CREATED_AT
    order: SortOrder = SortOrder.DESC


class SortUpdate(BaseModel):
    """Request model for changing the sort key and/or direction."""

    by: SortBy | None = None
    order: SortOrder | None = None


class TaskStats(BaseModel):
    """Completion statistics over the whole collection."""

    total: int
    active: int
    completed: int
    completion_rate: float


class TagListResponse(BaseModel):
    """Response model for the tag index."""

    tags: list[str]
