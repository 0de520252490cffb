"""Filtering, sorting and statistics over a task list.

All functions are pure: they never mutate their input and always return a
new list (or model).
"""

import unicodedata
from typing import Iterable

from ..models import (
    FilterCriteria,
    FilterStatus,
    PriorityFilter,
    SortBy,
    SortCriteria,
    SortOrder,
    Task,
    TaskStats,
    priority_rank,
)


def _matches(task: Task, criteria: FilterCriteria) -> bool:
    if criteria.status is FilterStatus.ACTIVE and task.completed:
        return False
    if criteria.status is FilterStatus.COMPLETED and not task.completed:
        return False

    if criteria.priority is not PriorityFilter.ALL and task.priority.value != criteria.priority.value:
        return False

    if criteria.tags and not any(tag in task.tags for tag in criteria.tags):
        return False

    if criteria.search_query:
        query = criteria.search_query.lower()
        if not (
            query in task.title.lower()
            or query in task.description.lower()
            or any(query in tag.lower() for tag in task.tags)
        ):
            return False

    date_range = criteria.date_range
    if date_range.is_set:
        if task.due_date is None:
            return False
        due_day = task.due_date.date()
        if date_range.start is not None and due_day < date_range.start:
            return False
        if date_range.end is not None and due_day > date_range.end:
            return False

    return True


def filter_tasks(tasks: Iterable[Task], criteria: FilterCriteria) -> list[Task]:
    """Tasks passing every filter dimension, in input order."""
    return [task for task in tasks if _matches(task, criteria)]


def title_key(title: str) -> tuple[str, str, str]:
    """Collation key: base letters first, then accents, then lowercase before uppercase."""
    folded = title.casefold()
    base = "".join(
        ch for ch in unicodedata.normalize("NFKD", folded) if not unicodedata.combining(ch)
    )
    return base, folded, title.swapcase()


SORT_KEYS = {
    SortBy.TITLE: lambda task: title_key(task.title),
    SortBy.CREATED_AT: lambda task: task.created_at,
    SortBy.DUE_DATE: lambda task: task.due_date,
    SortBy.PRIORITY: lambda task: priority_rank(task.priority),
}


def sort_tasks(tasks: Iterable[Task], criteria: SortCriteria) -> list[Task]:
    """Stable sort of ``tasks`` by ``criteria``.

    Tasks without a due date always come last when sorting by due date,
    whichever the direction.
    """
    tasks = list(tasks)
    reverse = criteria.order is SortOrder.DESC
    key = SORT_KEYS[criteria.by]

    if criteria.by is SortBy.DUE_DATE:
        dated = [task for task in tasks if task.due_date is not None]
        undated = [task for task in tasks if task.due_date is None]
        return sorted(dated, key=key, reverse=reverse) + undated

    return sorted(tasks, key=key, reverse=reverse)


def compute_stats(tasks: Iterable[Task]) -> TaskStats:
    """Totals and completion percentage of ``tasks``."""
    total = completed = 0
    for task in tasks:
        total += 1
        completed += task.completed
    return TaskStats(
        total=total,
        active=total - completed,
        completed=completed,
        completion_rate=completed / total * 100 if total else 0.0,
    )
