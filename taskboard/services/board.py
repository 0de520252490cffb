"""In-memory task board kept in step with the task store."""

import asyncio
import logging
from datetime import date

from ..db import TaskStore
from ..models import (
    DateRange,
    FilterCriteria,
    FilterStatus,
    PriorityFilter,
    SortCriteria,
    Task,
    TaskCreate,
    TaskStats,
    TaskUpdate,
)
from .views import compute_stats, filter_tasks, sort_tasks

logger = logging.getLogger(__name__)


class TaskBoard:
    """Owns the authoritative task list, the tag index and the view criteria.

    The task list is a cache of the store: it only changes after the store
    acknowledged a write, or on ``refresh``. Filter and sort setters are
    local and never touch the store.
    """

    def __init__(self, store: TaskStore) -> None:
        self.store = store
        self.tasks: list[Task] = []
        self.tags: list[str] = []
        self.filters = FilterCriteria()
        self.sort = SortCriteria()
        self.is_loading = False

    # ---- store sync ----

    async def refresh(self) -> bool:
        """Reload tasks and tags; keep the previous state unless both loads succeed."""
        self.is_loading = True
        try:
            tasks, tags = await asyncio.gather(self.store.list_tasks(), self.store.list_tags())
        finally:
            self.is_loading = False
        if tasks is None or tags is None:
            logger.warning("Refresh failed, keeping %d cached tasks", len(self.tasks))
            return False
        self.tasks, self.tags = tasks, tags
        logger.info("Board refreshed tasks=%d tags=%d", len(tasks), len(tags))
        return True

    async def refresh_tags(self) -> bool:
        tags = await self.store.list_tags()
        if tags is None:
            return False
        self.tags = tags
        return True

    # ---- mutations ----

    async def add(self, draft: TaskCreate) -> Task | None:
        task = await self.store.create_task(draft)
        if task is None:
            return None
        self.tasks.insert(0, task)
        await self.refresh_tags()
        return task

    async def edit(self, task_id: str, changes: TaskUpdate) -> Task | None:
        task = await self.store.update_task(task_id, changes)
        if task is None:
            return None
        self._replace(task)
        await self.refresh_tags()
        return task

    async def remove(self, task_id: str) -> bool:
        if not await self.store.delete_task(task_id):
            return False
        self.tasks = [task for task in self.tasks if task.id != task_id]
        await self.refresh_tags()
        return True

    async def toggle(self, task_id: str) -> Task | None:
        # Tags cannot change on toggle, so the tag index is left alone.
        task = await self.store.toggle_task(task_id)
        if task is None:
            return None
        self._replace(task)
        return task

    def _replace(self, task: Task) -> None:
        self.tasks = [task if current.id == task.id else current for current in self.tasks]

    # ---- filters & sort ----

    def update_filters(self, **changes) -> FilterCriteria:
        self.filters = FilterCriteria.model_validate({**self.filters.model_dump(), **changes})
        return self.filters

    def set_search_query(self, query: str) -> FilterCriteria:
        return self.update_filters(search_query=query)

    def set_status_filter(self, status: FilterStatus) -> FilterCriteria:
        return self.update_filters(status=status)

    def set_priority_filter(self, priority: PriorityFilter) -> FilterCriteria:
        return self.update_filters(priority=priority)

    def set_tags_filter(self, tags: list[str]) -> FilterCriteria:
        return self.update_filters(tags=tags)

    def set_date_range(self, start: date | None = None, end: date | None = None) -> FilterCriteria:
        return self.update_filters(date_range=DateRange(start=start, end=end))

    def reset_filters(self) -> FilterCriteria:
        self.filters = FilterCriteria()
        return self.filters

    def update_sort(self, **changes) -> SortCriteria:
        self.sort = SortCriteria.model_validate({**self.sort.model_dump(), **changes})
        return self.sort

    # ---- reads ----

    def get(self, task_id: str) -> Task | None:
        return next((task for task in self.tasks if task.id == task_id), None)

    @property
    def visible_tasks(self) -> list[Task]:
        return sort_tasks(filter_tasks(self.tasks, self.filters), self.sort)

    @property
    def stats(self) -> TaskStats:
        return compute_stats(self.tasks)
