"""Async task store: maps table rows to ``Task`` models and contains store failures."""

import asyncio
import logging
import sqlite3
from typing import Any, Callable, Protocol, TypeVar

import httpx
from postgrest.exceptions import APIError

from ..models import Priority, Task, TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)

T = TypeVar("T")

STORE_ERRORS = (APIError, httpx.HTTPError, sqlite3.Error, TimeoutError, LookupError, ValueError)


class TaskTable(Protocol):
    """Synchronous row operations a task backend provides."""

    def select_all(self) -> list[dict]: ...

    def insert(self, row: dict[str, Any]) -> dict: ...

    def update(self, task_id: str, fields: dict[str, Any]) -> dict | None: ...

    def delete(self, task_id: str) -> bool: ...

    def select_completed(self, task_id: str) -> bool | None: ...

    def select_tags(self) -> list[list[str] | None]: ...


def row_to_task(row: dict[str, Any]) -> Task:
    """Build a Task from a store row, defaulting absent optional columns."""
    return Task(
        id=str(row["id"]),
        title=row["title"],
        description=row.get("description") or "",
        completed=bool(row.get("completed")),
        priority=Priority(row.get("priority") or Priority.MEDIUM.value),
        tags=list(row.get("tags") or []),
        due_date=row.get("due_date") or None,
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def draft_to_row(draft: TaskCreate) -> dict[str, Any]:
    """Insert payload for a new task."""
    row = draft.model_dump(mode="json")
    row["completed"] = False
    return row


class TaskStore:
    """Stateless adapter between ``TaskBoard`` and a ``TaskTable``.

    Every public method catches store errors and timeouts, logs them and
    returns ``None`` (or ``False``) instead of raising.
    """

    def __init__(self, table: TaskTable, timeout: float = 10.0) -> None:
        self.table = table
        self.timeout = timeout

    async def _call(self, func: Callable[..., T], *args: Any) -> T:
        return await asyncio.wait_for(asyncio.to_thread(func, *args), self.timeout)

    async def list_tasks(self) -> list[Task] | None:
        """All tasks, newest first."""
        try:
            rows = await self._call(self.table.select_all)
            return [row_to_task(row) for row in rows]
        except STORE_ERRORS:
            logger.exception("Error loading tasks")
            return None

    async def create_task(self, draft: TaskCreate) -> Task | None:
        """Insert a new, not yet completed task."""
        try:
            row = await self._call(self.table.insert, draft_to_row(draft))
            task = row_to_task(row)
        except STORE_ERRORS:
            logger.exception("Error creating task %r", draft.title)
            return None
        logger.debug("Task created id=%s", task.id)
        return task

    async def update_task(self, task_id: str, changes: TaskUpdate) -> Task | None:
        """Write the fields set on ``changes``; explicit ``None`` clears a column."""
        try:
            row = await self._call(self.table.update, task_id, changes.changes())
            task = row_to_task(row) if row is not None else None
        except STORE_ERRORS:
            logger.exception("Error updating task %s", task_id)
            return None
        if task is None:
            logger.warning("Update of unknown task %s", task_id)
        return task

    async def delete_task(self, task_id: str) -> bool:
        try:
            deleted = await self._call(self.table.delete, task_id)
        except STORE_ERRORS:
            logger.exception("Error deleting task %s", task_id)
            return False
        if not deleted:
            logger.warning("Delete of unknown task %s", task_id)
        return deleted

    async def toggle_task(self, task_id: str) -> Task | None:
        """Flip the completion flag of a task.

        Reads the current flag, then writes its negation: two concurrent
        toggles of the same task can read the same state and one of the
        flips is lost.
        """
        try:
            completed = await self._call(self.table.select_completed, task_id)
        except STORE_ERRORS:
            logger.exception("Error toggling task %s", task_id)
            return None
        if completed is None:
            logger.warning("Toggle of unknown task %s", task_id)
            return None
        return await self.update_task(task_id, TaskUpdate(completed=not completed))

    async def list_tags(self) -> list[str] | None:
        """Distinct tags over all tasks, sorted."""
        try:
            rows = await self._call(self.table.select_tags)
        except STORE_ERRORS:
            logger.exception("Error loading tags")
            return None
        tags: set[str] = set()
        for row_tags in rows:
            tags.update(row_tags or [])
        return sorted(tags)
