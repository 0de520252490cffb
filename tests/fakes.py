# tests/fakes.py

from __future__ import annotations

import threading
import time
import uuid
from collections import Counter
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any

from taskboard.models import Priority, Task


class InMemoryTaskTable:
    """
    TaskTable kept in a dict, shaped like the Supabase rows.

    - ``calls`` counts every operation for assertions
    - set ``error`` to make every operation raise it
    - map an operation name to an exception in ``fail_on`` to fail only that one
    - set ``delay`` to make every operation block that many seconds
    """

    def __init__(self) -> None:
        self.rows: dict[str, dict[str, Any]] = {}
        self.calls: Counter[str] = Counter()
        self.error: Exception | None = None
        self.fail_on: dict[str, Exception] = {}
        self.delay = 0.0
        self._lock = threading.Lock()
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _enter(self, name: str) -> None:
        self.calls[name] += 1
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if name in self.fail_on:
            raise self.fail_on[name]

    def _tick(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def select_all(self) -> list[dict]:
        self._enter("select_all")
        with self._lock:
            rows = [dict(row) for row in self.rows.values()]
        return sorted(rows, key=lambda row: row["created_at"], reverse=True)

    def insert(self, row: dict[str, Any]) -> dict:
        self._enter("insert")
        with self._lock:
            stamp = self._tick()
            stored = {**row, "id": str(uuid.uuid4()), "created_at": stamp, "updated_at": stamp}
            self.rows[stored["id"]] = stored
            return dict(stored)

    def update(self, task_id: str, fields: dict[str, Any]) -> dict | None:
        self._enter("update")
        with self._lock:
            row = self.rows.get(task_id)
            if row is None:
                return None
            row.update(fields, updated_at=self._tick())
            return dict(row)

    def delete(self, task_id: str) -> bool:
        self._enter("delete")
        with self._lock:
            return self.rows.pop(task_id, None) is not None

    def select_completed(self, task_id: str) -> bool | None:
        self._enter("select_completed")
        row = self.rows.get(task_id)
        return None if row is None else bool(row["completed"])

    def select_tags(self) -> list[list[str] | None]:
        self._enter("select_tags")
        with self._lock:
            return [row.get("tags") for row in self.rows.values()]

    def add_row(self, **row: Any) -> dict:
        """Seed a row directly, bypassing call counting."""
        stamp = self._tick()
        stored = {
            "id": str(uuid.uuid4()),
            "description": None,
            "completed": False,
            "priority": "medium",
            "tags": None,
            "due_date": None,
            "created_at": stamp,
            "updated_at": stamp,
            **row,
        }
        self.rows[stored["id"]] = stored
        return stored


class FakeQuery:
    """Records chained postgrest builder calls; ``execute`` pops a canned response."""

    def __init__(self, client: FakeSupabaseClient, table: str) -> None:
        self.client = client
        self.table = table
        self.ops: list[tuple[str, tuple, dict]] = []

    def _record(self, name: str):
        def method(*args: Any, **kwargs: Any) -> FakeQuery:
            self.ops.append((name, args, kwargs))
            return self

        return method

    def __getattr__(self, name: str):
        if name in {"select", "insert", "update", "delete", "eq", "order", "limit"}:
            return self._record(name)
        raise AttributeError(name)

    def execute(self) -> SimpleNamespace:
        self.client.executed.append((self.table, self.ops))
        return SimpleNamespace(data=self.client.responses.pop(0))


class FakeSupabaseClient:
    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.executed: list[tuple[str, list[tuple[str, tuple, dict]]]] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


def make_task(
    title: str = "Task",
    *,
    id: str | None = None,
    description: str = "",
    completed: bool = False,
    priority: Priority = Priority.MEDIUM,
    tags: list[str] | None = None,
    due_date: datetime | None = None,
    created_at: datetime | None = None,
) -> Task:
    """Build a Task without going through a store."""
    created = created_at or datetime(2024, 1, 1, tzinfo=timezone.utc)
    return Task(
        id=id or title.lower().replace(" ", "-"),
        title=title,
        description=description,
        completed=completed,
        priority=priority,
        tags=tags or [],
        due_date=due_date,
        created_at=created,
        updated_at=created,
    )
