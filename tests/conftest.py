# tests/conftest.py

from __future__ import annotations

import pytest

from taskboard.db import TaskStore
from taskboard.services import TaskBoard

from .fakes import InMemoryTaskTable


@pytest.fixture()
def table() -> InMemoryTaskTable:
    """In-memory table standing in for the Supabase one."""
    return InMemoryTaskTable()


@pytest.fixture()
def store(table: InMemoryTaskTable) -> TaskStore:
    return TaskStore(table, timeout=2.0)


@pytest.fixture()
def board(store: TaskStore) -> TaskBoard:
    return TaskBoard(store)
