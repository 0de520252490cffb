# tests/test_tables.py

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from taskboard.db import SQLiteTaskTable, SupabaseTaskTable, TaskStore
from taskboard.models import Priority, TaskCreate, TaskUpdate

from .fakes import FakeSupabaseClient


@pytest.fixture()
def sqlite_table(tmp_path: Path) -> SQLiteTaskTable:
    table = SQLiteTaskTable(tmp_path / "tasks.db")
    table.init_db()
    return table


# ---- SQLite ----


def test_sqlite_insert_assigns_id_and_timestamps(sqlite_table: SQLiteTaskTable) -> None:
    row = sqlite_table.insert({"title": "Buy milk", "completed": False, "tags": ["errand"]})
    assert row["id"]
    assert row["created_at"] == row["updated_at"]
    assert row["tags"] == ["errand"]
    assert row["completed"] is False
    assert row["priority"] == "medium"
    assert row["description"] is None


def test_sqlite_select_all_newest_first(sqlite_table: SQLiteTaskTable) -> None:
    first = sqlite_table.insert({"title": "first"})
    second = sqlite_table.insert({"title": "second"})
    assert [row["id"] for row in sqlite_table.select_all()] == [second["id"], first["id"]]


def test_sqlite_update_refreshes_updated_at(sqlite_table: SQLiteTaskTable) -> None:
    row = sqlite_table.insert({"title": "x", "due_date": "2024-01-01T00:00:00Z"})
    updated = sqlite_table.update(row["id"], {"completed": True, "due_date": None})
    assert updated["completed"] is True
    assert updated["due_date"] is None
    assert updated["created_at"] == row["created_at"]
    assert updated["updated_at"] > row["updated_at"]


def test_sqlite_update_unknown_row(sqlite_table: SQLiteTaskTable) -> None:
    assert sqlite_table.update("missing", {"title": "x"}) is None


def test_sqlite_rejects_unknown_columns(sqlite_table: SQLiteTaskTable) -> None:
    with pytest.raises(sqlite3.OperationalError):
        sqlite_table.insert({"title": "x", "owner": "me"})


def test_sqlite_delete_and_select_completed(sqlite_table: SQLiteTaskTable) -> None:
    row = sqlite_table.insert({"title": "x", "completed": True})
    assert sqlite_table.select_completed(row["id"]) is True
    assert sqlite_table.delete(row["id"]) is True
    assert sqlite_table.delete(row["id"]) is False
    assert sqlite_table.select_completed(row["id"]) is None


def test_sqlite_select_tags(sqlite_table: SQLiteTaskTable) -> None:
    sqlite_table.insert({"title": "a", "tags": ["x", "y"]})
    sqlite_table.insert({"title": "b"})
    assert sorted(sqlite_table.select_tags()) == [[], ["x", "y"]]


@pytest.mark.asyncio
async def test_store_over_sqlite_create_toggle_scenario(sqlite_table: SQLiteTaskTable) -> None:
    store = TaskStore(sqlite_table)
    created = await store.create_task(TaskCreate(title="Buy milk", priority=Priority.LOW, tags=["errand"]))
    toggled = await store.toggle_task(created.id)

    assert toggled.completed is True
    assert toggled.updated_at > created.updated_at
    assert toggled.tags == ["errand"]
    assert toggled.created_at == created.created_at

    cleared = await store.update_task(created.id, TaskUpdate(description=None))
    assert cleared.description == ""


# ---- Supabase ----

ROW = {
    "id": "6f1c0a52-0000-4000-8000-000000000001",
    "title": "Buy milk",
    "description": None,
    "completed": False,
    "priority": "low",
    "tags": ["errand"],
    "due_date": None,
    "created_at": "2024-01-01T00:00:00+00:00",
    "updated_at": "2024-01-01T00:00:00+00:00",
}


def test_supabase_select_all_orders_by_created_at_desc() -> None:
    client = FakeSupabaseClient([ROW])
    table = SupabaseTaskTable(client)

    assert table.select_all() == [ROW]
    [(name, ops)] = client.executed
    assert name == "tasks"
    assert ops == [("select", ("*",), {}), ("order", ("created_at",), {"desc": True})]


def test_supabase_insert_returns_stored_row() -> None:
    client = FakeSupabaseClient([ROW])
    table = SupabaseTaskTable(client, table="todo_items")

    assert table.insert({"title": "Buy milk"}) == ROW
    [(name, ops)] = client.executed
    assert name == "todo_items"
    assert ops == [("insert", ({"title": "Buy milk"},), {})]


def test_supabase_update_by_id() -> None:
    client = FakeSupabaseClient([{**ROW, "completed": True}], [])
    table = SupabaseTaskTable(client)

    assert table.update(ROW["id"], {"completed": True})["completed"] is True
    assert table.update("missing", {"completed": True}) is None
    ops = client.executed[0][1]
    assert ops == [("update", ({"completed": True},), {}), ("eq", ("id", ROW["id"]), {})]


def test_supabase_delete_reports_missing_rows() -> None:
    client = FakeSupabaseClient([ROW], [])
    table = SupabaseTaskTable(client)

    assert table.delete(ROW["id"]) is True
    assert table.delete("missing") is False


def test_supabase_select_completed() -> None:
    client = FakeSupabaseClient([{"completed": True}], [])
    table = SupabaseTaskTable(client)

    assert table.select_completed(ROW["id"]) is True
    assert table.select_completed("missing") is None
    ops = client.executed[0][1]
    assert ops[0] == ("select", ("completed",), {})


def test_supabase_select_tags() -> None:
    client = FakeSupabaseClient([{"tags": ["a"]}, {"tags": None}])
    table = SupabaseTaskTable(client)
    assert table.select_tags() == [["a"], None]
