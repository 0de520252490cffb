"""SQLite task table for local development."""

import json
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Iterator

from ulid import ULID

COLUMNS = (
    "id",
    "title",
    "description",
    "completed",
    "priority",
    "tags",
    "due_date",
    "created_at",
    "updated_at",
)
WRITABLE_COLUMNS = frozenset(COLUMNS) - {"id", "created_at", "updated_at"}


class SQLiteTaskTable:
    """Row-level access to a ``tasks`` table stored in SQLite.

    Plays the part of the remote store: it assigns ids and timestamps, and
    returns rows shaped like the Supabase ones (ISO timestamps, tags as a
    list, ``completed`` as a bool).
    """

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        self._clock_lock = threading.Lock()
        self._last_stamp: datetime | None = None

    def get_connection(self) -> sqlite3.Connection:
        """Get a database connection with WAL mode enabled."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    @contextmanager
    def get_db(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database connections."""
        conn = self.get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def init_db(self) -> None:
        """Initialize the database schema."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self.get_db() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    description TEXT,
                    completed INTEGER NOT NULL DEFAULT 0,
                    priority TEXT NOT NULL DEFAULT 'medium',
                    tags TEXT NOT NULL DEFAULT '[]',
                    due_date TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_tasks_created_at
                ON tasks(created_at)
            """)

    def _stamp(self) -> str:
        """Current UTC time, strictly later than any stamp handed out before."""
        with self._clock_lock:
            now = datetime.now(timezone.utc)
            if self._last_stamp is not None and now <= self._last_stamp:
                now = self._last_stamp + timedelta(microseconds=1)
            self._last_stamp = now
            return now.isoformat()

    @staticmethod
    def _encode(fields: dict[str, Any]) -> dict[str, Any]:
        unknown = set(fields) - WRITABLE_COLUMNS
        if unknown:
            raise sqlite3.OperationalError(f"unknown column(s): {', '.join(sorted(unknown))}")
        encoded = dict(fields)
        if "tags" in encoded:
            encoded["tags"] = json.dumps(encoded["tags"] or [], ensure_ascii=False)
        if "completed" in encoded:
            encoded["completed"] = int(bool(encoded["completed"]))
        return encoded

    @staticmethod
    def _decode(row: sqlite3.Row) -> dict[str, Any]:
        data = dict(row)
        data["tags"] = json.loads(data["tags"]) if data["tags"] else []
        data["completed"] = bool(data["completed"])
        return data

    def _select_by_id(self, conn: sqlite3.Connection, task_id: str) -> dict | None:
        cursor = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,))
        row = cursor.fetchone()
        return self._decode(row) if row else None

    def select_all(self) -> list[dict]:
        """Get all rows, newest first."""
        with self.get_db() as conn:
            cursor = conn.execute("SELECT * FROM tasks ORDER BY created_at DESC")
            return [self._decode(row) for row in cursor.fetchall()]

    def insert(self, row: dict[str, Any]) -> dict:
        """Insert a row and return it as stored."""
        fields = self._encode(row)
        stamp = self._stamp()
        fields.update(id=str(ULID()), created_at=stamp, updated_at=stamp)
        names = ", ".join(fields)
        placeholders = ", ".join("?" for _ in fields)
        with self.get_db() as conn:
            conn.execute(
                f"INSERT INTO tasks ({names}) VALUES ({placeholders})",
                list(fields.values()),
            )
            return self._select_by_id(conn, fields["id"])

    def update(self, task_id: str, fields: dict[str, Any]) -> dict | None:
        """Update the given columns of a row; None if no such row."""
        encoded = self._encode(fields)
        updates = [f"{name} = ?" for name in encoded]
        params = list(encoded.values())

        updates.append("updated_at = ?")
        params.append(self._stamp())
        params.append(task_id)

        with self.get_db() as conn:
            cursor = conn.execute(
                f"UPDATE tasks SET {', '.join(updates)} WHERE id = ?",
                params,
            )
            if cursor.rowcount == 0:
                return None
            return self._select_by_id(conn, task_id)

    def delete(self, task_id: str) -> bool:
        """Delete a row by ID."""
        with self.get_db() as conn:
            cursor = conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            return cursor.rowcount > 0

    def select_completed(self, task_id: str) -> bool | None:
        """Completion flag of a row; None if no such row."""
        with self.get_db() as conn:
            cursor = conn.execute("SELECT completed FROM tasks WHERE id = ?", (task_id,))
            row = cursor.fetchone()
            return bool(row["completed"]) if row else None

    def select_tags(self) -> list[list[str]]:
        """Tags column of every row."""
        with self.get_db() as conn:
            cursor = conn.execute("SELECT tags FROM tasks")
            return [json.loads(row["tags"]) if row["tags"] else [] for row in cursor.fetchall()]
