"""Supabase task table."""

import logging
from typing import Any

from supabase import Client, create_client

logger = logging.getLogger(__name__)


class SupabaseTaskTable:
    """Row-level access to the Supabase ``tasks`` table.

    ``id``, ``created_at`` and ``updated_at`` are generated server-side (see
    ``sql/schema.sql``).
    """

    def __init__(self, client: Client, table: str = "tasks") -> None:
        self._client = client
        self._table = table

    @classmethod
    def connect(cls, url: str, key: str, table: str = "tasks") -> "SupabaseTaskTable":
        client = create_client(url, key)
        logger.info("Connected to Supabase: %s...", url[:30])
        return cls(client, table)

    def _query(self):
        return self._client.table(self._table)

    def select_all(self) -> list[dict]:
        response = self._query().select("*").order("created_at", desc=True).execute()
        return response.data or []

    def insert(self, row: dict[str, Any]) -> dict:
        response = self._query().insert(row).execute()
        return response.data[0]

    def update(self, task_id: str, fields: dict[str, Any]) -> dict | None:
        response = self._query().update(fields).eq("id", task_id).execute()
        return response.data[0] if response.data else None

    def delete(self, task_id: str) -> bool:
        response = self._query().delete().eq("id", task_id).execute()
        return bool(response.data)

    def select_completed(self, task_id: str) -> bool | None:
        response = self._query().select("completed").eq("id", task_id).limit(1).execute()
        if not response.data:
            return None
        return bool(response.data[0]["completed"])

    def select_tags(self) -> list[list[str] | None]:
        response = self._query().select("tags").execute()
        return [row.get("tags") for row in response.data or []]
