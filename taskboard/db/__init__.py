"""Database package."""

from .client import SQLiteTaskTable
from .remote import SupabaseTaskTable
from .store import TaskStore, TaskTable, row_to_task

__all__ = [
    "SQLiteTaskTable",
    "SupabaseTaskTable",
    "TaskStore",
    "TaskTable",
    "row_to_task",
]
