"""Services package."""

from .board import TaskBoard
from .views import compute_stats, filter_tasks, sort_tasks

__all__ = [
    "TaskBoard",
    "compute_stats",
    "filter_tasks",
    "sort_tasks",
]
