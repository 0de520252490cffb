"""Routers package."""

from . import tasks

__all__ = ["tasks"]
