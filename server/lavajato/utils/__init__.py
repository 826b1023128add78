"""Utility modules for the booking service."""

from .background_tasks import spawn, wait_for_background_tasks

__all__ = [
    "spawn",
    "wait_for_background_tasks",
]
