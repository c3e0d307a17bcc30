"""Task repository strategies: in-memory demo data or the remote task API."""

from .base import TASK_CREATED, TASK_DELETED, TASK_UPDATED, TaskRepository
from .memory import DEMO_TASKS, InMemoryTaskRepository
from .remote import RemoteTaskRepository

__all__ = [
    "DEMO_TASKS",
    "TASK_CREATED",
    "TASK_DELETED",
    "TASK_UPDATED",
    "InMemoryTaskRepository",
    "RemoteTaskRepository",
    "TaskRepository",
]
