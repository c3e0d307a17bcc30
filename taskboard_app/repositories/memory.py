"""
In-memory task repository used in demo mode.

Keeps tasks in an insertion-ordered dict guarded by a lock, so concurrent
requests on a threaded server never observe a half-applied update.  Ids
come from a monotonically increasing counter that starts above the
highest seeded id and is never rewound except by ``reset``.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable, Iterable
from datetime import date, datetime
from typing import Any

from ..errors import NotFound, ValidationError
from ..models import Task, TaskPriority, TaskStatus, parse_status, utc_now
from ..presentation import is_due_before
from ..validation import clean_task_fields, reconcile_completion
from .base import TASK_CREATED, TASK_DELETED, TASK_UPDATED, TaskRepository

logger = logging.getLogger(__name__)

DEMO_TASKS: list[dict[str, Any]] = [
    {
        "id": 1,
        "title": "Setup Development Environment",
        "description": "Install Python, Flask and the project dependencies",
        "status": "DONE",
        "priority": 3,
        "dueDate": "2025-10-29",
        "createdAt": "2025-10-28T10:00:00Z",
        "updatedAt": "2025-10-29T15:30:00Z",
    },
    {
        "id": 2,
        "title": "Design Database Schema",
        "description": "Draft the task and user tables",
        "status": "IN_PROGRESS",
        "priority": 3,
        "dueDate": "2025-11-01",
        "createdAt": "2025-10-29T09:00:00Z",
        "updatedAt": "2025-10-30T11:00:00Z",
    },
    {
        "id": 3,
        "title": "Write API Documentation",
        "description": "Describe every task endpoint with examples",
        "status": "TODO",
        "priority": 1,
        "dueDate": "2025-11-15",
        "createdAt": "2025-10-29T12:00:00Z",
        "updatedAt": "2025-10-29T12:00:00Z",
    },
    {
        "id": 4,
        "title": "Fix Critical Bug",
        "description": "Login fails when the token has expired",
        "status": "IN_PROGRESS",
        "priority": 4,
        "dueDate": "2025-10-27",
        "createdAt": "2025-10-25T14:00:00Z",
        "updatedAt": "2025-10-30T16:00:00Z",
    },
    {
        "id": 5,
        "title": "Plan Sprint Review",
        "description": None,
        "status": "TODO",
        "priority": 2,
        "dueDate": None,
        "createdAt": "2025-10-30T08:00:00Z",
        "updatedAt": "2025-10-30T08:00:00Z",
    },
]


class InMemoryTaskRepository(TaskRepository):
    """
    Task repository backed by process memory.

    Args:
        seed: Initial tasks as :class:`Task` objects or wire dictionaries.
            Defaults to ``DEMO_TASKS``; pass ``[]`` for an empty store.
        clock: Returns the current UTC time; injectable for tests.
    """

    def __init__(
        self,
        seed: Iterable[Task | dict[str, Any]] | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__()
        self._seed = [
            item.copy() if isinstance(item, Task) else Task.from_dict(item)
            for item in (DEMO_TASKS if seed is None else seed)
        ]
        self._clock = clock
        self._lock = threading.Lock()
        self._tasks: dict[int, Task] = {}
        self.reset()

    def reset(self) -> None:
        """Restore the seed tasks and restart id assignment after them."""
        with self._lock:
            self._tasks = {task.id: task.copy() for task in self._seed}
            start = max(self._tasks, default=0) + 1
            self._ids = itertools.count(start)
        logger.info("In-memory task store reset with %d task(s)", len(self._seed))

    def _require(self, task_id: int) -> Task:
        task = self._tasks.get(int(task_id))
        if task is None:
            raise NotFound(f"Task not found with ID: {task_id}")
        return task

    def _select(self, predicate: Callable[[Task], bool]) -> list[Task]:
        with self._lock:
            return [task.copy() for task in self._tasks.values() if predicate(task)]

    def list(self) -> list[Task]:
        return self._select(lambda task: True)

    def get(self, task_id: int) -> Task:
        with self._lock:
            return self._require(task_id).copy()

    def create(
        self,
        title: str,
        description: str | None = None,
        priority: TaskPriority | int = TaskPriority.MEDIUM,
        due_date: date | str | None = None,
    ) -> Task:
        fields = clean_task_fields(
            {
                "title": title,
                "description": description,
                "priority": priority,
                "due_date": due_date,
            }
        )
        with self._lock:
            now = self._clock()
            task = Task(
                id=next(self._ids),
                title=fields["title"],
                description=fields.get("description"),
                status=TaskStatus.TODO,
                priority=fields.get("priority", TaskPriority.MEDIUM),
                due_date=fields.get("due_date"),
                completed=False,
                created_at=now,
                updated_at=now,
            )
            self._tasks[task.id] = task
            created = task.copy()

        logger.info("Task created with ID: %s", created.id)
        self._notify(TASK_CREATED, created)
        return created

    def update(self, task_id: int, **fields: Any) -> Task:
        changes = clean_task_fields(fields, partial=True)
        with self._lock:
            task = self._require(task_id)
            status, completed = reconcile_completion(task.status, changes)
            if "title" in changes:
                task.title = changes["title"]
            if "description" in changes:
                task.description = changes["description"]
            if "priority" in changes:
                task.priority = changes["priority"]
            if "due_date" in changes:
                task.due_date = changes["due_date"]
            task.status = status
            task.completed = completed
            task.updated_at = self._clock()
            updated = task.copy()

        logger.info("Task updated with ID: %s", updated.id)
        self._notify(TASK_UPDATED, updated)
        return updated

    def delete(self, task_id: int) -> None:
        with self._lock:
            task = self._require(task_id)
            del self._tasks[task.id]

        logger.info("Task deleted with ID: %s", task.id)
        self._notify(TASK_DELETED, task)

    def by_status(self, status: TaskStatus | str) -> list[Task]:
        try:
            wanted = parse_status(status)
        except ValueError:
            raise ValidationError(f"Invalid status: {status!r}", field="status") from None
        return self._select(lambda task: task.status is wanted)

    def overdue(self, as_of: date | datetime | None = None) -> list[Task]:
        cutoff = as_of if as_of is not None else self._clock()
        return self._select(lambda task: is_due_before(task, cutoff))

    def high_priority(self) -> list[Task]:
        return self._select(lambda task: task.priority >= TaskPriority.HIGH)

    def search(self, query: str) -> list[Task]:
        if not query or not query.strip():
            return self.list()
        needle = query.strip().lower()

        def matches(task: Task) -> bool:
            return needle in task.title.lower() or needle in (task.description or "").lower()

        return self._select(matches)

    def health(self) -> dict[str, Any]:
        with self._lock:
            count = len(self._tasks)
        return {"status": "UP", "mode": "DEMO", "tasks": count}
