"""
Task repository interface.

``TaskRepository`` is the single seam between the frontend and wherever
tasks live.  Concrete strategies (in-memory demo data or the remote task
API) are chosen once at startup and injected into consumers, which never
branch on the mode themselves.

Consumers that need to react to changes made elsewhere subscribe to the
repository instead of listening for ad-hoc events.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import date, datetime
from typing import Any

from ..models import Task, TaskPriority, TaskStatus

logger = logging.getLogger(__name__)

TASK_CREATED = "created"
TASK_UPDATED = "updated"
TASK_DELETED = "deleted"

TaskListener = Callable[[str, Task], Any]


class TaskRepository(ABC):
    """
    CRUD and filtered reads over a collection of tasks.

    All list-returning operations preserve insertion order.  Returned
    tasks are detached copies: mutating them does not change the
    repository.
    """

    def __init__(self) -> None:
        self._listeners: list[TaskListener] = []

    # -----------------------------------------------------------------
    # Change notification
    # -----------------------------------------------------------------

    def subscribe(self, listener: TaskListener) -> Callable[[], None]:
        """
        Register *listener* for ``(event, task)`` change notifications.

        Returns:
            A callable that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: str, task: Task) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, task.copy())
            except Exception:
                logger.exception("Task listener %r failed on %s event", listener, event)

    # -----------------------------------------------------------------
    # CRUD
    # -----------------------------------------------------------------

    @abstractmethod
    def list(self) -> list[Task]:
        """Return every task."""

    @abstractmethod
    def get(self, task_id: int) -> Task:
        """Return one task; raises ``NotFound``."""

    @abstractmethod
    def create(
        self,
        title: str,
        description: str | None = None,
        priority: TaskPriority | int = TaskPriority.MEDIUM,
        due_date: date | str | None = None,
    ) -> Task:
        """Create a TODO task; raises ``ValidationError`` on an empty title."""

    @abstractmethod
    def update(self, task_id: int, **fields: Any) -> Task:
        """Merge *fields* into a task; raises ``NotFound``/``ValidationError``."""

    @abstractmethod
    def delete(self, task_id: int) -> None:
        """Remove a task; raises ``NotFound``."""

    def complete(self, task_id: int) -> Task:
        """Mark a task DONE."""
        return self.update(task_id, status=TaskStatus.DONE, completed=True)

    def mark_pending(self, task_id: int) -> Task:
        """Reopen a task as TODO."""
        return self.update(task_id, status=TaskStatus.TODO, completed=False)

    # -----------------------------------------------------------------
    # Filtered reads
    # -----------------------------------------------------------------

    @abstractmethod
    def by_status(self, status: TaskStatus | str) -> list[Task]:
        """Return tasks whose status equals *status*."""

    @abstractmethod
    def overdue(self, as_of: date | datetime | None = None) -> list[Task]:
        """Return open tasks due strictly before *as_of* (date-only)."""

    @abstractmethod
    def high_priority(self) -> list[Task]:
        """Return HIGH and URGENT tasks."""

    @abstractmethod
    def search(self, query: str) -> list[Task]:
        """Case-insensitive substring match on title or description."""

    @abstractmethod
    def health(self) -> dict[str, Any]:
        """Return a liveness payload with at least a ``status`` key."""
