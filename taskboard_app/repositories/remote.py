"""
Remote task repository.

Maps every repository operation onto the REST surface of the task API
through a session-bound :class:`~taskboard_app.gateway.Gateway`.  Input is
validated locally before it leaves the process, and HTTP failures are
translated into the same exceptions the in-memory repository raises.

Endpoints:
    GET    /api/tasks                      - list
    GET    /api/tasks/<id>                 - get
    POST   /api/tasks                      - create
    PUT    /api/tasks/<id>                 - update
    DELETE /api/tasks/<id>                 - delete
    PATCH  /api/tasks/<id>/complete        - complete
    PATCH  /api/tasks/<id>/pending         - mark_pending
    GET    /api/tasks/status/<status>      - by_status
    GET    /api/tasks/overdue              - overdue (as of today)
    GET    /api/tasks/high-priority        - high_priority
    GET    /actuator/health                - health (falls back to /api/health)
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any

import requests

from ..errors import MalformedResponse, NotFound, ValidationError
from ..gateway import Gateway, check_response, parse_json
from ..models import Task, TaskPriority, TaskStatus, parse_status
from ..presentation import is_due_before
from ..validation import clean_task_fields, reconcile_completion
from .base import TASK_CREATED, TASK_DELETED, TASK_UPDATED, TaskRepository

logger = logging.getLogger(__name__)

TASKS_PATH = "/api/tasks"
HEALTH_PATHS = ("/actuator/health", "/api/health")


def _to_wire(fields: dict[str, Any]) -> dict[str, Any]:
    """Convert cleaned task fields into the camelCase request body."""
    body: dict[str, Any] = {}
    if "title" in fields:
        body["title"] = fields["title"]
    if "description" in fields:
        body["description"] = fields["description"]
    if "priority" in fields:
        body["priority"] = int(fields["priority"])
    if "due_date" in fields:
        due_date = fields["due_date"]
        body["dueDate"] = due_date.isoformat() if due_date else None
    if "status" in fields:
        body["status"] = fields["status"].value
    if "completed" in fields:
        body["completed"] = fields["completed"]
    return body


class RemoteTaskRepository(TaskRepository):
    """
    Task repository backed by the remote task API.

    Args:
        gateway: Gateway bound to the caller's session; every call is
            authenticated and a 401 clears that session.
    """

    def __init__(self, gateway: Gateway):
        super().__init__()
        self._gateway = gateway

    # -----------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------

    def _request(self, method: str, path: str, context: str, **kwargs) -> requests.Response:
        response = self._gateway.call(method, path, **kwargs)
        return check_response(response, context)

    def _task(self, response: requests.Response, context: str) -> Task:
        payload = parse_json(response, context)
        try:
            return Task.from_dict(payload)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise MalformedResponse(f"{context} returned an invalid task.") from exc

    def _tasks(self, response: requests.Response, context: str) -> list[Task]:
        payload = parse_json(response, context)
        # Some deployments wrap lists as {"tasks": [...], "count": n}.
        if isinstance(payload, dict):
            payload = payload.get("tasks")
        if not isinstance(payload, list):
            raise MalformedResponse(f"{context} did not return a task list.")
        try:
            return [Task.from_dict(item) for item in payload]
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise MalformedResponse(f"{context} returned an invalid task.") from exc

    def _fetch_list(self, path: str, context: str, **kwargs) -> list[Task]:
        return self._tasks(self._request("GET", path, context, **kwargs), context)

    # -----------------------------------------------------------------
    # CRUD
    # -----------------------------------------------------------------

    def list(self) -> list[Task]:
        return self._fetch_list(TASKS_PATH, "List tasks")

    def get(self, task_id: int) -> Task:
        response = self._request("GET", f"{TASKS_PATH}/{task_id}", "Fetch task")
        return self._task(response, "Fetch task")

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
        fields.setdefault("priority", TaskPriority.MEDIUM)
        response = self._request("POST", TASKS_PATH, "Create task", json=_to_wire(fields))
        task = self._task(response, "Create task")
        logger.info("Task created with ID: %s", task.id)
        self._notify(TASK_CREATED, task)
        return task

    def update(self, task_id: int, **fields: Any) -> Task:
        changes = clean_task_fields(fields, partial=True)
        if "status" in changes or "completed" in changes:
            current = changes.get("status") or self.get(task_id).status
            changes["status"], changes["completed"] = reconcile_completion(current, changes)
        response = self._request(
            "PUT", f"{TASKS_PATH}/{task_id}", "Update task", json=_to_wire(changes)
        )
        task = self._task(response, "Update task")
        logger.info("Task updated with ID: %s", task.id)
        self._notify(TASK_UPDATED, task)
        return task

    def delete(self, task_id: int) -> None:
        task = self.get(task_id)
        self._request("DELETE", f"{TASKS_PATH}/{task_id}", "Delete task")
        logger.info("Task deleted with ID: %s", task_id)
        self._notify(TASK_DELETED, task)

    def _transition(self, task_id: int, action: str) -> Task:
        context = f"Mark task {action}"
        response = self._request("PATCH", f"{TASKS_PATH}/{task_id}/{action}", context)
        task = self._task(response, context)
        self._notify(TASK_UPDATED, task)
        return task

    def complete(self, task_id: int) -> Task:
        return self._transition(task_id, "complete")

    def mark_pending(self, task_id: int) -> Task:
        return self._transition(task_id, "pending")

    # -----------------------------------------------------------------
    # Filtered reads
    # -----------------------------------------------------------------

    def by_status(self, status: TaskStatus | str) -> list[Task]:
        try:
            wanted = parse_status(status)
        except ValueError:
            raise ValidationError(f"Invalid status: {status!r}", field="status") from None
        return self._fetch_list(f"{TASKS_PATH}/status/{wanted.value}", "Tasks by status")

    def overdue(self, as_of: date | datetime | None = None) -> list[Task]:
        if as_of is None:
            return self._fetch_list(f"{TASKS_PATH}/overdue", "Overdue tasks")
        # The server only knows "overdue as of now"; other cut-offs are
        # evaluated against the full list.
        return [task for task in self.list() if is_due_before(task, as_of)]

    def high_priority(self) -> list[Task]:
        return self._fetch_list(f"{TASKS_PATH}/high-priority", "High priority tasks")

    def search(self, query: str) -> list[Task]:
        tasks = self.list()
        if not query or not query.strip():
            return tasks
        # /api/tasks/search only matches titles; descriptions are matched here.
        needle = query.strip().lower()
        return [
            task
            for task in tasks
            if needle in task.title.lower() or needle in (task.description or "").lower()
        ]

    def health(self) -> dict[str, Any]:
        # Liveness probes are public; a 401 here must not end the session.
        for path in HEALTH_PATHS:
            try:
                response = check_response(
                    self._gateway.call_public("GET", path), "Health check"
                )
            except NotFound:
                continue
            payload = parse_json(response, "Health check")
            if not isinstance(payload, dict):
                raise MalformedResponse("Health check returned an unexpected payload.")
            return payload
        raise NotFound("No health endpoint available")
