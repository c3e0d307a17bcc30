"""
Strategy wiring for the taskboard.

``TaskboardServices`` decides once, from configuration, whether the client
runs against the remote task API or the in-memory demo data, and hands out
session stores and task repositories built for that mode.  Consumers never
check the mode themselves.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping
from datetime import timedelta
from typing import Any

from .auth_backends import AuthBackend, DemoAuthBackend, RemoteAuthBackend
from .gateway import Gateway
from .models import Task
from .repositories import InMemoryTaskRepository, RemoteTaskRepository, TaskRepository
from .session import SessionStore

logger = logging.getLogger(__name__)

audit_logger = logging.getLogger("taskboard_app.audit")


def _log_task_event(event: str, task: Task) -> None:
    audit_logger.info("task %s id=%s status=%s", event, task.id, task.status.value)


class TaskboardServices:
    """
    Per-application container for the selected strategies.

    In demo mode the task repository and the user directory are shared by
    every request of the application.  In remote mode each request gets a
    repository bound to its own session, because the bearer token and the
    401 side effect belong to that session.

    Args:
        settings: Mapping with ``TASK_API_URL``, ``API_TIMEOUT``,
            ``DEMO_MODE``, ``DEMO_TOKEN_SECRET`` and
            ``DEMO_TOKEN_TTL_MINUTES`` (a Flask ``app.config`` works).
    """

    def __init__(self, settings: Mapping[str, Any]):
        api_url = (settings.get("TASK_API_URL") or "").strip()
        self.demo_mode = bool(settings.get("DEMO_MODE")) or not api_url

        self.gateway: Gateway | None = None
        self.demo_tasks: InMemoryTaskRepository | None = None
        self.auth_backend: AuthBackend

        if self.demo_mode:
            ttl = timedelta(minutes=int(settings.get("DEMO_TOKEN_TTL_MINUTES", 60)))
            self.auth_backend = DemoAuthBackend(
                token_secret=settings["DEMO_TOKEN_SECRET"], token_ttl=ttl
            )
            self.demo_tasks = InMemoryTaskRepository()
            self.demo_tasks.subscribe(_log_task_event)
            logger.info("Taskboard running in demo mode")
        else:
            self.gateway = Gateway(api_url, timeout=settings.get("API_TIMEOUT", 10))
            self.auth_backend = RemoteAuthBackend(self.gateway)
            logger.info("Taskboard using task API at %s", api_url)

    def session_store(self, storage: MutableMapping[str, Any] | None = None) -> SessionStore:
        """Build a session store over *storage* (e.g. the Flask session)."""
        return SessionStore(self.auth_backend, storage)

    def task_repository(self, session: SessionStore) -> TaskRepository:
        """Return the task repository to use on behalf of *session*."""
        if self.demo_tasks is not None:
            return self.demo_tasks
        repository = RemoteTaskRepository(self.gateway.bound_to(session))
        repository.subscribe(_log_task_event)
        return repository

    def reset(self) -> None:
        """Restore demo data and accounts; a no-op in remote mode."""
        if self.demo_tasks is not None:
            self.demo_tasks.reset()
        if isinstance(self.auth_backend, DemoAuthBackend):
            self.auth_backend.reset()
