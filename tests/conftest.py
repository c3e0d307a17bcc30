"""
Shared pytest fixtures for the taskboard test suite.

Provides isolated instances of every stateful component -- task
repositories, auth backends, session stores -- so no test depends on
module-level state, plus the Flask app and clients for integration tests.

Key SDET Concepts Demonstrated:
- Fixture scopes (function vs. session)
- Injectable clocks for deterministic timestamps
- Test data factories backed by Faker
- Monkeypatched HTTP transport for remote-mode tests
"""

from __future__ import annotations

import os
from collections.abc import Callable
from datetime import timedelta

import pytest
from faker import Faker

# Set testing environment before importing the app
os.environ["FLASK_ENV"] = "testing"

from shared.test_helpers import DEMO_EMAIL, DEMO_PASSWORD, FIXED_NOW, TEST_API_URL, FakeTaskApi
from taskboard_app import create_app
from taskboard_app.auth_backends import DemoAuthBackend, RemoteAuthBackend
from taskboard_app.gateway import Gateway
from taskboard_app.models import Task, TaskPriority
from taskboard_app.repositories import InMemoryTaskRepository, RemoteTaskRepository
from taskboard_app.session import SessionStore

fake = Faker()

TEST_TOKEN_SECRET = "unit-test-token-secret-0123456789abcdef"


# -----------------------------------------------------------------------------
# Clock Fixtures
# -----------------------------------------------------------------------------


class SteppingClock:
    """Clock that starts at ``FIXED_NOW`` and advances one second per read."""

    def __init__(self, start=FIXED_NOW):
        self.current = start

    def __call__(self):
        value = self.current
        self.current = self.current + timedelta(seconds=1)
        return value


@pytest.fixture
def clock() -> SteppingClock:
    """Provide a deterministic, strictly increasing clock."""
    return SteppingClock()


# -----------------------------------------------------------------------------
# Repository Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def repository(clock) -> InMemoryTaskRepository:
    """Provide an empty in-memory repository with a deterministic clock."""
    return InMemoryTaskRepository(seed=[], clock=clock)


@pytest.fixture
def demo_repository(clock) -> InMemoryTaskRepository:
    """Provide an in-memory repository seeded with the demo tasks."""
    return InMemoryTaskRepository(clock=clock)


@pytest.fixture
def task_factory(repository) -> Callable[..., Task]:
    """
    Factory fixture for creating tasks in the ``repository`` fixture.

    Example:
        def test_something(task_factory):
            task = task_factory(title="My Task")
            assert task.id is not None
    """

    def _create_task(
        title: str | None = None,
        description: str | None = None,
        priority: TaskPriority = TaskPriority.MEDIUM,
        due_date: str | None = None,
    ) -> Task:
        return repository.create(
            title=title or fake.sentence(nb_words=4),
            description=description if description is not None else fake.sentence(),
            priority=priority,
            due_date=due_date,
        )

    return _create_task


# -----------------------------------------------------------------------------
# Auth / Session Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture(scope="session")
def demo_auth_backend() -> DemoAuthBackend:
    """Provide one demo user directory; reset per test by ``session_store``."""
    return DemoAuthBackend(token_secret=TEST_TOKEN_SECRET)


@pytest.fixture
def session_store(demo_auth_backend) -> SessionStore:
    """Provide an unauthenticated session store over a plain dict."""
    demo_auth_backend.reset()
    return SessionStore(demo_auth_backend, {})


# -----------------------------------------------------------------------------
# Remote Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def fake_api(monkeypatch) -> FakeTaskApi:
    """Replace ``requests.request`` in the gateway with a fake route table."""
    api = FakeTaskApi()
    monkeypatch.setattr("taskboard_app.gateway.requests.request", api)
    return api


@pytest.fixture
def gateway() -> Gateway:
    """Provide an unbound gateway pointed at the fake API URL."""
    return Gateway(TEST_API_URL, timeout=1)


@pytest.fixture
def remote_storage() -> dict:
    """Provide the mapping that backs the remote session store."""
    return {}


@pytest.fixture
def remote_session(gateway, remote_storage) -> SessionStore:
    """Provide a session store using the remote auth backend."""
    return SessionStore(RemoteAuthBackend(gateway), remote_storage)


@pytest.fixture
def remote_repository(gateway, remote_session, remote_storage) -> RemoteTaskRepository:
    """Provide a remote repository bound to an authenticated session."""
    remote_storage.update(
        {
            "auth_token": "remote-token",
            "auth_user": {"id": 7, "name": "Remote", "email": "remote@example.com", "role": "USER"},
        }
    )
    return RemoteTaskRepository(gateway.bound_to(remote_session))


# -----------------------------------------------------------------------------
# Application Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture(scope="session")
def app():
    """
    Create the demo-mode application once for the test session.

    Demo data is restored before every test by the ``client`` fixture.
    """
    application = create_app("testing")
    yield application


@pytest.fixture(scope="function")
def client(app):
    """
    Provide a Flask test client with freshly reset demo data.

    Opens a new test-client context for every test so that cookies and
    sessions never leak between tests.
    """
    app.extensions["taskboard"].reset()
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture
def logged_in_client(client):
    """Provide a client already logged in as the demo user."""
    response = client.post(
        "/login",
        data={"email": DEMO_EMAIL, "password": DEMO_PASSWORD},
        follow_redirects=False,
    )
    assert response.status_code == 302
    return client


@pytest.fixture
def remote_app():
    """Create an application in remote mode pointed at the fake API URL."""
    return create_app("testing", TASK_API_URL=TEST_API_URL)


@pytest.fixture
def remote_client(remote_app):
    with remote_app.test_client() as test_client:
        yield test_client
