"""
Integration tests for the taskboard frontend routes.

Drives the Flask test client through the login, dashboard and task-action
flows in demo mode, then repeats the session-critical paths in remote mode
against a fake task API.

Key SDET Concepts Demonstrated:
- End-to-end request flows through the Flask test client
- Flash-message assertions via ``data-testid`` hooks
- Session-cookie state checks across requests
- Strategy switching (demo vs. remote) through configuration only
"""

from __future__ import annotations

import pytest

from shared.test_helpers import DEMO_EMAIL, DEMO_PASSWORD, FakeResponse, task_payload

pytestmark = pytest.mark.integration

LOGIN_RESPONSE = {
    "token": "jwt-from-api",
    "id": 7,
    "name": "Remote User",
    "email": "remote@example.com",
    "role": "USER",
}


# =============================================================================
# Health & Authentication (demo mode)
# =============================================================================


def test_health_reports_demo_backend(client):
    """Test that the health endpoint reports the demo repository."""
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json["status"] == "healthy"
    assert response.json["backend"]["mode"] == "DEMO"


def test_dashboard_requires_login(client):
    """Test that anonymous visitors are redirected to the login page."""
    response = client.get("/")

    assert response.status_code == 302
    assert response.headers["Location"].endswith("/login")


def test_login_page_shows_demo_hint(client):
    """Test that the login page renders in demo mode."""
    response = client.get("/login")

    assert response.status_code == 200
    assert DEMO_EMAIL.encode() in response.data


def test_login_success_redirects_to_dashboard(client):
    """Test that valid demo credentials log in and show the user."""
    # Act
    response = client.post(
        "/login",
        data={"email": DEMO_EMAIL, "password": DEMO_PASSWORD},
        follow_redirects=True,
    )

    # Assert
    assert response.status_code == 200
    assert b"Logged in successfully." in response.data
    assert b'data-testid="current-user"' in response.data
    with client.session_transaction() as sess:
        assert sess["auth_token"]
        assert sess["auth_user"]["email"] == DEMO_EMAIL


def test_login_with_wrong_password_is_rejected(client):
    """Test that bad credentials return 401 and store no session."""
    # Act
    response = client.post("/login", data={"email": DEMO_EMAIL, "password": "wrong-pass"})

    # Assert
    assert response.status_code == 401
    assert b"Invalid email or password." in response.data
    with client.session_transaction() as sess:
        assert "auth_token" not in sess


def test_login_with_empty_form_shows_field_errors(client):
    """Test that client-side validation reports every missing field."""
    response = client.post("/login", data={"email": "", "password": ""})

    assert response.status_code == 400
    assert b"Email is required" in response.data
    assert b"Password is required" in response.data


def test_register_then_login(client):
    """Test that a new account can log in after registering."""
    # Act
    registered = client.post(
        "/register",
        data={
            "name": "New Person",
            "email": "new.person@example.com",
            "password": "secret1",
            "confirm_password": "secret1",
        },
    )
    logged_in = client.post(
        "/login", data={"email": "new.person@example.com", "password": "secret1"}
    )

    # Assert
    assert registered.status_code == 302
    assert registered.headers["Location"].endswith("/login")
    assert logged_in.status_code == 302


def test_register_duplicate_email_returns_conflict(client):
    """Test that registering an existing email returns 409."""
    response = client.post(
        "/register",
        data={
            "name": "Copy Cat",
            "email": DEMO_EMAIL,
            "password": "secret1",
            "confirm_password": "secret1",
        },
    )

    assert response.status_code == 409
    assert b"already registered" in response.data


def test_register_password_mismatch(client):
    """Test that mismatched passwords are rejected before registration."""
    response = client.post(
        "/register",
        data={
            "name": "Mismatch",
            "email": "mismatch@example.com",
            "password": "secret1",
            "confirm_password": "secret2",
        },
    )

    assert response.status_code == 400
    assert b"Passwords do not match" in response.data


def test_logout_clears_session(logged_in_client):
    """Test that logging out removes the token and user from the cookie."""
    # Act
    response = logged_in_client.post("/logout", follow_redirects=True)

    # Assert
    assert b"Logged out. Session cleared." in response.data
    with logged_in_client.session_transaction() as sess:
        assert "auth_token" not in sess
        assert "auth_user" not in sess
    assert logged_in_client.get("/").status_code == 302


def test_half_populated_cookie_is_treated_as_logged_out(client):
    """Test that a token without a user does not grant access."""
    with client.session_transaction() as sess:
        sess["auth_token"] = "orphan-token"

    response = client.get("/")

    assert response.status_code == 302


# =============================================================================
# Dashboard & Task Actions (demo mode)
# =============================================================================


def test_dashboard_lists_demo_tasks(logged_in_client):
    """Test that the dashboard renders every seeded task."""
    response = logged_in_client.get("/")

    assert response.status_code == 200
    for task_id in range(1, 6):
        assert f'data-testid="task-{task_id}"'.encode() in response.data


@pytest.mark.parametrize(
    "query, present, absent",
    [
        ("view=status&status=DONE", [1], [2, 3, 4, 5]),
        ("view=high-priority", [1, 2, 4], [3, 5]),
        ("view=overdue", [4], [1, 5]),
        ("view=search&q=schema", [2], [1, 3, 4, 5]),
    ],
)
def test_dashboard_views_filter_tasks(logged_in_client, query, present, absent):
    """Test that each dashboard view shows only its tasks."""
    response = logged_in_client.get(f"/?{query}")

    assert response.status_code == 200
    for task_id in present:
        assert f'data-testid="task-{task_id}"'.encode() in response.data
    for task_id in absent:
        assert f'data-testid="task-{task_id}"'.encode() not in response.data


def test_dashboard_invalid_status_shows_error(logged_in_client):
    """Test that an unknown status filter flashes an error and shows no rows."""
    response = logged_in_client.get("/?view=status&status=ARCHIVED")

    assert response.status_code == 400
    assert b'data-testid="flash-error"' in response.data
    assert b'data-testid="empty-state"' in response.data


def test_create_task_from_form(logged_in_client):
    """Test that the new-task form creates a task shown on the dashboard."""
    # Act
    response = logged_in_client.post(
        "/tasks",
        data={"title": "Write release notes", "priority": "4", "due_date": "2030-01-01"},
        follow_redirects=True,
    )

    # Assert
    assert b"Task created successfully" in response.data
    assert b'data-testid="task-6"' in response.data
    assert b"Write release notes" in response.data
    assert b"Urgent" in response.data


def test_create_task_without_title_flashes_error(logged_in_client):
    """Test that an empty title is reported and nothing is created."""
    response = logged_in_client.post("/tasks", data={"title": "  "}, follow_redirects=True)

    assert b"Title is required" in response.data
    assert b'data-testid="task-6"' not in response.data


def test_complete_and_reopen_task(logged_in_client, app):
    """Test that complete and reopen change the stored task status."""
    # Arrange
    tasks = app.extensions["taskboard"].demo_tasks

    # Act
    completed = logged_in_client.post("/tasks/3/complete", follow_redirects=True)
    done_status = tasks.get(3).status.value
    reopened = logged_in_client.post("/tasks/3/pending", follow_redirects=True)

    # Assert
    assert b"Task completed" in completed.data
    assert done_status == "DONE"
    assert b"Task reopened" in reopened.data
    assert tasks.get(3).status.value == "TODO"


def test_delete_task(logged_in_client):
    """Test that deleting a task removes it from the dashboard."""
    response = logged_in_client.post("/tasks/5/delete", follow_redirects=True)

    assert b"Task deleted successfully" in response.data
    assert b'data-testid="task-5"' not in response.data


def test_action_on_unknown_task_returns_404(logged_in_client):
    """Test that acting on a missing task is a 404."""
    assert logged_in_client.post("/tasks/999/complete").status_code == 404


# =============================================================================
# Remote Mode
# =============================================================================


@pytest.fixture
def remote_logged_in(fake_api, remote_client):
    """Log the remote client in through the fake auth endpoint."""
    fake_api.route("POST", "/api/auth/login", FakeResponse(200, LOGIN_RESPONSE))
    response = remote_client.post(
        "/login", data={"email": "remote@example.com", "password": "secret1"}
    )
    assert response.status_code == 302
    return remote_client


def test_remote_dashboard_uses_bearer_token(fake_api, remote_logged_in):
    """Test that the dashboard fetches tasks with the session's token."""
    # Arrange
    fake_api.route("GET", "/api/tasks", FakeResponse(200, [task_payload(11, title="From API")]))

    # Act
    response = remote_logged_in.get("/")

    # Assert
    assert response.status_code == 200
    assert b"From API" in response.data
    assert fake_api.last_call()["headers"]["Authorization"] == "Bearer jwt-from-api"


def test_remote_unauthorized_ends_session(fake_api, remote_logged_in):
    """Test that a 401 from the API logs the user out and redirects to login."""
    # Arrange
    fake_api.route("GET", "/api/tasks", FakeResponse(401))

    # Act
    response = remote_logged_in.get("/", follow_redirects=True)

    # Assert
    assert b"Session expired. Please log in again." in response.data
    with remote_logged_in.session_transaction() as sess:
        assert "auth_token" not in sess
        assert "auth_user" not in sess


def test_remote_outage_shows_error_and_empty_list(fake_api, remote_logged_in):
    """Test that a failing API yields a flash message and no rows."""
    fake_api.route("GET", "/api/tasks", FakeResponse(502, text="<html>Bad Gateway</html>"))

    response = remote_logged_in.get("/")

    assert response.status_code == 503
    assert b'data-testid="flash-error"' in response.data
    assert b'data-testid="empty-state"' in response.data


def test_remote_login_rejected(fake_api, remote_client):
    """Test that an API 401 on login is shown as invalid credentials."""
    fake_api.route("POST", "/api/auth/login", FakeResponse(401, {"message": "Bad credentials"}))

    response = remote_client.post(
        "/login", data={"email": "remote@example.com", "password": "wrong1"}
    )

    assert response.status_code == 401
    assert b"Bad credentials" in response.data


def test_remote_health_degraded_without_endpoint(fake_api, remote_client):
    """Test that health reports degraded when no API health endpoint answers."""
    response = remote_client.get("/health")

    assert response.status_code == 503
    assert response.json["status"] == "degraded"


def test_remote_login_unexpected_error_is_handled(fake_api, remote_client):
    """Test that an unexpected auth API answer re-renders login with 503."""
    # Arrange - no route registered, so the fake API answers 404

    # Act
    response = remote_client.post(
        "/login", data={"email": "remote@example.com", "password": "secret1"}
    )

    # Assert
    assert response.status_code == 503
    assert b'data-testid="flash-error"' in response.data
    with remote_client.session_transaction() as sess:
        assert "auth_token" not in sess


def test_remote_register_unexpected_error_is_handled(fake_api, remote_client):
    """Test that an unexpected registration answer re-renders the form with 503."""
    response = remote_client.post(
        "/register",
        data={
            "name": "New Person",
            "email": "new.person@example.com",
            "password": "secret1",
            "confirm_password": "secret1",
        },
    )

    assert response.status_code == 503
    assert b'data-testid="flash-error"' in response.data
    assert b"new.person@example.com" in response.data
