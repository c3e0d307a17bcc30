"""
HTML view routes for the taskboard frontend.

Implements the user-facing routes of the task dashboard.  Route handlers
stay thin: they read form fields, call the session store or the task
repository chosen at startup, and turn taskboard errors into flash
messages.  The module is organised into three sections:

1. **Helper functions** -- access to the per-request session store and
   repository, the ``login_required`` decorator and shared error handling.
2. **Authentication routes** -- login, registration and logout.
3. **Task routes** -- the filtered dashboard plus create, complete,
   reopen and delete.

Every failure to load tasks is reported the same way: a flash message and
an empty list with a non-200 status.  ``SessionExpired`` always ends on the
login page because the gateway has already cleared the session.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import wraps

from flask import (
    Blueprint,
    abort,
    current_app,
    flash,
    g,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

from ..errors import (
    Conflict,
    InvalidCredentials,
    NotFound,
    SessionExpired,
    TaskboardError,
    ValidationError,
)
from ..models import Task, TaskPriority, TaskStatus, utc_now
from ..presentation import task_view
from ..repositories import TaskRepository
from ..services import TaskboardServices
from ..session import SessionStore
from ..validation import login_errors, registration_errors

logger = logging.getLogger(__name__)

views_bp = Blueprint("views", __name__)

DASHBOARD_VIEWS = ("all", "status", "overdue", "high-priority", "search")


# =====================================================================
# Helper Functions
# =====================================================================


def _services() -> TaskboardServices:
    return current_app.extensions["taskboard"]


def _session_store() -> SessionStore:
    """Return the session store for this request, backed by the cookie."""
    if "session_store" not in g:
        g.session_store = _services().session_store(session)
    return g.session_store


def _tasks() -> TaskRepository:
    """Return the task repository for this request's session."""
    if "tasks" not in g:
        g.tasks = _services().task_repository(_session_store())
    return g.tasks


def _flash_errors(errors: dict[str, str]) -> None:
    for message in errors.values():
        flash(message, "error")


def _session_expired():
    flash(SessionExpired.default_message, "error")
    return redirect(url_for("views.login"))


def login_required(view_func):
    """
    Decorator that requires an authenticated session for view routes.

    On success the current user is stashed on ``g.current_user``; on
    failure the user is redirected to the login page.
    """

    @wraps(view_func)
    def wrapper(*args, **kwargs):
        store = _session_store()
        user = store.current_user()
        if user is None:
            return redirect(url_for("views.login"))
        g.current_user = user
        return view_func(*args, **kwargs)

    return wrapper


def _run_task_action(action: Callable[[], Task | None], success_message: str):
    """
    Run a task mutation and redirect back to the dashboard.

    Validation and service errors become flash messages; an unknown task
    aborts with 404 and an expired session redirects to the login page.
    """
    try:
        action()
    except SessionExpired:
        return _session_expired()
    except NotFound:
        abort(404)
    except TaskboardError as error:
        flash(error.message, "error")
        return redirect(url_for("views.index"))

    flash(success_message, "success")
    return redirect(url_for("views.index"))


# =====================================================================
# Authentication Routes
# =====================================================================


@views_bp.route("/health", methods=["GET"])
def health_check():
    """
    Return service health, including the task backend's liveness.

    Public endpoint intended for load-balancer and orchestrator probes.
    """
    try:
        backend = _tasks().health()
    except TaskboardError as error:
        logger.warning("Task backend health check failed: %s", error.message)
        return {"status": "degraded", "service": "taskboard", "error": error.message}, 503
    return {"status": "healthy", "service": "taskboard", "backend": backend}, 200


@views_bp.route("/login", methods=["GET"])
def login():
    """Render the login page, or skip it for an authenticated user."""
    if _session_store().is_authenticated():
        return redirect(url_for("views.index"))
    return render_template("login.html", demo_mode=_services().demo_mode)


@views_bp.route("/login", methods=["POST"])
def login_submit():
    """
    Handle login form submission.

    Returns:
        A redirect to the dashboard on success, or the re-rendered login
        page with a flash message and a matching error status.
    """
    email = request.form.get("email", "").strip()
    password = request.form.get("password", "")
    errors = login_errors(email, password)
    if errors:
        _flash_errors(errors)
        return render_template("login.html", email=email), 400

    try:
        _session_store().login(email, password)
    except ValidationError as error:
        flash(error.message, "error")
        return render_template("login.html", email=email), 400
    except InvalidCredentials as error:
        flash(error.message, "error")
        return render_template("login.html", email=email), 401
    except TaskboardError as error:
        flash(error.message, "error")
        return render_template("login.html", email=email), 503

    flash("Logged in successfully.", "success")
    return redirect(url_for("views.index"))


@views_bp.route("/register", methods=["GET"])
def register():
    """Render the registration page, or skip it for an authenticated user."""
    if _session_store().is_authenticated():
        return redirect(url_for("views.index"))
    return render_template("register.html")


@views_bp.route("/register", methods=["POST"])
def register_submit():
    """
    Handle registration form submission.

    Registration does not log the user in; on success they are sent to
    the login page.
    """
    name = request.form.get("name", "").strip()
    email = request.form.get("email", "").strip()
    password = request.form.get("password", "")
    confirm_password = request.form.get("confirm_password", "")

    errors = registration_errors(name, email, password, confirm_password)
    if errors:
        _flash_errors(errors)
        return render_template("register.html", name=name, email=email), 400

    try:
        _session_store().register(name, email, password)
    except ValidationError as error:
        flash(error.message, "error")
        return render_template("register.html", name=name, email=email), 400
    except Conflict as error:
        flash(error.message, "error")
        return render_template("register.html", name=name, email=email), 409
    except TaskboardError as error:
        flash(error.message, "error")
        return render_template("register.html", name=name, email=email), 503

    flash("Registration successful. Please log in.", "success")
    return redirect(url_for("views.login"))


@views_bp.route("/logout", methods=["POST"])
def logout():
    """Clear the session and return to the login page."""
    _session_store().logout()
    flash("Logged out. Session cleared.", "success")
    return redirect(url_for("views.login"))


# =====================================================================
# Task Routes
# =====================================================================


def _render_index(
    tasks: list[Task],
    *,
    view: str,
    status_filter: str,
    query: str,
    status_code: int = 200,
):
    now = utc_now()
    return (
        render_template(
            "index.html",
            rows=[task_view(task, now) for task in tasks],
            statuses=TaskStatus,
            priorities=TaskPriority,
            views=DASHBOARD_VIEWS,
            current_view=view,
            current_status=status_filter,
            query=query,
            current_user=g.current_user,
        ),
        status_code,
    )


@views_bp.route("/")
@login_required
def index():
    """
    Render the dashboard.

    Query parameters:
        view: ``all`` (default), ``status``, ``overdue``,
            ``high-priority`` or ``search``.
        status: Status for ``view=status``.
        q: Search text for ``view=search``.
    """
    view = request.args.get("view", "all")
    status_filter = request.args.get("status", "")
    query = request.args.get("q", "")
    if view not in DASHBOARD_VIEWS:
        view = "all"

    repository = _tasks()
    render_args = {"view": view, "status_filter": status_filter, "query": query}
    try:
        if view == "status":
            tasks = repository.by_status(status_filter or TaskStatus.TODO.value)
        elif view == "overdue":
            tasks = repository.overdue(utc_now())
        elif view == "high-priority":
            tasks = repository.high_priority()
        elif view == "search":
            tasks = repository.search(query)
        else:
            tasks = repository.list()
    except SessionExpired:
        return _session_expired()
    except ValidationError as error:
        flash(error.message, "error")
        return _render_index([], status_code=400, **render_args)
    except TaskboardError as error:
        flash(error.message, "error")
        return _render_index([], status_code=503, **render_args)

    return _render_index(tasks, **render_args)


@views_bp.route("/tasks", methods=["POST"])
@login_required
def create_task():
    """Handle the new-task form on the dashboard."""
    return _run_task_action(
        lambda: _tasks().create(
            title=request.form.get("title", ""),
            description=request.form.get("description") or None,
            priority=request.form.get("priority") or TaskPriority.MEDIUM,
            due_date=request.form.get("due_date") or None,
        ),
        "Task created successfully",
    )


@views_bp.route("/tasks/<int:task_id>/complete", methods=["POST"])
@login_required
def complete_task(task_id: int):
    """Mark a task DONE."""
    return _run_task_action(lambda: _tasks().complete(task_id), "Task completed")


@views_bp.route("/tasks/<int:task_id>/pending", methods=["POST"])
@login_required
def reopen_task(task_id: int):
    """Reopen a task as TODO."""
    return _run_task_action(lambda: _tasks().mark_pending(task_id), "Task reopened")


@views_bp.route("/tasks/<int:task_id>/delete", methods=["POST"])
@login_required
def delete_task(task_id: int):
    """Delete a task."""
    return _run_task_action(lambda: _tasks().delete(task_id), "Task deleted successfully")
