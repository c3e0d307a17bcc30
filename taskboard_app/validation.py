"""
Form and payload validation for the taskboard client.

Validators return a ``{field: message}`` mapping so forms can show every
problem at once, and ``raise_first`` turns such a mapping into a single
field-level ``ValidationError`` for callers that stop at the first one.
``clean_task_fields`` normalises task create/update payloads before they
reach a repository.
"""

from __future__ import annotations

import re
from typing import Any

from .errors import ValidationError
from .models import TaskStatus, parse_date, parse_priority, parse_status

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
NAME_MIN_LENGTH = 2
PASSWORD_MIN_LENGTH = 6

EMAIL_PATTERN = re.compile(r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$", re.IGNORECASE)

TASK_FIELDS = frozenset(
    {"title", "description", "status", "priority", "due_date", "completed"}
)


def raise_first(errors: dict[str, str]) -> None:
    """Raise a ``ValidationError`` for the first entry of *errors*, if any."""
    for field, message in errors.items():
        raise ValidationError(message, field=field)


def _email_error(email: str) -> str | None:
    if not email:
        return "Email is required"
    if not EMAIL_PATTERN.match(email):
        return "Please enter a valid email"
    return None


def login_errors(email: str, password: str) -> dict[str, str]:
    """Validate the login form fields."""
    errors: dict[str, str] = {}
    email_error = _email_error(email.strip())
    if email_error:
        errors["email"] = email_error
    if not password:
        errors["password"] = "Password is required"
    return errors


def registration_errors(
    name: str,
    email: str,
    password: str,
    confirm_password: str | None = None,
) -> dict[str, str]:
    """
    Validate the registration form fields.

    Args:
        name: Display name; at least two characters after stripping.
        email: Address that must look like ``local@domain.tld``.
        password: At least six characters.
        confirm_password: When given, must equal *password*.

    Returns:
        A mapping of field name to error message; empty when valid.
    """
    errors: dict[str, str] = {}

    name = name.strip()
    if not name:
        errors["name"] = "Name is required"
    elif len(name) < NAME_MIN_LENGTH:
        errors["name"] = f"Name must be at least {NAME_MIN_LENGTH} characters"

    email_error = _email_error(email.strip())
    if email_error:
        errors["email"] = email_error

    if not password:
        errors["password"] = "Password is required"
    elif len(password) < PASSWORD_MIN_LENGTH:
        errors["password"] = f"Password must be at least {PASSWORD_MIN_LENGTH} characters"

    if confirm_password is not None:
        if not confirm_password:
            errors["confirm_password"] = "Please confirm your password"
        elif password != confirm_password:
            errors["confirm_password"] = "Passwords do not match"

    return errors


def clean_task_fields(data: dict[str, Any], *, partial: bool = False) -> dict[str, Any]:
    """
    Validate and normalise task fields.

    Strings are stripped, priorities and statuses are coerced to their
    enums and due dates to :class:`datetime.date`.  For create payloads
    (``partial=False``) the title is required.

    Args:
        data: Raw field mapping from a form or caller.
        partial: ``True`` for updates, where every field is optional.

    Returns:
        A new mapping holding only the recognised, normalised fields.

    Raises:
        ValidationError: On unknown fields, an empty or overlong title,
            an overlong description, or an unparseable enum/date value.
    """
    unknown = set(data) - TASK_FIELDS
    if unknown:
        raise ValidationError(f"Unknown task field(s): {', '.join(sorted(unknown))}")

    cleaned: dict[str, Any] = {}

    if "title" in data or not partial:
        title = data.get("title")
        if not isinstance(title, str) or not title.strip():
            raise ValidationError("Title is required", field="title")
        title = title.strip()
        if len(title) > TITLE_MAX_LENGTH:
            raise ValidationError(
                f"Title must be {TITLE_MAX_LENGTH} characters or less", field="title"
            )
        cleaned["title"] = title

    if "description" in data:
        description = data["description"]
        if description is not None:
            description = str(description).strip() or None
        if description and len(description) > DESCRIPTION_MAX_LENGTH:
            raise ValidationError(
                f"Description cannot exceed {DESCRIPTION_MAX_LENGTH} characters",
                field="description",
            )
        cleaned["description"] = description

    if "priority" in data and data["priority"] is not None:
        try:
            cleaned["priority"] = parse_priority(data["priority"])
        except ValueError:
            raise ValidationError("Invalid priority", field="priority") from None

    if "status" in data and data["status"] is not None:
        try:
            cleaned["status"] = parse_status(data["status"])
        except ValueError:
            valid = [s.value for s in TaskStatus]
            raise ValidationError(
                f"Invalid status. Must be one of: {valid}", field="status"
            ) from None

    if "due_date" in data:
        try:
            cleaned["due_date"] = parse_date(data["due_date"])
        except (TypeError, ValueError):
            raise ValidationError(
                "Invalid due date format. Use YYYY-MM-DD", field="due_date"
            ) from None

    if "completed" in data and data["completed"] is not None:
        cleaned["completed"] = bool(data["completed"])

    return cleaned


def reconcile_completion(
    current_status: TaskStatus, changes: dict[str, Any]
) -> tuple[TaskStatus, bool]:
    """
    Resolve the status/completed pair an update should leave behind.

    An explicit status wins and drives ``completed``.  A bare
    ``completed=True`` means DONE; a bare ``completed=False`` reopens a
    DONE task as TODO and leaves any other status alone.

    Raises:
        ValidationError: If the update names both fields with values that
            contradict each other.
    """
    status = changes.get("status")
    completed = changes.get("completed")

    if status is not None:
        if completed is not None and completed != (status is TaskStatus.DONE):
            raise ValidationError(
                "completed must match status (completed iff status is DONE)",
                field="completed",
            )
        return status, status is TaskStatus.DONE

    if completed is True:
        return TaskStatus.DONE, True
    if completed is False and current_status is TaskStatus.DONE:
        return TaskStatus.TODO, False
    return current_status, current_status is TaskStatus.DONE
