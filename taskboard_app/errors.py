"""
Error taxonomy for the taskboard client.

Every failure the data model can surface derives from ``TaskboardError`` so
the frontend can catch one base class at its boundary.  Only
``SessionExpired`` carries a side effect: the gateway clears the session
before raising it.
"""

from __future__ import annotations


class TaskboardError(Exception):
    """Base class for all recoverable taskboard errors."""

    default_message = "Unexpected error. Please try again."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(TaskboardError):
    """
    Malformed input (empty title, password mismatch, bad email ...).

    Attributes:
        field: Name of the offending form field, or ``None`` when the error
            is not tied to a single field.
    """

    default_message = "Invalid input."

    def __init__(self, message: str | None = None, field: str | None = None):
        super().__init__(message)
        self.field = field


class NotFound(TaskboardError):
    """The referenced task or user does not exist."""

    default_message = "Resource not found."


class Conflict(TaskboardError):
    """The resource already exists (e.g. duplicate registration)."""

    default_message = "Resource already exists."


class InvalidCredentials(TaskboardError):
    """Login was rejected; the session is left untouched."""

    default_message = "Invalid email or password."


class SessionExpired(TaskboardError):
    """An authenticated call was rejected; the session has been cleared."""

    default_message = "Session expired. Please log in again."


class NetworkError(TaskboardError):
    """The remote API could not be reached or answered unexpectedly."""

    default_message = "Service unavailable. Please try again later."


class MalformedResponse(NetworkError):
    """The remote API answered with an empty, HTML or non-JSON body."""

    default_message = "Invalid response received from the server."
