"""
Session-aware request gateway.

Centralises HTTP communication with the task API.  Authenticated calls
carry the session's bearer token and react to authorization failures by
clearing the session before raising ``SessionExpired``; public calls
(login, registration) never touch the session.  Transport failures from
:mod:`requests` are wrapped in ``NetworkError`` so callers only deal with
the taskboard error taxonomy.

Key Concepts Demonstrated:
- Bearer-token injection in one place instead of at every call site
- Per-call timeouts taken from configuration
- Safe JSON parsing that rejects empty and HTML bodies
- Mapping HTTP status codes onto domain exceptions
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import requests

from .errors import (
    Conflict,
    MalformedResponse,
    NetworkError,
    NotFound,
    SessionExpired,
    ValidationError,
)

if TYPE_CHECKING:
    from .session import SessionStore

logger = logging.getLogger(__name__)


def error_message(response: requests.Response, default: str) -> str:
    """
    Extract an error message from a JSON API response if possible.

    Reads the ``message`` or ``error`` field of the body and falls back to
    *default* when the body is not JSON or neither field is usable.
    """
    try:
        payload = response.json()
    except ValueError:
        return default
    if not isinstance(payload, dict):
        return default
    for key in ("message", "error"):
        message = payload.get(key)
        if isinstance(message, str) and message.strip():
            return message
    return default


def parse_json(response: requests.Response, context: str = "API call") -> Any:
    """
    Decode a response body as JSON.

    Args:
        response: The response to decode.
        context: Short description of the call, used in error messages.

    Raises:
        MalformedResponse: If the body is empty, looks like an HTML error
            page, or is not valid JSON.
    """
    body = response.text or ""
    if not body.strip():
        raise MalformedResponse(f"Empty response from {context}")
    if body.lstrip().startswith("<"):
        logger.error("%s returned HTML instead of JSON (status=%s)", context, response.status_code)
        raise MalformedResponse(f"{context} returned HTML instead of JSON")
    try:
        return json.loads(body)
    except ValueError as exc:
        logger.error("%s returned invalid JSON: %s", context, exc)
        raise MalformedResponse(f"Invalid JSON in {context} response") from exc


def check_response(response: requests.Response, context: str = "API call") -> requests.Response:
    """
    Map an unsuccessful response onto the error taxonomy.

    Returns *response* unchanged for 2xx codes.

    Raises:
        ValidationError: For 400 responses.
        NotFound: For 404 responses.
        Conflict: For 409 responses.
        NetworkError: For any other non-2xx response.
    """
    status = response.status_code
    if 200 <= status < 300:
        return response
    if status == 400:
        raise ValidationError(error_message(response, f"{context}: invalid request"))
    if status == 404:
        raise NotFound(error_message(response, f"{context}: not found"))
    if status == 409:
        raise Conflict(error_message(response, f"{context}: conflict"))
    logger.warning("%s failed with unexpected status %s", context, status)
    raise NetworkError(error_message(response, f"{context} failed ({status})"))


class Gateway:
    """
    Outbound HTTP gateway for the task API.

    A gateway may be *bound* to a :class:`~taskboard_app.session.SessionStore`;
    only bound gateways attach tokens and clear sessions.

    Attributes:
        base_url: Root URL of the API (``http://host:8080``).
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 5,
        session: SessionStore | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session

    def bound_to(self, session: SessionStore) -> Gateway:
        """Return a gateway with the same target that uses *session*'s token."""
        return Gateway(self.base_url, self.timeout, session=session)

    def url(self, path: str) -> str:
        """Join the base URL and *path* without doubling slashes."""
        return f"{self.base_url}/{path.lstrip('/')}"

    def _send(self, method: str, path: str, headers: dict[str, str], **kwargs) -> requests.Response:
        url = self.url(path)
        try:
            return requests.request(
                method=method,
                url=url,
                headers=headers,
                timeout=self.timeout,
                **kwargs,
            )
        except requests.Timeout as exc:
            logger.warning("%s %s timed out after %ss", method, url, self.timeout)
            raise NetworkError("Service timed out. Please try again.") from exc
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise NetworkError() from exc

    def call(self, method: str, path: str, **kwargs) -> requests.Response:
        """
        Send an authenticated request.

        Attaches ``Authorization: Bearer <token>`` when the bound session
        holds a token.  A 401 response clears the session.

        Args:
            method: HTTP method (``"GET"``, ``"POST"`` ...).
            path: Path relative to the base URL.
            **kwargs: Forwarded to :func:`requests.request` (``json``,
                ``params`` ...).

        Returns:
            The raw response for any status other than 401.

        Raises:
            SessionExpired: On a 401 response.
            NetworkError: On timeouts and connection failures.
        """
        extra_headers = kwargs.pop("headers", {})
        headers = {"Content-Type": "application/json", **extra_headers}
        token = self._session.token if self._session is not None else None
        if token:
            headers["Authorization"] = f"Bearer {token}"

        response = self._send(method, path, headers, **kwargs)

        if response.status_code == 401:
            logger.info("%s %s rejected with 401; clearing session", method, path)
            if self._session is not None:
                self._session.logout()
            raise SessionExpired()
        return response

    def call_public(self, method: str, path: str, **kwargs) -> requests.Response:
        """
        Send an unauthenticated request.

        No token is attached and a 401 response is returned to the caller
        untouched; login uses this to report bad credentials.
        """
        extra_headers = kwargs.pop("headers", {})
        headers = {"Content-Type": "application/json", **extra_headers}
        return self._send(method, path, headers, **kwargs)
