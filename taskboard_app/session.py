"""
Session store for the taskboard client.

Holds the bearer token and the user profile of the current client.  The
backing storage is any mutable mapping -- a plain ``dict`` in tests, the
signed Flask session cookie in the frontend -- so isolated stores can be
created freely instead of relying on a hidden module-level singleton.

The token and the user are always written and removed together; storage
that holds only one of them is treated as unauthenticated and cleaned up.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Any

from .errors import TaskboardError
from .models import Session, User

if TYPE_CHECKING:
    from .auth_backends import AuthBackend

logger = logging.getLogger(__name__)

TOKEN_KEY = "auth_token"
USER_KEY = "auth_user"


class SessionStore:
    """
    Authenticated identity of one client.

    Args:
        backend: Auth strategy (demo directory or remote API) used for
            login, registration and profile lookups.
        storage: Mutable mapping that persists ``auth_token`` and
            ``auth_user`` between calls.  Defaults to a fresh ``dict``.
    """

    def __init__(self, backend: AuthBackend, storage: MutableMapping[str, Any] | None = None):
        self._backend = backend
        self._storage: MutableMapping[str, Any] = storage if storage is not None else {}

    def _consistent(self) -> bool:
        has_token = bool(self._storage.get(TOKEN_KEY))
        has_user = bool(self._storage.get(USER_KEY))
        if has_token != has_user:
            logger.warning("Discarding half-populated session state")
            self.logout()
            return False
        return has_token

    def _store(self, session: Session) -> None:
        self._storage[TOKEN_KEY] = session.token
        self._storage[USER_KEY] = session.user.to_dict()

    @property
    def token(self) -> str | None:
        """The current bearer token, or ``None`` when unauthenticated."""
        if not self._consistent():
            return None
        return self._storage[TOKEN_KEY]

    def is_authenticated(self) -> bool:
        """Return True iff a token (and its user) is present."""
        return self._consistent()

    def current_user(self) -> User | None:
        """Return the logged-in user, or ``None``."""
        if not self._consistent():
            return None
        return User.from_dict(self._storage[USER_KEY])

    def login(self, email: str, password: str) -> Session:
        """
        Authenticate and store the resulting session.

        On any failure the stored session is left exactly as it was and
        the error propagates.

        Raises:
            ValidationError: If the credentials are malformed.
            InvalidCredentials: If the backend rejects them.
            NetworkError: If the backend cannot be reached.
        """
        email = email.strip()
        try:
            session = self._backend.login(email, password)
        except TaskboardError as exc:
            logger.info("Login failed for %s: %s", email, exc.message)
            raise
        self._store(session)
        logger.info("User %s logged in", session.user.email)
        return session

    def register(self, name: str, email: str, password: str) -> User:
        """
        Create an account upstream without logging in.

        Raises:
            ValidationError: For malformed input.
            Conflict: If the email is already registered.
            NetworkError: If the backend cannot be reached.
        """
        user = self._backend.register(name.strip(), email.strip(), password)
        logger.info("Registered user %s", user.email)
        return user

    def refresh_profile(self) -> User:
        """
        Reload the user profile for the stored token.

        Raises:
            SessionExpired: If there is no session or the token was
                rejected; the session is cleared in both cases.
        """
        user = self._backend.profile(self)
        if self._consistent():
            self._storage[USER_KEY] = user.to_dict()
        return user

    def logout(self) -> None:
        """Clear token and user. Safe to call when already logged out."""
        self._storage.pop(TOKEN_KEY, None)
        self._storage.pop(USER_KEY, None)
