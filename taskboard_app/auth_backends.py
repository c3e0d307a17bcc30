"""
Authentication strategies used by the session store.

Two interchangeable backends are provided and one is chosen at startup:

* ``DemoAuthBackend`` -- an in-memory user directory used when no task API
  is configured.  Passwords are kept as Werkzeug hashes and tokens are
  short-lived HS256 JWTs, so the demo behaves like the real API without
  any network access.
* ``RemoteAuthBackend`` -- forwards login, registration and profile calls
  to the auth endpoints of the task API through the gateway.

Clients treat every token as an opaque bearer string.
"""

from __future__ import annotations

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from .errors import (
    Conflict,
    InvalidCredentials,
    MalformedResponse,
    SessionExpired,
)
from .gateway import Gateway, check_response, error_message, parse_json
from .models import Session, User
from .validation import login_errors, raise_first, registration_errors

if TYPE_CHECKING:
    from .session import SessionStore

logger = logging.getLogger(__name__)

LOGIN_PATH = "/api/auth/login"
REGISTER_PATH = "/api/auth/register"
PROFILE_PATH = "/api/auth/profile"

DEMO_TOKEN_ALGORITHM = "HS256"
REQUIRED_TOKEN_CLAIMS = ["sub", "email", "iat", "exp"]

DEMO_USERS = [
    {"name": "Demo User", "email": "demo@example.com", "password": "demo123", "role": "ADMIN"},
    {"name": "Test User", "email": "test@example.com", "password": "test123", "role": "USER"},
]


class AuthBackend(ABC):
    """Login, registration and profile lookup against some user directory."""

    @abstractmethod
    def login(self, email: str, password: str) -> Session:
        """Exchange credentials for a session."""

    @abstractmethod
    def register(self, name: str, email: str, password: str) -> User:
        """Create an account; does not log in."""

    @abstractmethod
    def profile(self, session: SessionStore) -> User:
        """Return the profile for *session*'s token."""


class DemoAuthBackend(AuthBackend):
    """
    In-memory user directory for demo mode.

    Args:
        token_secret: HMAC secret used to sign demo tokens.
        token_ttl: Lifetime of issued tokens.
        seed_users: Initial accounts; defaults to ``DEMO_USERS``.
    """

    def __init__(
        self,
        token_secret: str,
        token_ttl: timedelta = timedelta(hours=1),
        seed_users: list[dict[str, str]] | None = None,
    ):
        self._token_secret = token_secret
        self._token_ttl = token_ttl
        self._seed_users = list(DEMO_USERS if seed_users is None else seed_users)
        self._lock = threading.Lock()
        self.reset()

    def reset(self) -> None:
        """Restore the seeded accounts and restart id assignment."""
        with self._lock:
            self._users: dict[str, dict[str, Any]] = {}
            self._ids = itertools.count(1)
            for seed in self._seed_users:
                self._add_user(
                    seed["name"], seed["email"], seed["password"], seed.get("role", "USER")
                )

    def _add_user(self, name: str, email: str, password: str, role: str) -> User:
        user = User(id=next(self._ids), name=name, email=email, role=role)
        self._users[email.lower()] = {
            "user": user,
            "password_hash": generate_password_hash(password),
        }
        return user

    def _issue_token(self, user: User) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "iat": int(now.timestamp()),
            "exp": int((now + self._token_ttl).timestamp()),
        }
        return jwt.encode(payload, self._token_secret, algorithm=DEMO_TOKEN_ALGORITHM)

    def login(self, email: str, password: str) -> Session:
        raise_first(login_errors(email, password))
        record = self._users.get(email.strip().lower())
        if record is None or not check_password_hash(record["password_hash"], password):
            raise InvalidCredentials()
        user = record["user"]
        return Session(token=self._issue_token(user), user=user)

    def register(self, name: str, email: str, password: str) -> User:
        raise_first(registration_errors(name, email, password))
        with self._lock:
            if email.strip().lower() in self._users:
                raise Conflict("This email address is already registered")
            return self._add_user(name.strip(), email.strip(), password, "USER")

    def profile(self, session: SessionStore) -> User:
        token = session.token
        if not token:
            raise SessionExpired()
        try:
            claims = jwt.decode(
                token,
                self._token_secret,
                algorithms=[DEMO_TOKEN_ALGORITHM],
                options={"require": REQUIRED_TOKEN_CLAIMS},
            )
        except jwt.InvalidTokenError as exc:
            logger.info("Demo token rejected: %s", exc)
            session.logout()
            raise SessionExpired() from exc

        record = self._users.get(str(claims["email"]).lower())
        if record is None:
            session.logout()
            raise SessionExpired()
        return record["user"]


class RemoteAuthBackend(AuthBackend):
    """Auth strategy backed by the ``/api/auth`` endpoints of the task API."""

    def __init__(self, gateway: Gateway):
        self._gateway = gateway

    def login(self, email: str, password: str) -> Session:
        raise_first(login_errors(email, password))
        response = self._gateway.call_public(
            "POST", LOGIN_PATH, json={"email": email, "password": password}
        )
        if response.status_code in {400, 401}:
            raise InvalidCredentials(error_message(response, InvalidCredentials.default_message))
        check_response(response, "Login")

        payload = parse_json(response, "Login")
        token = payload.get("token") if isinstance(payload, dict) else None
        if not token:
            raise MalformedResponse("Invalid login response received.")
        try:
            user = User.from_dict(payload)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise MalformedResponse("Login response is missing the user profile.") from exc
        return Session(token=token, user=user)

    def register(self, name: str, email: str, password: str) -> User:
        raise_first(registration_errors(name, email, password))
        response = self._gateway.call_public(
            "POST",
            REGISTER_PATH,
            json={"name": name, "email": email, "password": password},
        )
        check_response(response, "Registration")
        payload = parse_json(response, "Registration")
        try:
            return User.from_dict(payload)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise MalformedResponse("Registration response is missing the user.") from exc

    def profile(self, session: SessionStore) -> User:
        if not session.token:
            raise SessionExpired()
        response = self._gateway.bound_to(session).call("GET", PROFILE_PATH)
        check_response(response, "Profile")
        payload = parse_json(response, "Profile")
        try:
            return User.from_dict(payload)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise MalformedResponse("Profile response is malformed.") from exc
