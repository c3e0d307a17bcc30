"""
Client-side data models for the taskboard.

Defines the task and user records shared by the repository, the session
store and the frontend views, along with the status and priority
enumerations.  Records convert to and from the camelCase JSON shape used by
the remote task API (``dueDate``, ``createdAt`` ...), so the in-memory and
remote repositories hand out identical objects.

Key Concepts Demonstrated:
- ``str``/``Enum`` dual inheritance for JSON-friendly status values
- ``IntEnum`` ranks for priorities that compare numerically
- Dataclass records with explicit wire (de)serialisation helpers
- Timezone-aware datetime handling (UTC normalisation)
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from enum import Enum, IntEnum
from typing import Any


class TaskStatus(str, Enum):
    """
    Task lifecycle statuses.

    Inherits from ``str`` so members compare equal to the raw strings the
    task API returns and serialise without ``.value`` access.
    """

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


class TaskPriority(IntEnum):
    """
    Task priority ranks.

    Ranks are ordered so that "high priority" is simply
    ``priority >= TaskPriority.HIGH``.
    """

    LOW = 1
    MEDIUM = 2
    HIGH = 3
    URGENT = 4


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """
    Normalise a datetime to UTC.

    Naive datetimes (no ``tzinfo``) are assumed to already represent UTC
    and have the timezone attached.  Aware datetimes are converted.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_status(value: Any) -> TaskStatus:
    """
    Coerce a raw status value into a :class:`TaskStatus`.

    Raises:
        ValueError: If *value* is not one of the known statuses.
    """
    if isinstance(value, TaskStatus):
        return value
    return TaskStatus(str(value).strip().upper())


def parse_priority(value: Any) -> TaskPriority:
    """
    Coerce a raw priority into a :class:`TaskPriority`.

    Accepts the enum itself, an integer rank (``3``), a numeric string
    (``"3"``) or an enum name (``"HIGH"``); the task API has been seen to
    send both forms.

    Raises:
        ValueError: If *value* does not name a known priority.
    """
    if isinstance(value, TaskPriority):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid priority: {value!r}")
    if isinstance(value, int):
        return TaskPriority(value)
    text = str(value).strip()
    if text.isdigit():
        return TaskPriority(int(text))
    try:
        return TaskPriority[text.upper()]
    except KeyError:
        raise ValueError(f"Invalid priority: {value!r}") from None


def parse_date(value: Any) -> date | None:
    """
    Parse a due date from the wire.

    Accepts ``YYYY-MM-DD`` strings, full ISO-8601 timestamps (the time part
    is discarded), :class:`date` and :class:`datetime` objects.

    Raises:
        ValueError: If a non-empty string cannot be parsed.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if len(text) > 10:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    return date.fromisoformat(text)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp into an aware UTC datetime, or ``None``."""
    if not value:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    try:
        return ensure_utc(datetime.fromisoformat(str(value).replace("Z", "+00:00")))
    except ValueError:
        return None


def _to_utc_iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    return ensure_utc(value).isoformat()


@dataclass
class Task:
    """
    A unit of work tracked by the taskboard.

    Attributes:
        id: Repository-assigned identifier, never reused.
        title: Short non-empty summary.
        description: Optional longer text.
        status: Current lifecycle status (see ``TaskStatus``).
        priority: Importance rank (see ``TaskPriority``).
        due_date: Optional calendar deadline (no time of day).
        completed: Mirrors ``status == DONE``.
        created_at: Creation timestamp (UTC).
        updated_at: Last modification timestamp (UTC).
    """

    id: int
    title: str
    description: str | None = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: date | None = None
    completed: bool = False
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        """
        Build a task from a wire payload.

        Missing timestamps default to "now"; ``completed`` is always
        derived from the status so a sloppy payload cannot break the
        status/completed pairing.

        Raises:
            KeyError: If ``id`` or ``title`` is missing.
            ValueError: If status, priority or due date are malformed.
        """
        status = parse_status(data.get("status") or TaskStatus.TODO)
        created_at = parse_timestamp(data.get("createdAt")) or utc_now()
        return cls(
            id=int(data["id"]),
            title=data["title"],
            description=data.get("description"),
            status=status,
            priority=parse_priority(data.get("priority") or TaskPriority.MEDIUM),
            due_date=parse_date(data.get("dueDate")),
            completed=status is TaskStatus.DONE,
            created_at=created_at,
            updated_at=parse_timestamp(data.get("updatedAt")) or created_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise the task to the camelCase JSON shape of the task API."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "priority": int(self.priority),
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "completed": self.completed,
            "createdAt": _to_utc_iso(self.created_at),
            "updatedAt": _to_utc_iso(self.updated_at),
        }

    def copy(self) -> Task:
        """Return a detached copy so callers cannot mutate stored state."""
        return replace(self)

    def __repr__(self) -> str:
        return f"<Task {self.id}: {self.title}>"


@dataclass(frozen=True)
class User:
    """Authenticated identity as returned by the auth API."""

    id: int
    name: str
    email: str
    role: str = "USER"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> User:
        """
        Build a user from an auth API payload.

        The login response carries the profile fields at top level, the
        profile endpoint may nest them under ``user``; both are accepted.
        """
        if isinstance(data.get("user"), dict):
            data = data["user"]
        return cls(
            id=int(data["id"]),
            name=str(data.get("name") or ""),
            email=str(data["email"]),
            role=str(data.get("role") or "USER"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "email": self.email, "role": self.role}


@dataclass(frozen=True)
class Session:
    """The bearer token and user held by an authenticated client."""

    token: str
    user: User
