# src/tasuki/tasks/task_models.py

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum, IntEnum, StrEnum
from typing import Any

TaskId = str


class TaskStatus(StrEnum):
    PENDING = "pending"
    DONE = "done"


class Priority(IntEnum):
    """Ordered priority: NONE < LOW < MEDIUM < HIGH."""

    NONE = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3

    @classmethod
    def from_name(cls, raw: str | None) -> Priority:
        if not raw:
            return cls.NONE
        try:
            return cls[raw.strip().upper()]
        except KeyError:
            return cls.NONE


class BackendSource(StrEnum):
    """
    Where a task lives.

    The value doubles as the backend short name, i.e. the identifier prefix.
    """

    LOCAL_FILE = "local"
    OBSIDIAN = "obsidian"

    @property
    def icon(self) -> str:
        return "■" if self is BackendSource.LOCAL_FILE else "◆"


class _Unset(Enum):
    UNSET = "UNSET"

    def __repr__(self) -> str:
        return "UNSET"


# Marker for "leave unchanged" where None already means "clear".
UNSET = _Unset.UNSET


_ISO_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def parse_iso_date(raw: str) -> date | None:
    """Strict YYYY-MM-DD (no week dates, no compact form). None if invalid."""
    if not _ISO_DATE_RE.fullmatch(raw):
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return None


def at_midnight(d: date | None) -> datetime | None:
    return datetime.combine(d, time()) if d is not None else None


@dataclass(frozen=True, slots=True)
class TaskRecord:
    id: TaskId
    title: str
    status: TaskStatus
    priority: Priority
    due: date | None
    tags: list[str]
    source: BackendSource

    source_line: int | None = None
    source_path: str | None = None
    created_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def is_done(self) -> bool:
        return self.status is TaskStatus.DONE

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready view (enums as strings, dates in ISO format)."""
        return {
            "id": self.id,
            "title": self.title,
            "status": self.status.value,
            "priority": self.priority.name.lower(),
            "due": self.due.isoformat() if self.due else None,
            "tags": list(self.tags),
            "source": self.source.value,
            "source_line": self.source_line,
            "source_path": self.source_path,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


@dataclass(frozen=True, slots=True)
class NewTaskRequest:
    title: str
    priority: Priority = Priority.NONE
    due: date | None = None
    tags: list[str] = field(default_factory=list)
    source: BackendSource = BackendSource.LOCAL_FILE


@dataclass(frozen=True, slots=True)
class TaskUpdate:
    """
    Partial update.

    None means "leave unchanged" for every field except `due`, where the
    UNSET marker plays that role and None clears the due date.
    """

    title: str | None = None
    status: TaskStatus | None = None
    priority: Priority | None = None
    due: date | None | _Unset = UNSET
    tags: list[str] | None = None

    @property
    def changes_due(self) -> bool:
        return self.due is not UNSET


@dataclass(frozen=True, slots=True)
class TaskFilter:
    status: TaskStatus | None = None
    due_before: date | None = None
    due_after: date | None = None
    search: str | None = None

    def matches(self, task: TaskRecord) -> bool:
        if self.status is not None and task.status is not self.status:
            return False
        if self.due_before is not None and (task.due is None or task.due > self.due_before):
            return False
        if self.due_after is not None and (task.due is None or task.due < self.due_after):
            return False
        if self.search:
            if self.search.lower() not in task.title.lower():
                return False
        return True

    def apply(self, tasks: list[TaskRecord]) -> list[TaskRecord]:
        return [t for t in tasks if self.matches(t)]

    @classmethod
    def for_view(cls, view: str, today: date) -> TaskFilter:
        """
        Named list views:
        - today:    pending, due on or before today (overdue included)
        - upcoming: pending, due after today
        - done:     completed tasks
        - all / anything else: no constraint
        """
        name = (view or "").strip().lower()
        if name == "today":
            return cls(status=TaskStatus.PENDING, due_before=today)
        if name == "upcoming":
            return cls(status=TaskStatus.PENDING, due_after=today + timedelta(days=1))
        if name == "done":
            return cls(status=TaskStatus.DONE)
        return cls()
