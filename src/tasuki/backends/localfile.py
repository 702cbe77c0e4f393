# src/tasuki/backends/localfile.py

"""
Flat-file backend: one todo.txt-style file, one task per line.

Line grammar (canonical order, which is also the order format_line emits):

    [x <completed>] [(p1)|(p2)|(p3)] [<created>] title words [#tag ...] [due:YYYY-MM-DD]

Parsing is token based and greedy; tags and due: may appear anywhere after the
creation date. Blank lines, comments (# ...) and lines without title words are
not tasks. The task id is "local:<line number>".
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, replace
from datetime import date
from pathlib import Path
from typing import Any

from ..config import default_data_dir
from ..errors import ConfigError, ParseError, TaskIOError
from ..tasks.task_models import (
    BackendSource,
    NewTaskRequest,
    Priority,
    TaskFilter,
    TaskId,
    TaskRecord,
    TaskStatus,
    TaskUpdate,
    at_midnight,
    parse_iso_date,
)
from . import line_mutator

logger = logging.getLogger(__name__)

BACKEND_NAME = BackendSource.LOCAL_FILE.value

PRIORITY_MARKERS: dict[str, Priority] = {
    "(p1)": Priority.HIGH,
    "(p2)": Priority.MEDIUM,
    "(p3)": Priority.LOW,
}
MARKER_FOR_PRIORITY: dict[Priority, str] = {v: k for k, v in PRIORITY_MARKERS.items()}

_TASK_ID_RE = re.compile(r"local:([0-9]+)")


@dataclass(frozen=True, slots=True)
class ParsedLine:
    title: str
    status: TaskStatus
    priority: Priority
    due: date | None
    tags: list[str]
    created: date | None
    completed: date | None


def parse_line(line: str) -> ParsedLine | None:
    text = line.strip()
    if not text or text.startswith("#"):
        return None

    tokens = text.split()
    i = 0

    status = TaskStatus.PENDING
    completed: date | None = None
    if len(tokens) > 1 and tokens[0] == "x":
        status = TaskStatus.DONE
        i = 1
        completed = parse_iso_date(tokens[i])
        if completed is not None:
            i += 1

    priority = Priority.NONE
    if i < len(tokens) and tokens[i] in PRIORITY_MARKERS:
        priority = PRIORITY_MARKERS[tokens[i]]
        i += 1

    created: date | None = None
    if i < len(tokens):
        created = parse_iso_date(tokens[i])
        if created is not None:
            i += 1

    title_parts: list[str] = []
    tags: list[str] = []
    due: date | None = None

    for word in tokens[i:]:
        if word.startswith("#"):
            if len(word) > 1:
                tags.append(word[1:])
            continue
        if word.startswith("due:"):
            parsed = parse_iso_date(word[4:])
            if parsed is not None:
                due = parsed
                continue
        title_parts.append(word)

    title = " ".join(title_parts)
    if not title:
        return None

    return ParsedLine(
        title=title,
        status=status,
        priority=priority,
        due=due,
        tags=tags,
        created=created,
        completed=completed,
    )


def format_line(
    *,
    title: str,
    status: TaskStatus = TaskStatus.PENDING,
    priority: Priority = Priority.NONE,
    due: date | None = None,
    tags: list[str] | None = None,
    created: date | None = None,
    completed: date | None = None,
    today: date | None = None,
) -> str:
    parts: list[str] = []

    if status is TaskStatus.DONE:
        parts.append("x")
        parts.append((completed or today or date.today()).isoformat())

    if priority is not Priority.NONE:
        parts.append(MARKER_FOR_PRIORITY[priority])

    if created is not None:
        parts.append(created.isoformat())

    parts.append(title)
    parts.extend(f"#{tag}" for tag in tags or [])

    if due is not None:
        parts.append(f"due:{due.isoformat()}")

    return " ".join(parts)


def _fields(parsed: ParsedLine) -> tuple[Any, ...]:
    return (parsed.title, parsed.status, parsed.priority, parsed.due, parsed.tags)


def parse_task_id(task_id: TaskId) -> int:
    m = _TASK_ID_RE.fullmatch(task_id or "")
    if not m:
        raise ParseError(f"Invalid task ID: {task_id}")
    return int(m.group(1))


@dataclass(frozen=True, slots=True)
class LocalFileConfig:
    path: Path

    @staticmethod
    def default_path() -> Path:
        return default_data_dir() / "todo.txt"

    @classmethod
    def from_table(cls, table: dict[str, Any]) -> LocalFileConfig:
        raw = table.get("path")
        if raw is not None and not isinstance(raw, (str, Path)):
            raise ConfigError("local.path must be a string")
        path = Path(raw).expanduser() if raw else cls.default_path()

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigError(f"Failed to create {path.parent}: {e}") from e

        return cls(path=path)


class LocalFileBackend:
    """Single todo.txt file. Line numbers are the only persistent handle."""

    def __init__(self, config: LocalFileConfig) -> None:
        self._config = config

    @property
    def name(self) -> str:
        return BACKEND_NAME

    @property
    def source(self) -> BackendSource:
        return BackendSource.LOCAL_FILE

    @property
    def path(self) -> Path:
        return self._config.path

    def _to_record(self, parsed: ParsedLine, line_num: int) -> TaskRecord:
        return TaskRecord(
            id=f"{BACKEND_NAME}:{line_num}",
            title=parsed.title,
            status=parsed.status,
            priority=parsed.priority,
            due=parsed.due,
            tags=list(parsed.tags),
            source=BackendSource.LOCAL_FILE,
            source_line=line_num,
            source_path=str(self.path),
            created_at=at_midnight(parsed.created),
            completed_at=at_midnight(parsed.completed),
        )

    def read_tasks(self) -> list[TaskRecord]:
        if not self.path.exists():
            return []

        tasks: list[TaskRecord] = []
        for idx, line in enumerate(line_mutator.read_lines(self.path), start=1):
            parsed = parse_line(line)
            if parsed is not None:
                tasks.append(self._to_record(parsed, idx))
        return tasks

    def _require_file(self) -> None:
        if not self.path.exists():
            raise TaskIOError(f"todo.txt not found: {self.path}")

    # ---- sync implementations (run in a worker thread) ----

    def _create(self, request: NewTaskRequest) -> TaskRecord:
        today = date.today()
        line = format_line(
            title=request.title.strip(),
            priority=request.priority,
            due=request.due,
            tags=list(request.tags),
            created=today,
        )
        parsed = parse_line(line)
        if parsed is None:
            raise ParseError(f"Not a valid task title: {request.title!r}")

        line_num = line_mutator.append_line(self.path, line)
        logger.info("Task created id=%s:%s path=%s", BACKEND_NAME, line_num, self.path)
        return self._to_record(parsed, line_num)

    def _update(self, task_id: TaskId, update: TaskUpdate) -> TaskRecord:
        line_num = parse_task_id(task_id)
        self._require_file()

        today = date.today()
        result: dict[str, ParsedLine] = {}

        def transform(current: str) -> str:
            parsed = parse_line(current)
            if parsed is None:
                raise ParseError(f"Could not parse line {line_num}")

            merged = replace(
                parsed,
                title=update.title if update.title is not None else parsed.title,
                status=update.status if update.status is not None else parsed.status,
                priority=update.priority if update.priority is not None else parsed.priority,
                due=update.due if update.changes_due else parsed.due,  # type: ignore[arg-type]
                tags=list(update.tags) if update.tags is not None else parsed.tags,
            )
            if merged.status is TaskStatus.DONE and merged.completed is None:
                merged = replace(merged, completed=today)
            elif merged.status is TaskStatus.PENDING:
                merged = replace(merged, completed=None)

            line = format_line(
                title=merged.title,
                status=merged.status,
                priority=merged.priority,
                due=merged.due,
                tags=merged.tags,
                created=merged.created,
                completed=merged.completed,
            )
            # The written line must read back as the same task.
            written = parse_line(line)
            if written is None:
                raise ParseError(f"Update would leave task {task_id} without a title")
            if _fields(written) != _fields(merged):
                raise ParseError(f"Update of task {task_id} would not read back: {line!r}")

            result["task"] = written
            return line

        line_mutator.modify_line(self.path, line_num, transform)
        logger.info("Task updated id=%s status=%s", task_id, result["task"].status.value)
        return self._to_record(result["task"], line_num)

    def _delete(self, task_id: TaskId) -> None:
        line_num = parse_task_id(task_id)
        self._require_file()
        line_mutator.remove_line(self.path, line_num)
        logger.info("Task deleted id=%s path=%s", task_id, self.path)

    # ---- TaskBackend ----

    async def fetch_tasks(self, task_filter: TaskFilter) -> list[TaskRecord]:
        tasks = await asyncio.to_thread(self.read_tasks)
        return task_filter.apply(tasks)

    async def create_task(self, request: NewTaskRequest) -> TaskRecord:
        return await asyncio.to_thread(self._create, request)

    async def update_task(self, task_id: TaskId, update: TaskUpdate) -> TaskRecord:
        return await asyncio.to_thread(self._update, task_id, update)

    async def complete_task(self, task_id: TaskId) -> TaskRecord:
        return await self.update_task(task_id, TaskUpdate(status=TaskStatus.DONE))

    async def uncomplete_task(self, task_id: TaskId) -> TaskRecord:
        return await self.update_task(task_id, TaskUpdate(status=TaskStatus.PENDING))

    async def delete_task(self, task_id: TaskId) -> None:
        await asyncio.to_thread(self._delete, task_id)
