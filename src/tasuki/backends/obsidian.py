# src/tasuki/backends/obsidian.py

"""
Markdown vault backend (Obsidian-style notes with checkbox tasks).

Task ids are "obsidian:<vault-relative path>:<line>". complete/uncomplete only
swap the checkbox marker; update rewrites the whole line in canonical order and
drops metadata the codec does not model (creation/completion dates, recurrence,
scheduled/start/id annotations).
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any

from ..config import DEFAULT_IGNORE_FOLDERS, DEFAULT_INBOX_FILE
from ..errors import BackendError, ConfigError, LineRangeError, ParseError, TaskIOError
from ..tasks.task_models import (
    BackendSource,
    NewTaskRequest,
    TaskFilter,
    TaskId,
    TaskRecord,
    TaskStatus,
    TaskUpdate,
    at_midnight,
)
from . import checklist, line_mutator
from .checklist import ParsedTask
from .vault_scanner import markdown_files, relative_posix

logger = logging.getLogger(__name__)

BACKEND_NAME = checklist.BACKEND_NAME

# (current line, parsed task) -> replacement line, or None to delete it
LineChange = Callable[[str, ParsedTask], str | None]


def _str_list(table: dict[str, Any], key: str) -> list[str] | None:
    raw = table.get(key)
    if raw is None:
        return None
    if not isinstance(raw, (list, tuple)):
        raise ConfigError(f"obsidian.{key} must be a list of strings")
    return [str(v) for v in raw if isinstance(v, str)]


@dataclass(frozen=True, slots=True)
class VaultConfig:
    vault_path: Path
    folders: list[str] | None = None
    ignore_folders: list[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_FOLDERS))
    inbox_file: str = DEFAULT_INBOX_FILE

    @classmethod
    def from_table(cls, table: dict[str, Any]) -> VaultConfig:
        raw = table.get("vault_path")
        if not raw or not isinstance(raw, (str, Path)):
            raise ConfigError("obsidian.vault_path is required")

        ignore = _str_list(table, "ignore_folders")
        inbox = table.get("inbox_file") or DEFAULT_INBOX_FILE
        if not isinstance(inbox, str):
            raise ConfigError("obsidian.inbox_file must be a string")

        return cls(
            vault_path=Path(raw).expanduser(),
            folders=_str_list(table, "folders"),
            ignore_folders=ignore if ignore is not None else list(DEFAULT_IGNORE_FOLDERS),
            inbox_file=inbox,
        )


class VaultBackend:
    def __init__(self, config: VaultConfig) -> None:
        self._config = config

    @property
    def name(self) -> str:
        return BACKEND_NAME

    @property
    def source(self) -> BackendSource:
        return BackendSource.OBSIDIAN

    @property
    def config(self) -> VaultConfig:
        return self._config

    def _error(self, message: str) -> BackendError:
        return BackendError(BACKEND_NAME, message)

    def _to_record(self, parsed: ParsedTask, rel_path: str, abs_path: Path, line_num: int) -> TaskRecord:
        return TaskRecord(
            id=checklist.make_task_id(rel_path, line_num),
            title=parsed.title,
            status=parsed.status,
            priority=parsed.priority,
            due=parsed.due,
            tags=list(parsed.tags),
            source=BackendSource.OBSIDIAN,
            source_line=line_num,
            source_path=str(abs_path),
            created_at=at_midnight(parsed.created_at),
            completed_at=at_midnight(parsed.completed_at),
        )

    def resolve_path(self, rel_path: str) -> Path:
        root = self._config.vault_path
        candidate = root / PurePosixPath(rel_path)
        if os.path.isabs(rel_path) or ".." in PurePosixPath(rel_path).parts:
            raise ParseError(f"Task path escapes the vault: {rel_path}")
        return candidate

    # ---- reading ----

    def _parse_file_tasks(self, path: Path) -> list[TaskRecord]:
        try:
            content = line_mutator.read_text(path)
        except TaskIOError as e:
            raise self._error(e.message) from e

        rel_path = relative_posix(path, self._config.vault_path)
        return [
            self._to_record(parsed, rel_path, path, line_num)
            for line_num, parsed in checklist.parse_file(content)
        ]

    def read_tasks(self) -> list[TaskRecord]:
        root = self._config.vault_path
        if not root.is_dir():
            raise self._error(f"Vault not found: {root}")

        files = markdown_files(
            root,
            ignore_folders=self._config.ignore_folders,
            folders=self._config.folders,
        )
        logger.debug("Vault scan root=%s files=%d", root, len(files))

        tasks: list[TaskRecord] = []
        for path in files:
            try:
                tasks.extend(self._parse_file_tasks(path))
            except BackendError as e:
                logger.warning("Failed to parse %s: %s", path, e)
        return tasks

    # ---- mutations (sync, run in a worker thread) ----

    def _mutate(self, task_id: TaskId, change: LineChange) -> tuple[str, Path, int, str | None]:
        """
        Decode the id and rewrite its line with `change(current_line, parsed_task)`.

        The target must still be a checkbox task; anything else is a BackendError
        naming the line. Returns (rel_path, abs_path, line_num, new_line).
        """
        rel_path, line_num = checklist.parse_task_id(task_id)
        abs_path = self.resolve_path(rel_path)

        def transform(current: str) -> str | None:
            parsed = checklist.parse_checkbox_line(current)
            if parsed is None:
                raise self._error(f"Line {line_num} is not a checkbox")
            return change(current, parsed)

        try:
            new_line = line_mutator.modify_line(abs_path, line_num, transform)
        except LineRangeError as e:
            raise self._error(f"Line {line_num} out of range (file has {e.line_count} lines)") from e
        except TaskIOError as e:
            raise self._error(e.message) from e
        return rel_path, abs_path, line_num, new_line

    def _set_status(self, task_id: TaskId, status: TaskStatus) -> TaskRecord:
        rel_path, abs_path, line_num, new_line = self._mutate(
            task_id, lambda current, _parsed: checklist.set_checkbox(current, status)
        )
        parsed = checklist.parse_checkbox_line(new_line or "")
        if parsed is None:
            raise self._error(f"Line {line_num} is not a checkbox")
        logger.info("Task %s -> %s", task_id, status.value)
        return self._to_record(parsed, rel_path, abs_path, line_num)

    def _update(self, task_id: TaskId, update: TaskUpdate) -> TaskRecord:
        def rebuild(current: str, parsed: ParsedTask) -> str:
            indent, _, _ = checklist.split_checkbox(current) or ("", "", "")
            line = checklist.format_checkbox_line(
                title=update.title if update.title is not None else parsed.title,
                status=update.status if update.status is not None else parsed.status,
                priority=update.priority if update.priority is not None else parsed.priority,
                due=update.due if update.changes_due else parsed.due,  # type: ignore[arg-type]
                tags=list(update.tags) if update.tags is not None else parsed.tags,
                indent=indent,
            )
            if checklist.parse_checkbox_line(line) is None:
                raise ParseError(f"Update would leave task {task_id} without a title")
            return line

        rel_path, abs_path, line_num, new_line = self._mutate(task_id, rebuild)
        parsed = checklist.parse_checkbox_line(new_line or "")
        if parsed is None:
            raise self._error(f"Line {line_num} is not a checkbox")
        logger.info("Task updated id=%s", task_id)
        return self._to_record(parsed, rel_path, abs_path, line_num)

    def _delete(self, task_id: TaskId) -> None:
        self._mutate(task_id, lambda _current, _parsed: None)
        logger.info("Task deleted id=%s", task_id)

    def _create(self, request: NewTaskRequest) -> TaskRecord:
        line = checklist.format_checkbox_line(
            title=request.title.strip(),
            priority=request.priority,
            due=request.due,
            tags=list(request.tags),
        )
        parsed = checklist.parse_checkbox_line(line)
        if parsed is None:
            raise ParseError(f"Not a valid task title: {request.title!r}")

        rel_path = PurePosixPath(self._config.inbox_file).as_posix()
        inbox_path = self.resolve_path(rel_path)
        try:
            line_num = line_mutator.append_line(inbox_path, line)
        except TaskIOError as e:
            raise self._error(f"Failed to write inbox file: {e.message}") from e

        logger.info("Task created id=%s", checklist.make_task_id(rel_path, line_num))
        return self._to_record(parsed, rel_path, inbox_path, line_num)

    # ---- TaskBackend ----

    async def fetch_tasks(self, task_filter: TaskFilter) -> list[TaskRecord]:
        tasks = await asyncio.to_thread(self.read_tasks)
        return task_filter.apply(tasks)

    async def create_task(self, request: NewTaskRequest) -> TaskRecord:
        return await asyncio.to_thread(self._create, request)

    async def update_task(self, task_id: TaskId, update: TaskUpdate) -> TaskRecord:
        return await asyncio.to_thread(self._update, task_id, update)

    async def complete_task(self, task_id: TaskId) -> TaskRecord:
        return await asyncio.to_thread(self._set_status, task_id, TaskStatus.DONE)

    async def uncomplete_task(self, task_id: TaskId) -> TaskRecord:
        return await asyncio.to_thread(self._set_status, task_id, TaskStatus.PENDING)

    async def delete_task(self, task_id: TaskId) -> None:
        await asyncio.to_thread(self._delete, task_id)
