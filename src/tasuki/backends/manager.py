# src/tasuki/backends/manager.py

from __future__ import annotations

"""
Backend aggregator.

Fans fetches out to every configured backend concurrently, merges and sorts the
results, and routes mutations to a single backend by the id prefix.

Partial failure policy for fetches:
- a failing backend is logged and dropped when anything else returned tasks
- only when nothing came back does the call fail, with the first backend error
"""

import asyncio
import logging
from collections.abc import Iterable, Sequence
from datetime import date
from typing import Any

from ..core.ports import TaskBackend
from ..errors import BackendError, ParseError
from ..tasks.task_models import (
    NewTaskRequest,
    TaskFilter,
    TaskId,
    TaskRecord,
    TaskUpdate,
)

logger = logging.getLogger(__name__)

OVERDUE, DUE_TODAY, DUE_LATER, NO_DUE = range(4)


def due_bucket(task: TaskRecord, today: date) -> int:
    if task.due is None:
        return NO_DUE
    if task.due < today:
        return OVERDUE
    if task.due == today:
        return DUE_TODAY
    return DUE_LATER


def sort_key(task: TaskRecord, today: date) -> tuple[Any, ...]:
    """overdue < today < future < no due; then due date, higher priority, title."""
    return (
        due_bucket(task, today),
        task.due or date.max,
        -int(task.priority),
        task.title,
    )


def sort_tasks(tasks: Iterable[TaskRecord], today: date | None = None) -> list[TaskRecord]:
    today = today or date.today()
    return sorted(tasks, key=lambda t: sort_key(t, today))


def id_prefix(task_id: TaskId) -> str:
    return (task_id or "").split(":", 1)[0]


class BackendManager:
    """Stateless router over an ordered list of backends."""

    def __init__(self, backends: Sequence[TaskBackend]) -> None:
        self._backends: list[TaskBackend] = list(backends)

    @classmethod
    def from_settings(cls, settings) -> BackendManager:
        from . import build_backends

        return cls(build_backends(settings.backend_tables()))

    @property
    def backends(self) -> list[TaskBackend]:
        return list(self._backends)

    def is_empty(self) -> bool:
        return not self._backends

    # ---- reads ----

    async def all_tasks(
        self,
        task_filter: TaskFilter | None = None,
        *,
        today: date | None = None,
    ) -> list[TaskRecord]:
        task_filter = task_filter or TaskFilter()

        results = await asyncio.gather(
            *(backend.fetch_tasks(task_filter) for backend in self._backends),
            return_exceptions=True,
        )

        merged: list[TaskRecord] = []
        errors: list[tuple[str, Exception]] = []

        for backend, result in zip(self._backends, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.error("Backend '%s' error: %s", backend.name, result)
                errors.append((backend.name, result))
                continue
            merged.extend(result)

        if errors and not merged:
            name, err = errors[0]
            if isinstance(err, BackendError):
                raise err
            raise BackendError(name, str(err)) from err

        return sort_tasks(merged, today)

    # ---- writes ----

    async def create_task(self, request: NewTaskRequest) -> TaskRecord:
        for backend in self._backends:
            if backend.source == request.source:
                return await backend.create_task(request)

        if self._backends:
            backend = self._backends[0]
            logger.info(
                "No backend for source=%s; creating in '%s'", request.source.value, backend.name
            )
            return await backend.create_task(request)

        raise BackendError("none", "No backends configured")

    def _route(self, task_id: TaskId) -> TaskBackend:
        prefix = id_prefix(task_id)
        for backend in self._backends:
            if backend.name == prefix:
                return backend
        raise ParseError(f"No backend found for task ID: {task_id}")

    async def update_task(self, task_id: TaskId, update: TaskUpdate) -> TaskRecord:
        return await self._route(task_id).update_task(task_id, update)

    async def complete_task(self, task_id: TaskId) -> TaskRecord:
        return await self._route(task_id).complete_task(task_id)

    async def uncomplete_task(self, task_id: TaskId) -> TaskRecord:
        return await self._route(task_id).uncomplete_task(task_id)

    async def delete_task(self, task_id: TaskId) -> None:
        await self._route(task_id).delete_task(task_id)
