# src/tasuki/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The aggregator depends on this Protocol instead of the concrete backends.
This keeps backends swappable and makes testing easier (see tests/fakes.py).
"""

from typing import Protocol

from ..tasks.task_models import (
    BackendSource,
    NewTaskRequest,
    TaskFilter,
    TaskId,
    TaskRecord,
    TaskUpdate,
)


class TaskBackend(Protocol):
    """
    One storage convention (a todo.txt file, a markdown vault, ...).

    `name` is the identifier prefix of every task the backend issues.
    Mutations take the full identifier ("<name>:<locator>").
    """

    @property
    def name(self) -> str: ...

    @property
    def source(self) -> BackendSource: ...

    async def fetch_tasks(self, task_filter: TaskFilter) -> list[TaskRecord]: ...
    async def create_task(self, request: NewTaskRequest) -> TaskRecord: ...
    async def update_task(self, task_id: TaskId, update: TaskUpdate) -> TaskRecord: ...
    async def complete_task(self, task_id: TaskId) -> TaskRecord: ...
    async def uncomplete_task(self, task_id: TaskId) -> TaskRecord: ...
    async def delete_task(self, task_id: TaskId) -> None: ...
