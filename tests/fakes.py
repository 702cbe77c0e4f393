# tests/fakes.py

from __future__ import annotations

from dataclasses import dataclass, field, replace

from tasuki.errors import BackendError
from tasuki.tasks.task_models import (
    BackendSource,
    NewTaskRequest,
    Priority,
    TaskFilter,
    TaskRecord,
    TaskStatus,
    TaskUpdate,
)


def make_task(
    task_id: str,
    title: str,
    *,
    due=None,
    priority: Priority = Priority.NONE,
    status: TaskStatus = TaskStatus.PENDING,
    source: BackendSource = BackendSource.LOCAL_FILE,
) -> TaskRecord:
    return TaskRecord(
        id=task_id,
        title=title,
        status=status,
        priority=priority,
        due=due,
        tags=[],
        source=source,
    )


@dataclass(slots=True)
class FakeBackend:
    """
    In-memory TaskBackend used by manager tests.

    - Captures mutation calls for routing assertions
    - Applies the filter like the real backends do
    """

    backend_name: str
    backend_source: BackendSource
    tasks: list[TaskRecord] = field(default_factory=list)
    calls: list[tuple[str, str]] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.backend_name

    @property
    def source(self) -> BackendSource:
        return self.backend_source

    def _find(self, task_id: str) -> TaskRecord:
        for t in self.tasks:
            if t.id == task_id:
                return t
        raise BackendError(self.backend_name, f"unknown id {task_id}")

    async def fetch_tasks(self, task_filter: TaskFilter) -> list[TaskRecord]:
        return task_filter.apply(self.tasks)

    async def create_task(self, request: NewTaskRequest) -> TaskRecord:
        task = make_task(
            f"{self.backend_name}:{len(self.tasks) + 1}",
            request.title,
            due=request.due,
            priority=request.priority,
            source=self.backend_source,
        )
        self.tasks.append(task)
        self.calls.append(("create", task.id))
        return task

    async def update_task(self, task_id: str, update: TaskUpdate) -> TaskRecord:
        self.calls.append(("update", task_id))
        task = self._find(task_id)
        return replace(task, title=update.title or task.title)

    async def complete_task(self, task_id: str) -> TaskRecord:
        self.calls.append(("complete", task_id))
        return replace(self._find(task_id), status=TaskStatus.DONE)

    async def uncomplete_task(self, task_id: str) -> TaskRecord:
        self.calls.append(("uncomplete", task_id))
        return replace(self._find(task_id), status=TaskStatus.PENDING)

    async def delete_task(self, task_id: str) -> None:
        self.calls.append(("delete", task_id))
        self.tasks.remove(self._find(task_id))


class FailingBackend(FakeBackend):
    """Every fetch raises the configured exception."""

    __slots__ = ("error",)

    def __init__(self, name: str, source: BackendSource, error: Exception) -> None:
        super().__init__(name, source)
        self.error = error

    async def fetch_tasks(self, task_filter: TaskFilter) -> list[TaskRecord]:
        raise self.error
