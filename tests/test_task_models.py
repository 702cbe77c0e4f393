# tests/test_task_models.py

from __future__ import annotations

import json
from datetime import date, datetime

from tasuki.tasks.task_models import (
    UNSET,
    BackendSource,
    Priority,
    TaskFilter,
    TaskRecord,
    TaskStatus,
    TaskUpdate,
    parse_iso_date,
)

from .fakes import make_task

TODAY = date(2025, 2, 25)


def test_parse_iso_date_is_strict() -> None:
    assert parse_iso_date("2025-02-25") == date(2025, 2, 25)
    for bad in ("2025-2-25", "20250225", "2025-W09-2", "2025-02-30", "2025-02-25T10:00", ""):
        assert parse_iso_date(bad) is None


def test_priority_order_and_names() -> None:
    assert Priority.NONE < Priority.LOW < Priority.MEDIUM < Priority.HIGH
    assert Priority.from_name("High") is Priority.HIGH
    assert Priority.from_name("urgent") is Priority.NONE
    assert Priority.from_name(None) is Priority.NONE


def test_filter_due_bounds_exclude_undated() -> None:
    undated = make_task("local:1", "x")
    assert not TaskFilter(due_before=TODAY).matches(undated)
    assert not TaskFilter(due_after=TODAY).matches(undated)
    assert TaskFilter().matches(undated)

    dated = make_task("local:2", "y", due=TODAY)
    assert TaskFilter(due_before=TODAY, due_after=TODAY).matches(dated)


def test_filter_search_is_case_insensitive() -> None:
    task = make_task("local:1", "Call Dentist")
    assert TaskFilter(search="dentist").matches(task)
    assert not TaskFilter(search="doctor").matches(task)


def test_named_views() -> None:
    overdue = make_task("local:1", "overdue", due=date(2025, 2, 1))
    today = make_task("local:2", "today", due=TODAY)
    tomorrow = make_task("local:3", "tomorrow", due=date(2025, 2, 26))
    done = make_task("local:4", "done", due=TODAY, status=TaskStatus.DONE)
    tasks = [overdue, today, tomorrow, done]

    def titles(view: str) -> list[str]:
        return [t.title for t in TaskFilter.for_view(view, TODAY).apply(tasks)]

    assert titles("today") == ["overdue", "today"]
    assert titles("upcoming") == ["tomorrow"]
    assert titles("done") == ["done"]
    assert titles("all") == ["overdue", "today", "tomorrow", "done"]
    assert titles("bogus") == titles("all")


def test_update_due_sentinel() -> None:
    assert TaskUpdate().due is UNSET
    assert not TaskUpdate().changes_due
    assert TaskUpdate(due=None).changes_due


def test_to_dict_is_json_ready() -> None:
    task = TaskRecord(
        id="obsidian:a.md:1",
        title="T",
        status=TaskStatus.DONE,
        priority=Priority.HIGH,
        due=TODAY,
        tags=["a"],
        source=BackendSource.OBSIDIAN,
        source_line=1,
        source_path="/v/a.md",
        completed_at=datetime(2025, 2, 25),
    )
    data = json.loads(json.dumps(task.to_dict()))
    assert data["status"] == "done"
    assert data["priority"] == "high"
    assert data["due"] == "2025-02-25"
    assert data["source"] == "obsidian"
    assert data["completed_at"] == "2025-02-25T00:00:00"
    assert data["created_at"] is None
    assert BackendSource.OBSIDIAN.icon == "◆"
