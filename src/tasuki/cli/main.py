# src/tasuki/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds the BackendManager, runs one command and exits:
- list [today|upcoming|all|done] [--format text|json]
- add TITLE... [--priority] [--due] [--tag]... [--backend]
- done ID / undo ID / rm ID
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from datetime import date

from ..backends.manager import BackendManager
from ..cli.bootstrap import create_manager
from ..config import Settings, get_settings
from ..errors import JsonError, ParseError, TasukiError
from ..logging_setup import setup_logging
from ..tasks.task_models import (
    BackendSource,
    NewTaskRequest,
    Priority,
    TaskFilter,
    TaskRecord,
    TaskStatus,
    parse_iso_date,
)

logger = logging.getLogger(__name__)

LIST_VIEWS = ("today", "upcoming", "all", "done")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tasuki",
        description="Tasks from a todo.txt file and a markdown vault, in one list.",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More console logs.")
    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="List tasks.")
    p_list.add_argument("view", nargs="?", default="all", choices=LIST_VIEWS)
    p_list.add_argument("--format", dest="fmt", default="text", choices=("text", "json"))

    p_add = sub.add_parser("add", help="Create a task.")
    p_add.add_argument("title", nargs="+")
    p_add.add_argument("--priority", choices=("high", "medium", "low"), default=None)
    p_add.add_argument("--due", default=None, help="YYYY-MM-DD")
    p_add.add_argument("--tag", dest="tags", action="append", default=[])
    p_add.add_argument(
        "--backend",
        choices=[s.value for s in BackendSource],
        default=BackendSource.LOCAL_FILE.value,
    )

    for name, help_text in (
        ("done", "Mark a task done."),
        ("undo", "Mark a task pending again."),
        ("rm", "Delete a task."),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("task_id", metavar="ID")

    return parser


def format_task_line(task: TaskRecord) -> str:
    mark = "✓" if task.status is TaskStatus.DONE else "☐"
    due = f" (due {task.due.isoformat()})" if task.due else ""
    flag = " [!]" if task.priority is Priority.HIGH else ""
    return f"{mark} {task.title}{due}{flag} {task.source.icon} {task.id}"


def render_tasks(tasks: Sequence[TaskRecord], fmt: str) -> str:
    if fmt == "json":
        try:
            return json.dumps([t.to_dict() for t in tasks], ensure_ascii=False, indent=2)
        except (TypeError, ValueError) as e:
            raise JsonError(str(e)) from e

    if not tasks:
        return "No tasks found."
    return "\n".join(format_task_line(t) for t in tasks)


def _request_from_args(args: argparse.Namespace) -> NewTaskRequest:
    due: date | None = None
    if args.due:
        due = parse_iso_date(args.due.strip())
        if due is None:
            raise ParseError(f"Invalid due date: {args.due}")

    return NewTaskRequest(
        title=" ".join(args.title).strip(),
        priority=Priority.from_name(args.priority),
        due=due,
        tags=[t.lstrip("#") for t in args.tags if t.lstrip("#")],
        source=BackendSource(args.backend),
    )


async def run_command(manager: BackendManager, args: argparse.Namespace) -> str:
    """Execute one parsed command and return the text to print."""
    match args.command:
        case "list":
            today = date.today()
            tasks = await manager.all_tasks(TaskFilter.for_view(args.view, today), today=today)
            return render_tasks(tasks, args.fmt)
        case "add":
            task = await manager.create_task(_request_from_args(args))
            return f"✓ Created task: {task.title} (ID: {task.id})"
        case "done":
            task = await manager.complete_task(args.task_id)
            return f"✓ Completed: {task.title}"
        case "undo":
            task = await manager.uncomplete_task(args.task_id)
            return f"☐ Reopened: {task.title}"
        case "rm":
            await manager.delete_task(args.task_id)
            return f"Deleted {args.task_id}"
        case _:
            raise ValueError(f"Unknown command: {args.command}")


def _console_level(settings: Settings, verbose: int) -> int:
    level_name = str(getattr(settings, "log_level", "WARNING")).upper()
    level = getattr(logging, level_name, logging.WARNING)
    if not isinstance(level, int):
        level = logging.WARNING
    # each -v lowers the threshold by one step (WARNING -> INFO -> DEBUG)
    return max(logging.DEBUG, level - 10 * verbose)


def main(argv: Sequence[str] | None = None, *, settings: Settings | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        if settings is None:
            settings = get_settings()
        setup_logging(
            log_dir=settings.data_dir,
            console_level=_console_level(settings, args.verbose),
        )
        logger.debug("Starting %s command=%s", settings.app_name, args.command)

        manager = create_manager(settings=settings)
        output = asyncio.run(run_command(manager, args))
    except TasukiError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        # log dir not writable, etc.
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
