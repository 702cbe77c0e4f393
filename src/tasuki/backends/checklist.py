# src/tasuki/backends/checklist.py

"""
Markdown checklist codec (Obsidian Tasks-style emoji metadata).

Only "- [ ]", "- [x]" and "- [X]" lines are tasks. The remainder is scanned token
by token with a fixed precedence:

  1. priority glyphs           ⏫ 🔺 (high)  🔼 (medium)  🔽 ⏬ (low)
  2. date glyph + ISO date     📅 🗓️ 🗓 (due)  ✅ (done)  ➕ (created)
  3. glyph + value, discarded  ⏳ 🛫 🆔 ⛔ 🏁 ❌
  4. recurrence 🔁             drops every word up to the next metadata token
  5. inline priority           (p1) (p2) (p3)
  6. #tag
  7. due:YYYY-MM-DD
  8. anything else is a title word

A date glyph not followed by a valid date is kept as a title word.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date

from ..errors import ParseError
from ..tasks.task_models import Priority, TaskId, TaskStatus, parse_iso_date

BACKEND_NAME = "obsidian"

CHECKBOXES: dict[str, TaskStatus] = {
    "- [ ]": TaskStatus.PENDING,
    "- [x]": TaskStatus.DONE,
    "- [X]": TaskStatus.DONE,
}
PENDING_BOX = "- [ ]"
DONE_BOX = "- [x]"

PRIORITY_GLYPHS: dict[str, Priority] = {
    "⏫": Priority.HIGH,
    "🔺": Priority.HIGH,
    "🔼": Priority.MEDIUM,
    "🔽": Priority.LOW,
    "⏬": Priority.LOW,
}
GLYPH_FOR_PRIORITY: dict[Priority, str] = {
    Priority.HIGH: "⏫",
    Priority.MEDIUM: "🔼",
    Priority.LOW: "🔽",
}

DUE_GLYPHS = frozenset({"📅", "🗓️", "🗓"})
DONE_GLYPH = "✅"
CREATED_GLYPH = "➕"

# scheduled, start, id, depends-on, on-completion, cancelled
SKIP_WITH_VALUE = frozenset({"⏳", "🛫", "🆔", "⛔", "🏁", "❌"})

RECURRENCE_GLYPH = "🔁"

INLINE_PRIORITIES: dict[str, Priority] = {
    "(p1)": Priority.HIGH,
    "(p2)": Priority.MEDIUM,
    "(p3)": Priority.LOW,
}

_METADATA_GLYPHS = (
    frozenset(PRIORITY_GLYPHS)
    | DUE_GLYPHS
    | {DONE_GLYPH, CREATED_GLYPH, RECURRENCE_GLYPH}
    | SKIP_WITH_VALUE
)

FENCE = "```"

_LINE_NUM_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True, slots=True)
class ParsedTask:
    title: str
    status: TaskStatus
    priority: Priority
    due: date | None
    completed_at: date | None
    created_at: date | None
    tags: list[str]


def split_checkbox(line: str) -> tuple[str, str, str] | None:
    """Return (indent, checkbox, rest) or None when the line is not a checkbox."""
    stripped = line.lstrip()
    for box in CHECKBOXES:
        if stripped.startswith(box):
            indent = line[: len(line) - len(stripped)]
            return indent, box, stripped[len(box):]
    return None


def is_metadata_token(token: str) -> bool:
    return (
        token in _METADATA_GLYPHS
        or token.startswith("#")
        or token.startswith("due:")
        or token in INLINE_PRIORITIES
    )


def _date_after(tokens: list[str], idx: int) -> date | None:
    if idx >= len(tokens):
        return None
    return parse_iso_date(tokens[idx])


def parse_checkbox_line(line: str) -> ParsedTask | None:
    parts = split_checkbox(line)
    if parts is None:
        return None
    _, box, rest = parts
    status = CHECKBOXES[box]

    title_parts: list[str] = []
    priority = Priority.NONE
    due: date | None = None
    completed_at: date | None = None
    created_at: date | None = None
    tags: list[str] = []

    tokens = rest.split()
    i = 0
    while i < len(tokens):
        token = tokens[i]

        if token in PRIORITY_GLYPHS:
            priority = PRIORITY_GLYPHS[token]
            i += 1
            continue

        if token in DUE_GLYPHS or token in (DONE_GLYPH, CREATED_GLYPH):
            value = _date_after(tokens, i + 1)
            if value is not None:
                if token == DONE_GLYPH:
                    completed_at = value
                elif token == CREATED_GLYPH:
                    created_at = value
                else:
                    due = value
                i += 2
                continue

        if token in SKIP_WITH_VALUE:
            i += 2
            continue

        if token == RECURRENCE_GLYPH:
            i += 1
            while i < len(tokens) and not is_metadata_token(tokens[i]):
                i += 1
            continue

        if token in INLINE_PRIORITIES:
            priority = INLINE_PRIORITIES[token]
            i += 1
            continue

        if token.startswith("#"):
            if len(token) > 1:
                tags.append(token[1:])
            i += 1
            continue

        if token.startswith("due:"):
            value = parse_iso_date(token[4:])
            if value is not None:
                due = value
                i += 1
                continue

        title_parts.append(token)
        i += 1

    title = " ".join(title_parts)
    if not title:
        return None

    return ParsedTask(
        title=title,
        status=status,
        priority=priority,
        due=due,
        completed_at=completed_at,
        created_at=created_at,
        tags=tags,
    )


def parse_file(content: str) -> list[tuple[int, ParsedTask]]:
    """
    Parse checkbox tasks from a markdown document, skipping fenced code blocks.

    Returns (1-indexed line number, task) pairs.
    """
    results: list[tuple[int, ParsedTask]] = []
    in_fence = False

    for idx, line in enumerate(content.split("\n"), start=1):
        if line.strip().startswith(FENCE):
            in_fence = not in_fence
            continue
        if in_fence:
            continue

        task = parse_checkbox_line(line)
        if task is not None:
            results.append((idx, task))

    return results


def format_checkbox_line(
    *,
    title: str,
    status: TaskStatus = TaskStatus.PENDING,
    priority: Priority = Priority.NONE,
    due: date | None = None,
    tags: list[str] | None = None,
    indent: str = "",
) -> str:
    """
    Canonical line: checkbox, title, priority glyph, due glyph + date, tags.

    Creation/completion dates, recurrence and other annotations are not emitted.
    """
    box = DONE_BOX if status is TaskStatus.DONE else PENDING_BOX
    parts = [f"{indent}{box}", title]

    glyph = GLYPH_FOR_PRIORITY.get(priority)
    if glyph:
        parts.append(glyph)

    if due is not None:
        parts.append(f"📅 {due.isoformat()}")

    parts.extend(f"#{tag}" for tag in tags or [])
    return " ".join(parts)


def set_checkbox(line: str, status: TaskStatus) -> str:
    """Swap only the leading checkbox marker; every other character is kept."""
    parts = split_checkbox(line)
    if parts is None:
        return line
    indent, box, rest = parts
    if CHECKBOXES[box] is status:
        return line
    new_box = DONE_BOX if status is TaskStatus.DONE else PENDING_BOX
    return f"{indent}{new_box}{rest}"


def make_task_id(rel_path: str, line_num: int) -> TaskId:
    return f"{BACKEND_NAME}:{rel_path}:{line_num}"


def parse_task_id(task_id: TaskId) -> tuple[str, int]:
    """
    "obsidian:<vault-relative path>:<line>" -> (path, line).

    The path may itself contain ':', so the line number is taken after the last one.
    """
    prefix = f"{BACKEND_NAME}:"
    if not task_id or not task_id.startswith(prefix):
        raise ParseError(f"Invalid Obsidian task ID: {task_id}")

    rest = task_id[len(prefix):]
    rel_path, sep, line_part = rest.rpartition(":")
    if not sep or not rel_path:
        raise ParseError(f"Invalid Obsidian task ID format: {task_id}")
    if not _LINE_NUM_RE.fullmatch(line_part):
        raise ParseError(f"Invalid line number in task ID: {task_id}")

    return rel_path, int(line_part)
