# src/tasuki/backends/line_mutator.py

"""
Line-addressed read/transform/write helpers shared by both backends.

Files are read and written without newline translation so that CRLF files and a
missing final newline survive a mutation. Every mutation rewrites the whole file
(temp file + os.replace); there is no locking, the last writer wins.
"""

from __future__ import annotations

import contextlib
import logging
import os
import stat
from collections.abc import Callable
from pathlib import Path

from ..errors import LineRangeError, TaskIOError

logger = logging.getLogger(__name__)

LineTransform = Callable[[str], str | None]


def split_lines(text: str) -> tuple[list[str], bool]:
    """Split on '\\n'. Returns (lines, ended_with_newline)."""
    if not text:
        return [], False
    trailing = text.endswith("\n")
    body = text[:-1] if trailing else text
    return body.split("\n"), trailing


def join_lines(lines: list[str], trailing_newline: bool) -> str:
    out = "\n".join(lines)
    if trailing_newline and lines:
        out += "\n"
    return out


def read_text(path: str | Path) -> str:
    try:
        with open(path, encoding="utf-8", newline="") as fh:
            return fh.read()
    except (OSError, UnicodeDecodeError) as e:
        raise TaskIOError(f"Failed to read {path}: {e}") from e


def read_lines(path: str | Path) -> list[str]:
    lines, _ = split_lines(read_text(path))
    return lines


def write_text(path: str | Path, text: str) -> None:
    # Write next to the real file so symlinked notes keep being symlinks.
    target = Path(path).resolve()
    tmp = target.with_name(f".{target.name}.tasuki-tmp")
    try:
        with open(tmp, "w", encoding="utf-8", newline="") as fh:
            fh.write(text)
        with contextlib.suppress(OSError):
            os.chmod(tmp, stat.S_IMODE(os.stat(target).st_mode))
        os.replace(tmp, target)
    except OSError as e:
        with contextlib.suppress(OSError):
            tmp.unlink()
        raise TaskIOError(f"Failed to write {path}: {e}") from e


def modify_line(path: str | Path, line_num: int, transform: LineTransform) -> str | None:
    """
    Apply `transform` to exactly one physical line (1-indexed) and rewrite the file.

    The transform receives the line without its trailing '\\r' (if any) and returns
    the replacement, or None to remove the line. Returns the new line (or None).
    Raises LineRangeError when line_num is outside [1, line_count].
    """
    lines, trailing = split_lines(read_text(path))

    if line_num <= 0 or line_num > len(lines):
        raise LineRangeError(line_num, len(lines))

    idx = line_num - 1
    current = lines[idx]
    cr = current.endswith("\r")
    if cr:
        current = current[:-1]

    new_line = transform(current)
    if new_line is None:
        del lines[idx]
    else:
        lines[idx] = new_line + ("\r" if cr else "")

    write_text(path, join_lines(lines, trailing))
    logger.debug("Rewrote %s line=%s removed=%s", path, line_num, new_line is None)
    return new_line


def replace_line(path: str | Path, line_num: int, text: str) -> None:
    modify_line(path, line_num, lambda _old: text)


def remove_line(path: str | Path, line_num: int) -> None:
    modify_line(path, line_num, lambda _old: None)


def append_line(path: str | Path, text: str) -> int:
    """
    Append `text` as a new last line, creating the file (and parent dirs) if needed.

    Returns the 1-indexed line number of the appended line.
    """
    p = Path(path)
    if p.exists():
        content = read_text(p)
    else:
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise TaskIOError(f"Failed to create {p.parent}: {e}") from e
        content = ""

    if content and not content.endswith("\n"):
        content += "\n"
    content += text + "\n"

    lines, _ = split_lines(content)
    write_text(p, content)
    return len(lines)
