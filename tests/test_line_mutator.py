# tests/test_line_mutator.py

from __future__ import annotations

from pathlib import Path

import pytest

from tasuki.backends import line_mutator
from tasuki.errors import LineRangeError, ParseError


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8", newline="")
    return path


def _read(path: Path) -> str:
    with open(path, encoding="utf-8", newline="") as fh:
        return fh.read()


def test_split_and_join_remember_trailing_newline() -> None:
    assert line_mutator.split_lines("a\nb\n") == (["a", "b"], True)
    assert line_mutator.split_lines("a\nb") == (["a", "b"], False)
    assert line_mutator.split_lines("") == ([], False)
    assert line_mutator.join_lines(["a", "b"], True) == "a\nb\n"
    assert line_mutator.join_lines([], True) == ""


def test_replace_line(tmp_path: Path) -> None:
    path = _write(tmp_path / "f.txt", "one\ntwo\nthree\n")
    line_mutator.replace_line(path, 2, "TWO")
    assert _read(path) == "one\nTWO\nthree\n"


def test_remove_line_keeps_missing_final_newline(tmp_path: Path) -> None:
    path = _write(tmp_path / "f.txt", "one\ntwo\nthree")
    line_mutator.remove_line(path, 2)
    assert _read(path) == "one\nthree"


def test_crlf_preserved(tmp_path: Path) -> None:
    path = _write(tmp_path / "f.txt", "one\r\ntwo\r\n")
    seen: list[str] = []

    def upper(line: str) -> str:
        seen.append(line)
        return line.upper()

    assert line_mutator.modify_line(path, 1, upper) == "ONE"
    assert seen == ["one"]
    assert _read(path) == "ONE\r\ntwo\r\n"


@pytest.mark.parametrize("line_num", [0, -1, 4])
def test_out_of_range(tmp_path: Path, line_num: int) -> None:
    path = _write(tmp_path / "f.txt", "a\nb\nc\n")
    with pytest.raises(LineRangeError) as exc:
        line_mutator.replace_line(path, line_num, "x")
    assert isinstance(exc.value, ParseError)
    assert exc.value.line_count == 3
    assert _read(path) == "a\nb\nc\n"


def test_append_creates_file_and_dirs(tmp_path: Path) -> None:
    path = tmp_path / "a" / "b" / "inbox.md"
    assert line_mutator.append_line(path, "- [ ] first") == 1
    assert line_mutator.append_line(path, "- [ ] second") == 2
    assert _read(path) == "- [ ] first\n- [ ] second\n"


def test_append_adds_separator(tmp_path: Path) -> None:
    path = _write(tmp_path / "f.txt", "one")
    assert line_mutator.append_line(path, "two") == 2
    assert _read(path) == "one\ntwo\n"


def test_write_through_symlink(tmp_path: Path) -> None:
    real = _write(tmp_path / "real.txt", "a\nb\n")
    link = tmp_path / "link.txt"
    try:
        link.symlink_to(real)
    except OSError:
        pytest.skip("cannot create symlinks here")

    line_mutator.replace_line(link, 1, "A")
    assert link.is_symlink()
    assert _read(real) == "A\nb\n"
    assert not list(tmp_path.glob(".*tasuki-tmp"))
