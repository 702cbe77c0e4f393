# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest

from tasuki.backends.localfile import LocalFileBackend, LocalFileConfig
from tasuki.backends.obsidian import VaultBackend, VaultConfig
from tasuki.config import DEFAULT_IGNORE_FOLDERS, Settings

TODO_LINES = [
    "(p1) 2025-02-01 Call dentist #health due:2025-02-26",
    "x 2025-02-20 Buy milk",
    "# a comment",
    "",
    "Write report #work",
]

DAILY_NOTE = """# 2025-02-25

Some prose.
- [ ] Fix bug 📅 2025-03-15
- [x] Ship release ✅ 2025-02-25
  - [ ] Review PR #work ⏫ 📅 2025-03-15 ➕ 2025-03-01
* [ ] asterisk bullets are not tasks
"""

CODE_EXAMPLES = """# Code

```markdown
- [ ] inside a fence
    - [ ] indented inside a fence
```

- [ ] Outside the fence
"""


def write_lines(path: Path, lines: list[str], *, trailing_newline: bool = True) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    text = "\n".join(lines) + ("\n" if trailing_newline else "")
    path.write_text(text, encoding="utf-8", newline="")
    return path


@pytest.fixture()
def todo_file(tmp_path: Path) -> Path:
    return write_lines(tmp_path / "todo.txt", TODO_LINES)


@pytest.fixture()
def local_backend(todo_file: Path) -> LocalFileBackend:
    return LocalFileBackend(LocalFileConfig(path=todo_file))


@pytest.fixture()
def vault(tmp_path: Path) -> Path:
    """
    Small vault:
      .obsidian/               (config dir, ignored)
      Daily Notes/2025-02-25.md
      code-examples.md         (tasks inside a fence)
      Inbox.md
    """
    root = tmp_path / "vault"
    (root / ".obsidian").mkdir(parents=True)
    (root / ".obsidian" / "tasks.md").write_text("- [ ] hidden config task\n", encoding="utf-8")

    (root / "Daily Notes").mkdir()
    (root / "Daily Notes" / "2025-02-25.md").write_text(DAILY_NOTE, encoding="utf-8")
    (root / "code-examples.md").write_text(CODE_EXAMPLES, encoding="utf-8")
    (root / "Inbox.md").write_text("# Inbox\n- [ ] Inbox item\n", encoding="utf-8")
    return root


@pytest.fixture()
def vault_backend(vault: Path) -> VaultBackend:
    return VaultBackend(VaultConfig(vault_path=vault))


@pytest.fixture()
def settings(tmp_path: Path, vault: Path) -> Settings:
    """
    Settings pointing at tmp paths.

    Built directly rather than via Settings.from_env(), to keep unit tests
    isolated from the developer's environment and .env file.
    """
    data_dir = tmp_path / "data"
    return Settings(
        app_name="tasuki-test",
        log_level="WARNING",
        data_dir=data_dir,
        local_enabled=True,
        local_path=data_dir / "todo.txt",
        obsidian_enabled=True,
        obsidian_vault_path=vault,
        obsidian_folders=None,
        obsidian_ignore_folders=list(DEFAULT_IGNORE_FOLDERS),
        obsidian_inbox_file="Inbox.md",
    )
