# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from tasuki.config import DEFAULT_IGNORE_FOLDERS, Settings, default_data_dir

ENV_NAMES = [
    "TASUKI_APP_NAME",
    "TASUKI_LOG_LEVEL",
    "TASUKI_DATA_DIR",
    "TASUKI_LOCAL_ENABLED",
    "TASUKI_LOCAL_PATH",
    "TASUKI_OBSIDIAN_ENABLED",
    "TASUKI_OBSIDIAN_VAULT_PATH",
    "TASUKI_OBSIDIAN_FOLDERS",
    "TASUKI_OBSIDIAN_IGNORE_FOLDERS",
    "TASUKI_OBSIDIAN_INBOX_FILE",
]


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path


def test_defaults(clean_env: Path) -> None:
    s = Settings.from_env()
    assert s.log_level == "WARNING"
    assert s.data_dir == clean_env / ".tasuki"
    assert default_data_dir() == clean_env / ".tasuki"
    assert s.local_enabled is True
    assert s.local_path == clean_env / ".tasuki" / "todo.txt"
    assert s.obsidian_enabled is False
    assert s.obsidian_vault_path is None
    assert s.obsidian_folders is None
    assert s.obsidian_ignore_folders == DEFAULT_IGNORE_FOLDERS
    assert s.obsidian_inbox_file == "Inbox.md"


def test_env_overrides(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASUKI_DATA_DIR", str(clean_env / "data"))
    monkeypatch.setenv("TASUKI_LOCAL_ENABLED", "no")
    monkeypatch.setenv("TASUKI_OBSIDIAN_ENABLED", "1")
    monkeypatch.setenv("TASUKI_OBSIDIAN_VAULT_PATH", "~/Vault")
    monkeypatch.setenv("TASUKI_OBSIDIAN_FOLDERS", "Daily Notes, Projects ,")
    monkeypatch.setenv("TASUKI_OBSIDIAN_IGNORE_FOLDERS", ".git")
    monkeypatch.setenv("TASUKI_OBSIDIAN_INBOX_FILE", "Tasks/Inbox.md")

    s = Settings.from_env()
    assert s.data_dir == clean_env / "data"
    assert s.local_path == clean_env / "data" / "todo.txt"
    assert s.local_enabled is False
    assert s.obsidian_enabled is True
    assert s.obsidian_vault_path == clean_env / "Vault"
    assert s.obsidian_folders == ["Daily Notes", "Projects"]
    assert s.obsidian_ignore_folders == [".git"]
    assert s.obsidian_inbox_file == "Tasks/Inbox.md"


def test_backend_tables_shape(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASUKI_LOCAL_PATH", str(clean_env / "todo.txt"))
    tables = Settings.from_env().backend_tables()

    assert tables["local"] == {"enabled": True, "path": str(clean_env / "todo.txt")}
    assert tables["obsidian"]["enabled"] is False
    assert "vault_path" not in tables["obsidian"]
    assert "folders" not in tables["obsidian"]
    assert tables["obsidian"]["inbox_file"] == "Inbox.md"
