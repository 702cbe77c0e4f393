# src/tasuki/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing is read from disk at import time except an optional .env file.
- Backends receive plain per-backend tables (see Settings.backend_tables()),
  so a config-file loader can produce the same shape later.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

from dotenv import load_dotenv

ENV_PREFIX = "TASUKI"

DEFAULT_IGNORE_FOLDERS = [".obsidian", ".trash", ".git"]
DEFAULT_INBOX_FILE = "Inbox.md"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


# Real environment wins over .env.
load_dotenv(override=False)


def default_data_dir() -> Path:
    """
    Per-user data directory:
      ~/.tasuki

    Override with TASUKI_DATA_DIR.
    """
    raw = os.getenv(_k("DATA_DIR"))
    if raw and raw.strip():
        return Path(raw.strip()).expanduser()
    return Path.home() / ".tasuki"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_list(name: str, default: Optional[List[str]]) -> Optional[List[str]]:
    # Comma separated only: folder names may contain spaces ("Daily Notes").
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default) if default is not None else None
    return [p.strip() for p in raw.split(",") if p.strip()]


def _env_path(name: str, default: Optional[Path]) -> Optional[Path]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw.strip()).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Flat-file backend ----
    local_enabled: bool
    local_path: Path

    # ---- Markdown vault backend ----
    obsidian_enabled: bool
    obsidian_vault_path: Optional[Path]
    obsidian_folders: Optional[List[str]]
    obsidian_ignore_folders: List[str]
    obsidian_inbox_file: str

    @staticmethod
    def from_env() -> "Settings":
        data_dir = default_data_dir()

        ignore_folders = _env_list(_k("OBSIDIAN_IGNORE_FOLDERS"), DEFAULT_IGNORE_FOLDERS)

        return Settings(
            app_name=_env(_k("APP_NAME"), "tasuki") or "tasuki",
            log_level=_env(_k("LOG_LEVEL"), "WARNING"),
            data_dir=data_dir,
            local_enabled=_env_bool(_k("LOCAL_ENABLED"), True),
            local_path=_env_path(_k("LOCAL_PATH"), data_dir / "todo.txt") or data_dir / "todo.txt",
            obsidian_enabled=_env_bool(_k("OBSIDIAN_ENABLED"), False),
            obsidian_vault_path=_env_path(_k("OBSIDIAN_VAULT_PATH"), None),
            obsidian_folders=_env_list(_k("OBSIDIAN_FOLDERS"), None),
            obsidian_ignore_folders=ignore_folders or [],
            obsidian_inbox_file=_env(_k("OBSIDIAN_INBOX_FILE"), DEFAULT_INBOX_FILE).strip()
            or DEFAULT_INBOX_FILE,
        )

    def backend_tables(self) -> dict[str, dict[str, Any]]:
        """
        Resolved per-backend configuration tables.

        Shape (keys mirror the config file sections of the same name):
          {"local": {"enabled", "path"},
           "obsidian": {"enabled", "vault_path", "folders", "ignore_folders", "inbox_file"}}
        """
        obsidian: dict[str, Any] = {
            "enabled": self.obsidian_enabled,
            "ignore_folders": list(self.obsidian_ignore_folders),
            "inbox_file": self.obsidian_inbox_file,
        }
        if self.obsidian_vault_path is not None:
            obsidian["vault_path"] = str(self.obsidian_vault_path)
        if self.obsidian_folders is not None:
            obsidian["folders"] = list(self.obsidian_folders)

        return {
            "local": {"enabled": self.local_enabled, "path": str(self.local_path)},
            "obsidian": obsidian,
        }


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
