# src/tasuki/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the data directory exists,
- wires the enabled backends into a BackendManager.
"""

from __future__ import annotations

import logging

from ..backends.manager import BackendManager
from ..config import Settings, get_settings
from ..errors import ConfigError

logger = logging.getLogger(__name__)

NO_BACKENDS_HINT = (
    "No backends enabled. Set TASUKI_LOCAL_ENABLED=true or "
    "TASUKI_OBSIDIAN_ENABLED=true with TASUKI_OBSIDIAN_VAULT_PATH."
)


def _ensure_local_dirs(settings: Settings) -> None:
    try:
        settings.data_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigError(f"Failed to create {settings.data_dir}: {e}") from e


def create_manager(*, settings: Settings | None = None) -> BackendManager:
    """
    Build a BackendManager from the provided settings.

    Keeping settings injectable makes the CLI easy to test against tmp paths.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    manager = BackendManager.from_settings(settings)
    if manager.is_empty():
        raise ConfigError(NO_BACKENDS_HINT)

    logger.debug("Backends: %s", ", ".join(b.name for b in manager.backends))
    return manager
