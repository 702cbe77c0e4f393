"""
Backend subsystem.

Components:
- line_mutator.py: line-addressed read/transform/write on plain-text files
- localfile.py: todo.txt-style codec + single-file backend ("local:<line>")
- checklist.py: markdown checkbox codec ("obsidian:<path>:<line>")
- vault_scanner.py: markdown file discovery inside a vault
- obsidian.py: markdown vault backend
- manager.py: fan-out fetch, sort, and id-prefix routing
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .localfile import LocalFileBackend, LocalFileConfig
from .obsidian import VaultBackend, VaultConfig

# Closed set of backend kinds.
Backend = LocalFileBackend | VaultBackend

BACKEND_KINDS = ("local", "obsidian")


def build_backend(kind: str, table: Mapping[str, Any]) -> Backend:
    match kind:
        case "local":
            return LocalFileBackend(LocalFileConfig.from_table(dict(table)))
        case "obsidian":
            return VaultBackend(VaultConfig.from_table(dict(table)))
        case _:
            raise ValueError(f"Unknown backend kind: {kind}")


def build_backends(tables: Mapping[str, Mapping[str, Any] | None]) -> list[Backend]:
    """
    Build enabled backends from per-backend config tables, local first.

    A missing table or `enabled` other than True means the backend is off.
    """
    backends: list[Backend] = []
    for kind in BACKEND_KINDS:
        table = tables.get(kind)
        if not table or table.get("enabled") is not True:
            continue
        backends.append(build_backend(kind, table))
    return backends
