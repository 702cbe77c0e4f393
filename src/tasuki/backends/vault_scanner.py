# src/tasuki/backends/vault_scanner.py

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


def relative_posix(path: Path, root: Path) -> str:
    return PurePosixPath(*path.relative_to(root).parts).as_posix()


def in_allowed_folders(rel_path: str, folders: Iterable[str]) -> bool:
    """Component-wise prefix test: "Projects" matches "Projects/a.md", not "ProjectsOld/a.md"."""
    rel = PurePosixPath(rel_path)
    for folder in folders:
        prefix = PurePosixPath(folder.strip().strip("/"))
        if str(prefix) in ("", "."):
            return True
        if rel.is_relative_to(prefix):
            return True
    return False


def markdown_files(
    root: str | Path,
    *,
    ignore_folders: Iterable[str] = (),
    folders: Iterable[str] | None = None,
) -> list[Path]:
    """
    Collect markdown files under `root`, following symlinks.

    A symlink pointing back at one of its own ancestors is not descended into.
    A folder reachable through several paths (e.g. two symlink aliases) is
    listed once per path, so each copy gets its own vault-relative ids.

    - names starting with '.' are skipped (files and directories; not the root)
    - directories named in `ignore_folders` are not descended into
    - only *.md files
    - with `folders`, only files whose vault-relative path lies under one of them

    The order of the result is unspecified.
    """
    root = Path(root)
    ignored = set(ignore_folders)
    allowed = list(folders) if folders is not None else None

    files: list[Path] = []
    # dirpath -> (dev, ino) of every directory on the path from root, itself included
    chains: dict[str, tuple[tuple[int, int], ...]] = {}

    def on_error(err: OSError) -> None:
        logger.warning("Vault walk error: %s", err)

    for dirpath, dirnames, filenames in os.walk(root, followlinks=True, onerror=on_error):
        try:
            st = os.stat(dirpath)
        except OSError:
            dirnames[:] = []
            continue
        key = (st.st_dev, st.st_ino)
        ancestors = chains.get(os.path.dirname(dirpath), ())
        if key in ancestors:
            # Symlink back to an ancestor.
            dirnames[:] = []
            continue
        chains[dirpath] = ancestors + (key,)

        dirnames[:] = [d for d in dirnames if not _is_hidden(d) and d not in ignored]

        base = Path(dirpath)
        for fname in filenames:
            if _is_hidden(fname) or not fname.endswith(MARKDOWN_SUFFIX):
                continue
            path = base / fname
            if allowed is not None and not in_allowed_folders(relative_posix(path, root), allowed):
                continue
            files.append(path)

    return files
