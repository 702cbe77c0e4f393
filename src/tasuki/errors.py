# src/tasuki/errors.py

"""
Error taxonomy.

Every failure the core reports is a TasukiError subclass; nothing here exits the process.
"""

from __future__ import annotations


class TasukiError(Exception):
    """Base class for all tasuki errors."""


class ConfigError(TasukiError):
    def __init__(self, message: str) -> None:
        super().__init__(f"Config error: {message}")
        self.message = message


class BackendError(TasukiError):
    """A named backend's operation failed."""

    def __init__(self, backend: str, message: str) -> None:
        super().__init__(f"Backend '{backend}' error: {message}")
        self.backend = backend
        self.message = message


class TaskIOError(TasukiError):
    """File-system failure (wraps the underlying OSError as __cause__)."""

    def __init__(self, message: str) -> None:
        super().__init__(f"IO error: {message}")
        self.message = message


class ParseError(TasukiError):
    """Malformed identifier or an un-decodable targeted line."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Parse error: {message}")
        self.message = message


class LineRangeError(ParseError):
    def __init__(self, line_num: int, line_count: int) -> None:
        super().__init__(f"Line {line_num} out of range (file has {line_count} lines)")
        self.line_num = line_num
        self.line_count = line_count


class JsonError(TasukiError):
    def __init__(self, message: str) -> None:
        super().__init__(f"JSON error: {message}")
        self.message = message


class WatchError(TasukiError):
    """Raised by file-watch collaborators; the core itself never watches files."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Watch error: {message}")
        self.message = message
