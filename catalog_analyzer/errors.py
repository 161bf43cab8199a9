"""Exceptions raised by the catalog index, the dependency graph and the loaders."""

from __future__ import annotations

from typing import List, Optional, Sequence


class CatalogError(Exception):
    """Base class for every error raised by catalog_analyzer."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class InvalidKeyError(CatalogError, ValueError):
    """A record key does not match the configured key format."""

    def __init__(self, key: str):
        super().__init__(f"Invalid course ID format: {key!r}", key=key)


class DuplicateKeyError(CatalogError, KeyError):
    """A record with the same key is already in the catalog."""

    def __init__(self, key: str):
        super().__init__(f"Course already exists: {key}", key=key)

    # KeyError.__str__ would repr() the message.
    def __str__(self) -> str:
        return str(self.args[0])


class NotFoundError(CatalogError, LookupError):
    """A traversal or detail query named a key that is not in the catalog."""

    def __init__(self, key: str):
        super().__init__(f"Course not found: {key}", key=key)


class CycleDetectedError(CatalogError):
    """Linearization was requested on a graph with a prerequisite cycle."""

    def __init__(self, key: Optional[str], cycle: Sequence[str]):
        self.cycle: List[str] = list(cycle)
        where = f" for: {key}" if key else ""
        path = " -> ".join(self.cycle)
        super().__init__(f"Circular prerequisite dependency detected{where} ({path})", key=key)


class CatalogFileError(CatalogError):
    """A catalog file line could not be turned into a course row."""

    def __init__(self, message: str, path: Optional[str] = None, line_no: Optional[int] = None):
        location = ""
        if path is not None and line_no is not None:
            location = f"{path}:{line_no}: "
        elif line_no is not None:
            location = f"line {line_no}: "
        super().__init__(f"{location}{message}")
        self.path = path
        self.line_no = line_no


class ConfigError(CatalogError):
    """The YAML configuration is missing, malformed or holds invalid values."""
