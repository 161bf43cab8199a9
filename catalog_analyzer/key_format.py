"""Structural validation of course keys.

A key such as ``CSCI200`` is a 2-4 letter subject prefix followed by at
least three digits. Hosts that need to accept other identifier families
combine formats with ``KeyFormat.any_of`` instead of patching the default.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Tuple

DEFAULT_KEY_PATTERN = r"[A-Za-z]{2,4}[0-9]{3,}"
DEFAULT_MAX_KEY_LENGTH = 20


@dataclass(frozen=True)
class KeyFormat:
    pattern: str = DEFAULT_KEY_PATTERN
    max_length: int = DEFAULT_MAX_KEY_LENGTH
    alternatives: Tuple["KeyFormat", ...] = ()
    _compiled: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.max_length <= 0:
            raise ValueError(f"max_length must be positive, got {self.max_length}")
        object.__setattr__(self, "_compiled", re.compile(_strip_anchors(self.pattern)))

    def is_valid(self, key: str) -> bool:
        """Return True if ``key`` matches this format or one of its alternatives."""
        if not isinstance(key, str):
            return False
        if key and len(key) <= self.max_length and self._compiled.fullmatch(key):
            return True
        return any(alt.is_valid(key) for alt in self.alternatives)

    @classmethod
    def any_of(cls, primary: "KeyFormat", *others: "KeyFormat") -> "KeyFormat":
        """Accept keys valid under ``primary`` or any of ``others``."""
        return cls(
            pattern=primary.pattern,
            max_length=primary.max_length,
            alternatives=primary.alternatives + tuple(others),
        )


def _strip_anchors(pattern: str) -> str:
    # fullmatch() already anchors; "^...$" in config files is tolerated.
    if pattern.startswith("^"):
        pattern = pattern[1:]
    if pattern.endswith("$") and not pattern.endswith("\\$"):
        pattern = pattern[:-1]
    return pattern


DEFAULT_KEY_FORMAT = KeyFormat()


def is_valid_key(key: str) -> bool:
    return DEFAULT_KEY_FORMAT.is_valid(key)
