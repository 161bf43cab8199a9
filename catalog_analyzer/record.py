from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Set, Tuple


@dataclass(frozen=True)
class Record:
    """A single catalog course.

    ``prerequisites`` keeps the order and the exact entries it was given,
    duplicates and self references included; validation reports those.
    ``dependents`` is derived by ``DependencyGraph.rebuild()`` and is the only
    part of a record that changes after ingestion.
    """

    key: str
    title: str
    prerequisites: Tuple[str, ...] = ()
    dependents: Set[str] = field(default_factory=set, init=False, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.prerequisites, tuple):
            object.__setattr__(self, "prerequisites", tuple(self.prerequisites))

    @classmethod
    def from_row(cls, key: str, title: str, prerequisites: Iterable[str] = ()) -> "Record":
        return cls(key=key, title=title, prerequisites=tuple(prerequisites))
