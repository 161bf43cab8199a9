"""High-level entry point combining the catalog index, the graph and validation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence, Tuple

from .catalog import CatalogIndex, OrderedRecords
from .errors import NotFoundError
from .graph import DependencyGraph, GraphStats
from .key_format import KeyFormat
from .record import Record
from .validation import ValidationReport, validate

if TYPE_CHECKING:
    from .config import PlannerConfig

logger = logging.getLogger(__name__)


class CheckStatus(Enum):
    ENTRY_LEVEL = "entry_level"
    VALID = "valid"
    CIRCULAR = "circular"


@dataclass(frozen=True)
class PrerequisiteCheck:
    record: Record
    status: CheckStatus
    cycle: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class CourseDetails:
    record: Record
    prerequisites: Tuple[str, ...]
    missing: Tuple[str, ...]
    dependents: Tuple[str, ...]


class CoursePlanner:
    """Owns one catalog and keeps its dependency graph in step with it.

    Graph queries rebuild the reverse edges first whenever records were added
    since the last rebuild, so callers never observe stale ``dependents``.
    """

    def __init__(self, key_format: Optional[KeyFormat] = None):
        self.index = CatalogIndex(key_format)
        self.graph = DependencyGraph(self.index)

    @classmethod
    def from_config(cls, config: "PlannerConfig") -> "CoursePlanner":
        return cls(key_format=config.build_key_format())

    # --- Catalog ---

    def insert(self, record: Record) -> Record:
        return self.index.insert(record)

    def add_course(self, key: str, title: str, prerequisites: Iterable[str] = ()) -> Record:
        return self.index.insert(Record.from_row(key, title, prerequisites))

    def extend(self, rows: Iterable[Tuple[str, str, Sequence[str]]]) -> int:
        """Insert ``(key, title, prerequisites)`` rows; stops at the first failing row."""
        count = 0
        for key, title, prerequisites in rows:
            self.add_course(key, title, prerequisites)
            count += 1
        return count

    def find(self, key: str) -> Optional[Record]:
        return self.index.find(key)

    def records(self) -> OrderedRecords:
        return self.index.records()

    def clear(self) -> None:
        self.index.clear()

    def __len__(self) -> int:
        return len(self.index)

    def __contains__(self, key: object) -> bool:
        return key in self.index

    # --- Graph ---

    def rebuild(self) -> None:
        self.graph.rebuild()

    def has_cycle(self, key: str) -> bool:
        self.graph.ensure_current()
        return self.graph.has_cycle(key)

    def find_cycle(self, key: str) -> Optional[List[str]]:
        self.graph.ensure_current()
        return self.graph.find_cycle(key)

    def topological_order(self, key: str) -> List[Record]:
        self.graph.ensure_current()
        return self.graph.topological_order(key)

    def catalog_order(self) -> List[Record]:
        return self.graph.catalog_order()

    def cycle_groups(self) -> List[List[str]]:
        self.graph.ensure_current()
        return self.graph.cycle_groups()

    def dependents_of(self, key: str) -> List[str]:
        return self.graph.dependents_of(key)

    def stats(self) -> GraphStats:
        return self.graph.stats()

    def validate(self) -> ValidationReport:
        return validate(self.index)

    # --- Views for presentation ---

    def course_details(self, key: str) -> CourseDetails:
        record = self.index.find(key)
        if record is None:
            raise NotFoundError(key)
        self.graph.ensure_current()
        declared = tuple(dict.fromkeys(record.prerequisites))
        return CourseDetails(
            record=record,
            prerequisites=declared,
            missing=tuple(p for p in declared if p not in self.index),
            dependents=tuple(sorted(record.dependents)),
        )

    def check_prerequisites(self, key: str) -> PrerequisiteCheck:
        record = self.index.find(key)
        if record is None:
            raise NotFoundError(key)
        if not record.prerequisites:
            return PrerequisiteCheck(record, CheckStatus.ENTRY_LEVEL)
        cycle = self.find_cycle(key)
        if cycle is not None:
            return PrerequisiteCheck(record, CheckStatus.CIRCULAR, tuple(cycle))
        return PrerequisiteCheck(record, CheckStatus.VALID)
