"""Prerequisite list validation.

Violations are collected for the whole catalog in one pass and returned as a
``ValidationReport``; nothing here raises for a bad record, so a catalog with
some invalid entries stays queryable.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List

from .catalog import CatalogIndex

logger = logging.getLogger(__name__)


class ViolationKind(Enum):
    SELF_REFERENCE = "self_reference"
    DUPLICATE_PREREQUISITE = "duplicate_prerequisite"
    UNKNOWN_PREREQUISITE = "unknown_prerequisite"


_DESCRIPTIONS = {
    ViolationKind.SELF_REFERENCE: "lists itself as a prerequisite",
    ViolationKind.DUPLICATE_PREREQUISITE: "lists prerequisite {prereq} more than once",
    ViolationKind.UNKNOWN_PREREQUISITE: "requires {prereq}, which is not in the catalog",
}


@dataclass(frozen=True)
class Violation:
    key: str
    kind: ViolationKind
    prerequisite: str

    @property
    def message(self) -> str:
        return f"{self.key} " + _DESCRIPTIONS[self.kind].format(prereq=self.prerequisite)


@dataclass
class ValidationReport:
    violations: List[Violation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations

    def by_key(self) -> Dict[str, List[Violation]]:
        grouped: Dict[str, List[Violation]] = defaultdict(list)
        for violation in self.violations:
            grouped[violation.key].append(violation)
        return dict(grouped)

    def by_kind(self) -> Dict[ViolationKind, List[Violation]]:
        grouped: Dict[ViolationKind, List[Violation]] = defaultdict(list)
        for violation in self.violations:
            grouped[violation.kind].append(violation)
        return dict(grouped)

    def __iter__(self) -> Iterator[Violation]:
        return iter(self.violations)

    def __len__(self) -> int:
        return len(self.violations)


def validate(index: CatalogIndex) -> ValidationReport:
    """Check every record's prerequisite list against the catalog.

    A list entry is a self reference when it equals the record's key, a
    duplicate when it already appeared earlier in the same list, and unknown
    when no record has that key. Each offending entry yields one violation;
    a self reference is not also reported as unknown.
    """
    report = ValidationReport()
    for record in index:
        seen = set()
        for prereq in record.prerequisites:
            if prereq in seen:
                report.violations.append(Violation(record.key, ViolationKind.DUPLICATE_PREREQUISITE, prereq))
                continue
            seen.add(prereq)
            if prereq == record.key:
                report.violations.append(Violation(record.key, ViolationKind.SELF_REFERENCE, prereq))
            elif prereq not in index:
                report.violations.append(Violation(record.key, ViolationKind.UNKNOWN_PREREQUISITE, prereq))

    logger.debug("Validated %d record(s): %d violation(s)", len(index), len(report))
    return report
