"""
Read course catalog files.

Each non-blank line holds one course::

    CSCI300,Introduction to Algorithms,CSCI200,MATH201

Fields are comma separated (quoted fields may contain commas), surrounding
whitespace is trimmed, and lines starting with ``#`` are comments. Keys are
upper-cased so ``csci300`` and ``CSCI300`` name the same course.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, NamedTuple, Optional, Tuple, Union

from .errors import CatalogError, CatalogFileError
from .planner import CoursePlanner
from .validation import ValidationReport

logger = logging.getLogger(__name__)


class CourseRow(NamedTuple):
    key: str
    title: str
    prerequisites: Tuple[str, ...]
    line_no: int = 0


@dataclass(frozen=True)
class LoadResult:
    loaded: int
    skipped: int
    report: ValidationReport


def normalize_key(key: str) -> str:
    return key.strip().upper()


def parse_line(line: str, line_no: int = 0, path: Optional[str] = None) -> Optional[CourseRow]:
    """Turn one catalog line into a ``CourseRow``; None for blank and comment lines."""
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None

    fields = [f.strip() for f in next(csv.reader([stripped], skipinitialspace=True))]
    if len(fields) < 2 or not fields[0] or not fields[1]:
        raise CatalogFileError(
            f"expected at least a course ID and a title, got {stripped!r}", path=path, line_no=line_no
        )

    prerequisites = tuple(normalize_key(f) for f in fields[2:] if f)
    return CourseRow(normalize_key(fields[0]), fields[1], prerequisites, line_no)


def decode_line(raw: bytes, line_no: int = 0, path: Optional[str] = None) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CatalogFileError(
            f"line is not valid UTF-8 ({e.reason} at column {e.start + 1})", path=path, line_no=line_no
        ) from e


def _raw_lines(path: Union[str, Path]) -> List[bytes]:
    # Decoded one line at a time so a bad byte is reported against its line.
    with open(path, "rb") as f:
        return f.read().splitlines()


def parse_catalog_lines(lines: Iterable[str], path: Optional[str] = None) -> Iterator[CourseRow]:
    for line_no, line in enumerate(lines, start=1):
        row = parse_line(line, line_no, path)
        if row is not None:
            yield row


def read_catalog_file(path: Union[str, Path]) -> List[CourseRow]:
    lines = (decode_line(raw, n, str(path)) for n, raw in enumerate(_raw_lines(path), start=1))
    return list(parse_catalog_lines(lines, path=str(path)))


def load_catalog(path: Union[str, Path], planner: CoursePlanner, strict: bool = True) -> LoadResult:
    """Insert every course of the file at ``path`` into ``planner``.

    In strict mode the first malformed line (undecodable bytes included) or
    rejected course raises (courses inserted before it stay in the planner).
    Otherwise the offending line is logged and skipped. The graph is rebuilt
    and validated once all lines are read; validation problems are logged,
    not raised.
    """
    loaded = 0
    skipped = 0
    for line_no, raw in enumerate(_raw_lines(path), start=1):
        try:
            row = parse_line(decode_line(raw, line_no, str(path)), line_no, str(path))
            if row is None:
                continue
            planner.add_course(row.key, row.title, row.prerequisites)
        except CatalogError as e:
            if strict:
                raise
            skipped += 1
            logger.warning("Skipping %s line %d: %s", path, line_no, e)
            continue
        loaded += 1

    planner.rebuild()
    report = planner.validate()
    for violation in report:
        logger.warning("Validation: %s", violation.message)
    if not report.ok:
        logger.warning("Some prerequisites could not be validated (%d problem(s))", len(report))

    logger.info("Loaded %d course(s) from %s (%d skipped)", loaded, path, skipped)
    return LoadResult(loaded=loaded, skipped=skipped, report=report)
