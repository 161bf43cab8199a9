from __future__ import annotations

from typing import Iterable, Sequence, Tuple

from catalog_analyzer import CoursePlanner

ABCU_ROWS = [
    ("MATH201", "Discrete Mathematics", []),
    ("CSCI300", "Introduction to Algorithms", ["CSCI200", "MATH201"]),
    ("CSCI350", "Operating Systems", ["CSCI300"]),
    ("CSCI101", "Introduction to Programming in C++", ["CSCI100"]),
    ("CSCI100", "Introduction to Computer Science", []),
    ("CSCI301", "Advanced Programming in C++", ["CSCI101"]),
    ("CSCI400", "Large Software Development", ["CSCI301", "CSCI350"]),
    ("CSCI200", "Data Structures", ["CSCI101"]),
]

CATALOG_TEXT = "\n".join(
    ",".join([key, title, *prereqs]) for key, title, prereqs in ABCU_ROWS
) + "\n"


def build_planner(rows: Iterable[Tuple[str, str, Sequence[str]]]) -> CoursePlanner:
    planner = CoursePlanner()
    planner.extend(rows)
    planner.rebuild()
    return planner
