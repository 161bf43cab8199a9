from __future__ import annotations

import pytest

from catalog_analyzer import CoursePlanner

from tests.helpers import ABCU_ROWS, CATALOG_TEXT, build_planner


@pytest.fixture
def planner() -> CoursePlanner:
    return build_planner(ABCU_ROWS)


@pytest.fixture
def catalog_file(tmp_path):
    path = tmp_path / "infile.txt"
    path.write_text(CATALOG_TEXT, encoding="utf-8")
    return path
