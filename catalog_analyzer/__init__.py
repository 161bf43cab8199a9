"""
Course catalog analyzer: an ordered course index plus the prerequisite graph
built over it (cycle detection and prerequisite ordering).
"""

from .catalog import CatalogIndex
from .errors import (
    CatalogError,
    CatalogFileError,
    ConfigError,
    CycleDetectedError,
    DuplicateKeyError,
    InvalidKeyError,
    NotFoundError,
)
from .graph import DependencyGraph, GraphStats
from .key_format import DEFAULT_KEY_FORMAT, KeyFormat, is_valid_key
from .planner import CoursePlanner
from .record import Record
from .validation import ValidationReport, Violation, ViolationKind, validate


__all__ = [
    'CatalogIndex',
    'CatalogError',
    'CatalogFileError',
    'ConfigError',
    'CoursePlanner',
    'CycleDetectedError',
    'DEFAULT_KEY_FORMAT',
    'DependencyGraph',
    'DuplicateKeyError',
    'GraphStats',
    'InvalidKeyError',
    'KeyFormat',
    'NotFoundError',
    'Record',
    'ValidationReport',
    'Violation',
    'ViolationKind',
    'is_valid_key',
    'validate',
]
