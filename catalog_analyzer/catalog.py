"""Ordered, uniquely keyed course index.

Records are stored once, in a dict keyed by course key (the arena). A sorted
list of keys, maintained with ``bisect``, provides ascending enumeration
without re-sorting on every read.
"""

from __future__ import annotations

import bisect
import dataclasses
import logging
from typing import Dict, Iterable, Iterator, List, Optional

from .errors import DuplicateKeyError, InvalidKeyError
from .key_format import DEFAULT_KEY_FORMAT, KeyFormat
from .record import Record

logger = logging.getLogger(__name__)


class CatalogIndex:
    """Container of ``Record`` objects with O(1) lookup and key-ordered iteration."""

    def __init__(self, key_format: Optional[KeyFormat] = None):
        self.key_format = key_format or DEFAULT_KEY_FORMAT
        self._records: Dict[str, Record] = {}
        self._sorted_keys: List[str] = []
        self._version = 0

    @property
    def version(self) -> int:
        """Bumped on every successful mutation."""
        return self._version

    def insert(self, record: Record) -> Record:
        """Add ``record`` to the catalog.

        Raises:
            InvalidKeyError: the key fails the key format.
            DuplicateKeyError: a record with this key already exists.

        Both checks run before anything is stored, so a failed insert leaves
        the catalog untouched. The index keeps its own copy of ``record``;
        the stored copy is returned.
        """
        if not self.key_format.is_valid(record.key):
            raise InvalidKeyError(record.key)
        if record.key in self._records:
            raise DuplicateKeyError(record.key)

        stored = dataclasses.replace(record)
        self._records[stored.key] = stored
        bisect.insort(self._sorted_keys, stored.key)
        self._version += 1
        logger.debug("Inserted %s (%d prerequisite(s))", stored.key, len(stored.prerequisites))
        return stored

    def find(self, key: str) -> Optional[Record]:
        return self._records.get(key)

    def records(self) -> "OrderedRecords":
        """Return a restartable view of the records in ascending key order."""
        return OrderedRecords(self)

    def keys(self) -> List[str]:
        return list(self._sorted_keys)

    def clear(self) -> None:
        self._records.clear()
        self._sorted_keys.clear()
        self._version += 1

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records())

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def __repr__(self) -> str:
        return f"CatalogIndex({len(self)} records)"


class OrderedRecords(Iterable[Record]):
    """Lazy view over a ``CatalogIndex``; each ``iter()`` starts from the smallest key."""

    def __init__(self, index: CatalogIndex):
        self._index = index

    def __iter__(self) -> Iterator[Record]:
        # Snapshot the key list so an insert during iteration cannot skip or repeat keys.
        records = self._index._records
        for key in list(self._index._sorted_keys):
            record = records.get(key)
            if record is not None:
                yield record

    def __len__(self) -> int:
        return len(self._index)
