"""
Prerequisite graph over a ``CatalogIndex``.

The graph is not stored separately: forward edges are each record's
``prerequisites`` and reverse edges are the derived ``dependents`` sets that
``rebuild()`` recomputes. Edge direction follows the natural dependency
direction used throughout this package:

- If course A lists B as a prerequisite, there is an edge A -> B.
- An order is valid when every course comes after all of its prerequisites.

Prerequisite keys with no matching record (dangling references) are skipped by
every traversal here; ``validation.validate`` is what reports them.
"""

from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .catalog import CatalogIndex
from .errors import CycleDetectedError, NotFoundError
from .record import Record

logger = logging.getLogger(__name__)


class _State(Enum):
    # A key absent from the state map is unvisited.
    ON_STACK = 1
    DONE = 2


@dataclass(frozen=True)
class GraphStats:
    records: int
    edges: int
    dangling: int
    avg_in_degree: float
    avg_out_degree: float
    max_in_degree: int
    max_out_degree: int
    roots: int
    leaves: int


class DependencyGraph:
    def __init__(self, index: CatalogIndex):
        self.index = index
        self._built_version: Optional[int] = None

    # --- Edge construction ---

    @property
    def is_current(self) -> bool:
        """True when the dependents sets reflect the index's current records."""
        return self._built_version == self.index.version

    def rebuild(self) -> None:
        """Recompute every record's ``dependents`` from all ``prerequisites`` lists."""
        for record in self.index:
            record.dependents.clear()

        edges = 0
        dangling = 0
        for record in self.index:
            for prereq_key in record.prerequisites:
                prereq = self.index.find(prereq_key)
                if prereq is None:
                    dangling += 1
                    continue
                if record.key not in prereq.dependents:
                    prereq.dependents.add(record.key)
                    edges += 1

        self._built_version = self.index.version
        logger.debug(
            "Rebuilt dependency graph: %d records, %d edges, %d dangling reference(s)",
            len(self.index),
            edges,
            dangling,
        )

    def ensure_current(self) -> None:
        if not self.is_current:
            self.rebuild()

    # --- Neighbours ---

    def _require(self, key: str) -> Record:
        record = self.index.find(key)
        if record is None:
            raise NotFoundError(key)
        return record

    def _resolved(self, key: str) -> List[str]:
        """Distinct prerequisite keys of ``key`` that exist in the catalog, in declared order."""
        record = self.index.find(key)
        if record is None:
            return []
        return [p for p in dict.fromkeys(record.prerequisites) if p in self.index]

    def prerequisites_of(self, key: str) -> List[str]:
        self._require(key)
        return self._resolved(key)

    def dependents_of(self, key: str) -> List[str]:
        record = self._require(key)
        self.ensure_current()
        return sorted(record.dependents)

    # --- Traversal ---

    def _walk(self, roots: Iterable[str]) -> Tuple[List[str], Optional[List[str]]]:
        """Depth-first walk along prerequisite edges starting from ``roots``.

        Each key moves unvisited -> on-stack -> done. Returns the keys in
        post-order (every key after all of its prerequisites) and, if an edge
        into an on-stack key was met, the cycle it closes. The walk stops at
        the first such edge.
        """
        state: Dict[str, _State] = {}
        order: List[str] = []
        path: List[str] = []
        stack: List[Tuple[str, Iterator[str]]] = []

        def enter(key: str) -> None:
            state[key] = _State.ON_STACK
            path.append(key)
            stack.append((key, iter(self._resolved(key))))

        for root in roots:
            if root in state or root not in self.index:
                continue
            enter(root)
            while stack:
                key, edges = stack[-1]
                for prereq in edges:
                    status = state.get(prereq)
                    if status is _State.ON_STACK:
                        return order, path[path.index(prereq):] + [prereq]
                    if status is None:
                        enter(prereq)
                        break
                else:
                    stack.pop()
                    path.pop()
                    state[key] = _State.DONE
                    order.append(key)

        return order, None

    def find_cycle(self, start_key: str) -> Optional[List[str]]:
        """Return the first prerequisite cycle reachable from ``start_key``.

        The path starts and ends with the same key, e.g. ``["A", "B", "A"]``.
        Returns None when no cycle is reachable.
        """
        self._require(start_key)
        _, cycle = self._walk([start_key])
        if cycle:
            logger.debug("Cycle reachable from %s: %s", start_key, " -> ".join(cycle))
        return cycle

    def has_cycle(self, start_key: str) -> bool:
        return self.find_cycle(start_key) is not None

    def topological_order(self, start_key: str) -> List[Record]:
        """Return the transitive prerequisites of ``start_key``, prerequisites first.

        ``start_key`` itself is not part of the result.

        Raises:
            NotFoundError: ``start_key`` is not in the catalog.
            CycleDetectedError: a cycle is reachable from ``start_key``.
        """
        cycle = self.find_cycle(start_key)
        if cycle is not None:
            raise CycleDetectedError(start_key, cycle)

        order, _ = self._walk(self._resolved(start_key))
        return [self.index.find(key) for key in order]

    # --- Whole-catalog analysis ---

    def cycle_groups(self) -> List[List[str]]:
        """
        Find every group of courses that require each other, using Tarjan's
        strongly connected components algorithm.

        Returns:
            A list of sorted key lists, ordered by their first key. Includes
            self-loops (a course that lists itself as a prerequisite).
        """
        index_of: Dict[str, int] = {}
        lowlink: Dict[str, int] = {}
        on_stack = set()
        stack: List[str] = []
        groups: List[List[str]] = []
        counter = 0

        for root in self.index.keys():
            if root in index_of:
                continue

            index_of[root] = lowlink[root] = counter
            counter += 1
            stack.append(root)
            on_stack.add(root)
            work: List[Tuple[str, Iterator[str]]] = [(root, iter(self._resolved(root)))]

            while work:
                node, successors = work[-1]
                for successor in successors:
                    if successor not in index_of:
                        # Successor has not yet been visited; descend into it
                        index_of[successor] = lowlink[successor] = counter
                        counter += 1
                        stack.append(successor)
                        on_stack.add(successor)
                        work.append((successor, iter(self._resolved(successor))))
                        break
                    if successor in on_stack:
                        # Successor is on the stack and hence in the current SCC
                        lowlink[node] = min(lowlink[node], index_of[successor])
                else:
                    work.pop()
                    if work:
                        parent = work[-1][0]
                        lowlink[parent] = min(lowlink[parent], lowlink[node])

                    # If node is a root node, pop the stack and generate an SCC
                    if lowlink[node] == index_of[node]:
                        scc = []
                        while True:
                            member = stack.pop()
                            on_stack.remove(member)
                            scc.append(member)
                            if member == node:
                                break
                        if len(scc) > 1 or node in self._resolved(node):
                            groups.append(sorted(scc))

        groups.sort(key=lambda group: group[0])
        return groups

    def catalog_order(self) -> List[Record]:
        """
        Order the whole catalog so every course follows its prerequisites.

        Courses whose prerequisites are all placed are released through a
        min-heap, so ties are broken by ascending key.

        Raises:
            CycleDetectedError: the catalog contains a prerequisite cycle.
        """
        self.ensure_current()

        in_degree: Dict[str, int] = {key: len(self._resolved(key)) for key in self.index.keys()}
        heap: List[str] = [key for key, degree in in_degree.items() if degree == 0]
        heapq.heapify(heap)
        result: List[str] = []

        while heap:
            key = heapq.heappop(heap)
            result.append(key)
            for dependent in sorted(self.index.find(key).dependents):
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    heapq.heappush(heap, dependent)

        if len(result) != len(in_degree):
            placed = set(result)
            remaining = [key for key in self.index.keys() if key not in placed]
            cycle = self.find_cycle(remaining[0]) or remaining
            logger.info("Catalog order blocked by %d course(s) in or behind a cycle", len(remaining))
            raise CycleDetectedError(None, cycle)

        return [self.index.find(key) for key in result]

    def stats(self) -> GraphStats:
        self.ensure_current()

        keys = self.index.keys()
        total = len(keys)
        out_degree = {key: len(self._resolved(key)) for key in keys}
        in_degree = {key: len(self.index.find(key).dependents) for key in keys}
        dangling = sum(
            1 for record in self.index for p in record.prerequisites if p not in self.index
        )

        return GraphStats(
            records=total,
            edges=sum(out_degree.values()),
            dangling=dangling,
            avg_in_degree=sum(in_degree.values()) / float(total) if total else 0.0,
            avg_out_degree=sum(out_degree.values()) / float(total) if total else 0.0,
            max_in_degree=max(in_degree.values(), default=0),
            max_out_degree=max(out_degree.values(), default=0),
            roots=sum(1 for record in self.index if not record.prerequisites),
            leaves=sum(1 for degree in in_degree.values() if degree == 0),
        )
