"""
Dependency Graph Tests

Validates reverse-edge construction, cycle detection, prerequisite ordering
and the whole-catalog analyses built on ``DependencyGraph``.
"""

from __future__ import annotations

import pytest

from catalog_analyzer import CatalogIndex, CycleDetectedError, DependencyGraph, NotFoundError, Record


def make_graph(courses):
    index = CatalogIndex()
    for key, prereqs in courses.items():
        index.insert(Record(key, f"Course {key}", tuple(prereqs)))
    graph = DependencyGraph(index)
    graph.rebuild()
    return graph


def keys(records):
    return [record.key for record in records]


def assert_prerequisites_first(graph, order):
    position = {key: i for i, key in enumerate(order)}
    for key in order:
        for prereq in graph.prerequisites_of(key):
            assert position[prereq] < position[key], f"{prereq} must come before {key}"


# --- rebuild ---


def test_rebuild_derives_dependents():
    graph = make_graph({"CS100": [], "CS200": ["CS100"], "CS300": ["CS100", "CS200"]})
    index = graph.index

    assert index.find("CS100").dependents == {"CS200", "CS300"}
    assert index.find("CS200").dependents == {"CS300"}
    assert index.find("CS300").dependents == set()


def test_dependency_is_not_symmetric():
    graph = make_graph({"CS100": [], "CS200": ["CS100"]})
    assert "CS100" not in graph.index.find("CS200").dependents


def test_rebuild_is_idempotent():
    graph = make_graph({"CS100": [], "CS200": ["CS100"], "CS300": ["CS200", "CS999"]})
    first = {r.key: set(r.dependents) for r in graph.index}

    graph.rebuild()
    second = {r.key: set(r.dependents) for r in graph.index}

    assert first == second


def test_rebuild_skips_dangling_prerequisites():
    graph = make_graph({"CS200": ["CS100", "MATH100"], "MATH100": []})
    assert graph.index.find("MATH100").dependents == {"CS200"}
    assert graph.index.find("CS100") is None


def test_rebuild_replaces_stale_dependents():
    graph = make_graph({"CS100": []})
    graph.index.find("CS100").dependents.add("CS999")

    graph.rebuild()

    assert graph.index.find("CS100").dependents == set()


def test_is_current_tracks_inserts():
    graph = make_graph({"CS100": []})
    assert graph.is_current

    graph.index.insert(Record("CS200", "Next", ("CS100",)))
    assert not graph.is_current
    assert graph.dependents_of("CS100") == ["CS200"]
    assert graph.is_current


# --- has_cycle / find_cycle ---


def test_two_course_cycle():
    graph = make_graph({"CS100": ["CS200"], "CS200": ["CS100"]})
    assert graph.has_cycle("CS100")
    assert graph.has_cycle("CS200")


def test_self_reference_is_a_cycle():
    graph = make_graph({"CS100": ["CS100"]})
    assert graph.find_cycle("CS100") == ["CS100", "CS100"]


def test_no_cycle_in_chain():
    graph = make_graph({"CS100": [], "CS200": ["CS100"], "CS300": ["CS200"]})
    assert not graph.has_cycle("CS300")
    assert graph.find_cycle("CS300") is None


def test_diamond_is_not_a_cycle():
    # CS400 reaches CS100 through two branches; the second visit is a finished node.
    graph = make_graph(
        {"CS100": [], "CS200": ["CS100"], "CS300": ["CS100"], "CS400": ["CS200", "CS300"]}
    )
    assert not graph.has_cycle("CS400")


def test_cycle_only_counts_when_reachable():
    graph = make_graph({"CS100": ["CS200"], "CS200": ["CS100"], "CS300": [], "CS400": ["CS300"]})
    assert not graph.has_cycle("CS400")


def test_cycle_below_the_start_is_found():
    graph = make_graph({"CS100": ["CS200"], "CS200": ["CS300"], "CS300": ["CS200"]})
    cycle = graph.find_cycle("CS100")
    assert cycle == ["CS200", "CS300", "CS200"]


def test_find_cycle_path_follows_prerequisite_edges():
    graph = make_graph({"CS100": ["CS300"], "CS200": ["CS100"], "CS300": ["CS200"], "CS400": ["CS100"]})
    cycle = graph.find_cycle("CS400")

    assert cycle[0] == cycle[-1]
    for src, dst in zip(cycle, cycle[1:]):
        assert dst in graph.index.find(src).prerequisites


def test_dangling_prerequisites_are_leaves():
    graph = make_graph({"CS200": ["CS100"]})
    assert not graph.has_cycle("CS200")


def test_has_cycle_unknown_key():
    graph = make_graph({"CS100": []})
    with pytest.raises(NotFoundError) as exc:
        graph.has_cycle("CS999")
    assert exc.value.key == "CS999"


def test_deep_chain_does_not_hit_recursion_limit():
    chain = {f"CS{i:04d}": ([f"CS{i - 1:04d}"] if i else []) for i in range(3000)}
    graph = make_graph(chain)

    assert not graph.has_cycle("CS2999")
    order = graph.topological_order("CS2999")
    assert len(order) == 2999
    assert order[0].key == "CS0000"


# --- topological_order ---


def test_topological_order_chain():
    graph = make_graph({"CS100": [], "CS200": ["CS100"], "CS300": ["CS200"]})
    assert keys(graph.topological_order("CS300")) == ["CS100", "CS200"]


def test_topological_order_excludes_start():
    graph = make_graph({"CS100": [], "CS200": ["CS100"]})
    assert "CS200" not in keys(graph.topological_order("CS200"))


def test_topological_order_no_prerequisites():
    graph = make_graph({"CS100": []})
    assert graph.topological_order("CS100") == []


def test_topological_order_visits_shared_prerequisites_once():
    graph = make_graph(
        {"CS100": [], "CS200": ["CS100"], "CS300": ["CS100"], "CS400": ["CS200", "CS300", "CS200"]}
    )
    order = keys(graph.topological_order("CS400"))

    assert order == ["CS100", "CS200", "CS300"]
    assert_prerequisites_first(graph, order)


def test_topological_order_skips_dangling():
    graph = make_graph({"CS100": [], "CS200": ["CS100", "MATH999"]})
    assert keys(graph.topological_order("CS200")) == ["CS100"]


def test_topological_order_on_cycle_raises():
    graph = make_graph({"CS100": ["CS200"], "CS200": ["CS100"], "CS300": ["CS100"]})

    with pytest.raises(CycleDetectedError) as exc:
        graph.topological_order("CS300")

    assert exc.value.key == "CS300"
    assert exc.value.cycle == ["CS100", "CS200", "CS100"]


def test_topological_order_unknown_key():
    graph = make_graph({"CS100": []})
    with pytest.raises(NotFoundError):
        graph.topological_order("CS999")


def test_abcu_prerequisite_path(planner):
    order = keys(planner.topological_order("CSCI400"))

    assert set(order) == {"CSCI100", "CSCI101", "CSCI200", "CSCI300", "CSCI301", "CSCI350", "MATH201"}
    assert_prerequisites_first(planner.graph, order)


def test_traversal_state_is_not_kept_between_calls():
    graph = make_graph({"CS100": [], "CS200": ["CS100"]})
    assert keys(graph.topological_order("CS200")) == ["CS100"]
    assert keys(graph.topological_order("CS200")) == ["CS100"]
    assert not graph.has_cycle("CS200")


# --- Whole-catalog analysis ---


def test_cycle_groups():
    graph = make_graph(
        {
            "CS100": ["CS200"],
            "CS200": ["CS100"],
            "CS300": ["CS300"],
            "CS400": ["CS100"],
            "MATH100": ["MATH300"],
            "MATH200": ["MATH100"],
            "MATH300": ["MATH200"],
        }
    )
    assert graph.cycle_groups() == [["CS100", "CS200"], ["CS300"], ["MATH100", "MATH200", "MATH300"]]


def test_cycle_groups_empty_for_acyclic_catalog(planner):
    assert planner.cycle_groups() == []


def test_catalog_order_respects_prerequisites_and_ties(planner):
    order = keys(planner.catalog_order())

    assert order == [
        "CSCI100",
        "CSCI101",
        "CSCI200",
        "CSCI301",
        "MATH201",
        "CSCI300",
        "CSCI350",
        "CSCI400",
    ]
    assert_prerequisites_first(planner.graph, order)


def test_catalog_order_raises_on_cycle():
    graph = make_graph({"CS100": [], "CS200": ["CS300"], "CS300": ["CS200"], "CS400": ["CS200"]})

    with pytest.raises(CycleDetectedError) as exc:
        graph.catalog_order()

    assert exc.value.key is None
    assert set(exc.value.cycle) == {"CS200", "CS300"}


def test_neighbours():
    graph = make_graph({"CS100": [], "CS200": ["CS100", "CS100", "MATH999"], "CS300": ["CS100"]})

    assert graph.prerequisites_of("CS200") == ["CS100"]
    assert graph.dependents_of("CS100") == ["CS200", "CS300"]
    with pytest.raises(NotFoundError):
        graph.dependents_of("CS999")


def test_stats():
    graph = make_graph({"CS100": [], "CS200": ["CS100", "MATH999"], "CS300": ["CS100", "CS200"]})
    stats = graph.stats()

    assert stats.records == 3
    assert stats.edges == 3
    assert stats.dangling == 1
    assert stats.max_in_degree == 2
    assert stats.max_out_degree == 2
    assert stats.avg_out_degree == pytest.approx(1.0)
    assert stats.roots == 1
    assert stats.leaves == 1


def test_stats_empty_catalog():
    stats = DependencyGraph(CatalogIndex()).stats()
    assert stats.records == 0
    assert stats.avg_in_degree == 0.0
