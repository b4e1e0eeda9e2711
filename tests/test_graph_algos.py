from __future__ import annotations

from graph.algos import find_group_cycles, strongly_connected_components


def test_acyclic_policy_has_no_cycles() -> None:
    graph = {"ic-os": {"release"}, "release": set(), "system-tests": {"ic-os"}}

    assert find_group_cycles(graph) == []


def test_self_edges_are_not_cycles() -> None:
    graph = {"release": {"release"}, "ic-os": {"ic-os", "release"}}

    assert find_group_cycles(graph) == []


def test_two_group_cycle_is_found() -> None:
    graph = {"ic-os": {"release"}, "release": {"ic-os"}, "system-tests": {"ic-os"}}

    assert find_group_cycles(graph) == [["ic-os", "release"]]


def test_cycles_are_sorted_and_deterministic() -> None:
    graph = {
        "z": {"y"},
        "y": {"x"},
        "x": {"z"},
        "b": {"a"},
        "a": {"b"},
    }

    assert find_group_cycles(graph) == [["a", "b"], ["x", "y", "z"]]
    assert find_group_cycles(dict(reversed(list(graph.items())))) == [
        ["a", "b"],
        ["x", "y", "z"],
    ]


def test_strongly_connected_components_cover_every_node() -> None:
    graph = {"a": {"b"}, "b": set(), "c": {"a"}}

    assert strongly_connected_components(graph) == [["a"], ["b"], ["c"]]


def test_long_policy_chain_does_not_exhaust_the_stack() -> None:
    names = [f"g{i:05d}" for i in range(5000)]
    graph = {name: {successor} for name, successor in zip(names, names[1:])}
    graph[names[-1]] = {names[0]}

    assert find_group_cycles(graph) == [names]


def test_neighbours_missing_from_mapping_are_sinks() -> None:
    graph = {"a": {"b", "external"}, "b": {"a"}}

    assert strongly_connected_components(graph) == [["a", "b"], ["external"]]
