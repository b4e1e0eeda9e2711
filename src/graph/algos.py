"""Graph algorithms over the group-level policy graph."""

from __future__ import annotations

from collections.abc import Iterator


def strongly_connected_components(graph: dict[str, set[str]]) -> list[list[str]]:
    """Return every SCC of ``graph`` with members sorted, in sorted order.

    Tarjan's algorithm driven by an explicit work list, so deep policy
    chains never hit the interpreter recursion limit. Neighbours that are
    not keys of ``graph`` are treated as sinks.
    """
    discovered: dict[str, int] = {}
    low: dict[str, int] = {}
    pending: list[str] = []
    pending_set: set[str] = set()
    components: list[list[str]] = []
    work: list[tuple[str, Iterator[str]]] = []

    def enter(node: str) -> None:
        discovered[node] = low[node] = len(discovered)
        pending.append(node)
        pending_set.add(node)
        work.append((node, iter(sorted(graph.get(node, ())))))

    for start in sorted(graph):
        if start in discovered:
            continue
        enter(start)
        while work:
            node, neighbours = work[-1]
            for neighbour in neighbours:
                if neighbour not in discovered:
                    enter(neighbour)
                    break
                if neighbour in pending_set:
                    low[node] = min(low[node], discovered[neighbour])
            else:
                work.pop()
                if work:
                    parent = work[-1][0]
                    low[parent] = min(low[parent], low[node])
                if low[node] != discovered[node]:
                    continue
                # node roots a component: everything above it on the stack
                component: list[str] = []
                member = None
                while member != node:
                    member = pending.pop()
                    pending_set.discard(member)
                    component.append(member)
                components.append(sorted(component))

    return sorted(components)


def find_group_cycles(graph: dict[str, set[str]]) -> list[list[str]]:
    """Find cycles between distinct groups.

    Self-edges (a group allowed to depend on itself) are legal and are not
    reported; only components with two or more groups count.
    """
    return [
        component
        for component in strongly_connected_components(graph)
        if len(component) > 1
    ]


__all__ = ["find_group_cycles", "strongly_connected_components"]
