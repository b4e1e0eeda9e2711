"""Evaluate every real dependency edge against the policy."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from graph.model import DependencyGraph
    from rules.policy import Policy, PolicyException

logger = logging.getLogger(__name__)

CHUNK_SIZE = 2048


@dataclass(frozen=True, order=True)
class Violation:
    """A real edge that no policy edge or exception permits."""

    from_target: str
    to_target: str
    from_package: str = field(compare=False)
    to_package: str = field(compare=False)
    from_groups: tuple[str, ...] = field(compare=False)
    to_groups: tuple[str, ...] = field(compare=False)

    @property
    def key(self) -> tuple[str, str]:
        return (self.from_target, self.to_target)


@dataclass(frozen=True)
class CheckResult:
    violations: tuple[Violation, ...]
    edges_checked: int
    used_exceptions: frozenset[tuple[str, str]] = frozenset()

    @property
    def ok(self) -> bool:
        return not self.violations

    def unused_exceptions(self, policy: Policy) -> list[PolicyException]:
        return [
            exception
            for exception in policy.exceptions()
            if exception.key not in self.used_exceptions
        ]


@dataclass
class _Partial:
    violations: list[Violation] = field(default_factory=list)
    used_exceptions: set[tuple[str, str]] = field(default_factory=set)


def _groups_permit(
    from_groups: Sequence[str], to_groups: Sequence[str], policy: Policy
) -> bool:
    if not from_groups or not to_groups:
        if policy.ungrouped in {"allow", "ignore"}:
            return True
    return any(
        policy.is_permitted(source, target)
        for source in from_groups
        for target in to_groups
    )


def check_edge(
    edge: tuple[str, str], graph: DependencyGraph, policy: Policy
) -> tuple[Violation | None, PolicyException | None]:
    """Check a single edge.

    Returns the violation (if any) and the exception that permitted the
    edge (if one was needed).
    """
    source, target = edge
    from_package = graph.package_of(source)
    to_package = graph.package_of(target)
    if from_package == to_package:
        return None, None

    from_groups = graph.groups_of(source)
    to_groups = graph.groups_of(target)
    # Any group of either endpoint may grant the edge.
    if _groups_permit(from_groups, to_groups, policy):
        return None, None

    exception = policy.find_exception(source, target, to_package)
    if exception is not None:
        return None, exception

    violation = Violation(
        from_target=source,
        to_target=target,
        from_package=from_package,
        to_package=to_package,
        from_groups=from_groups,
        to_groups=to_groups,
    )
    return violation, None


def _check_chunk(
    edges: Sequence[tuple[str, str]], graph: DependencyGraph, policy: Policy
) -> _Partial:
    partial = _Partial()
    for edge in edges:
        violation, exception = check_edge(edge, graph, policy)
        if violation is not None:
            partial.violations.append(violation)
        if exception is not None:
            partial.used_exceptions.add(exception.key)
    return partial


def check_graph(
    graph: DependencyGraph, policy: Policy, *, jobs: int = 1
) -> CheckResult:
    """Check every edge of ``graph`` and return the sorted, deduplicated result.

    With ``jobs > 1`` edges are checked in chunks on a thread pool. Inputs
    are read-only, and partial results are merged before sorting, so the
    result does not depend on ``jobs`` or on input edge order.
    """
    edges = graph.unique_edges()
    chunks = [edges[i : i + CHUNK_SIZE] for i in range(0, len(edges), CHUNK_SIZE)]

    if jobs > 1 and len(chunks) > 1:
        with ThreadPoolExecutor(max_workers=jobs) as executor:
            partials = list(
                executor.map(lambda chunk: _check_chunk(chunk, graph, policy), chunks)
            )
    else:
        partials = [_check_chunk(chunk, graph, policy) for chunk in chunks]

    by_key: dict[tuple[str, str], Violation] = {}
    used: set[tuple[str, str]] = set()
    for partial in partials:
        for violation in partial.violations:
            by_key.setdefault(violation.key, violation)
        used.update(partial.used_exceptions)

    violations = tuple(sorted(by_key.values()))
    logger.debug(
        "checked %d edges: %d violations, %d exceptions used",
        len(edges),
        len(violations),
        len(used),
    )
    return CheckResult(
        violations=violations,
        edges_checked=len(edges),
        used_exceptions=frozenset(used),
    )
