"""Policy model: allowed group edges plus per-target exceptions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from rules.errors import (
    DuplicateExceptionError,
    EmptyRationaleError,
    InvalidExceptionEndpointError,
    UnknownGroupError,
    WildcardExceptionError,
)
from rules.groups import GroupRegistry
from utils import is_label, normalize_package_ref

UngroupedBehavior = Literal["allow", "deny", "ignore"]

_WILDCARD_NAMES = frozenset({"all", "all-targets", "__subpackages__"})


@dataclass(frozen=True)
class PolicyException:
    """An auditable override permitting one otherwise forbidden edge.

    ``target`` is either an exact target label or a package path.
    """

    source: str
    target: str
    rationale: str

    @property
    def key(self) -> tuple[str, str]:
        return (self.source, self.target)


def _check_exact(value: str, *, allow_package_ref: bool) -> None:
    if not is_label(value):
        raise InvalidExceptionEndpointError(value)
    _package, _sep, name = value.partition(":")
    if "..." in value or "*" in value:
        raise WildcardExceptionError(value)
    if name in _WILDCARD_NAMES:
        raise WildcardExceptionError(value)
    if not allow_package_ref and name == "__pkg__":
        raise WildcardExceptionError(value)


class Policy:
    """Directed ``may depend on`` relation over package groups.

    Permission is a direct lookup: ``A -> B`` and ``B -> C`` do not imply
    ``A -> C``. Every pairwise permission has to be declared.
    """

    def __init__(
        self, registry: GroupRegistry, *, ungrouped: UngroupedBehavior = "deny"
    ) -> None:
        self.registry = registry
        self.ungrouped: UngroupedBehavior = ungrouped
        self._allowed: dict[str, set[str]] = {}
        self._rationales: dict[tuple[str, str], str] = {}
        self._exceptions: dict[tuple[str, str], PolicyException] = {}

    def allow(self, source_group: str, target_group: str, rationale: str = "") -> None:
        """Register a policy edge. Registering an existing edge is a no-op."""
        for name in (source_group, target_group):
            if name not in self.registry:
                context = f"rule '{source_group}' -> '{target_group}'"
                raise UnknownGroupError(name, context)

        self._allowed.setdefault(source_group, set()).add(target_group)
        if rationale.strip():
            self._rationales.setdefault((source_group, target_group), rationale.strip())

    def is_permitted(self, source_group: str, target_group: str) -> bool:
        return target_group in self._allowed.get(source_group, ())

    def edges(self) -> list[tuple[str, str]]:
        return sorted(
            (source, target)
            for source, targets in self._allowed.items()
            for target in targets
        )

    def rule_rationale(self, source_group: str, target_group: str) -> str:
        return self._rationales.get((source_group, target_group), "")

    def add_exception(
        self, source_target: str, target: str, rationale: str
    ) -> PolicyException:
        """Register an exception for ``source_target -> target``.

        ``target`` may name a target label or a package (``//pkg`` or
        ``//pkg:__pkg__``). Wildcards are rejected on both sides.
        """
        source_target = source_target.strip()
        target = target.strip()
        _check_exact(source_target, allow_package_ref=False)
        _check_exact(target, allow_package_ref=True)
        target = normalize_package_ref(target)

        if not rationale or not rationale.strip():
            raise EmptyRationaleError(source_target, target)

        exception = PolicyException(
            source=source_target, target=target, rationale=rationale.strip()
        )
        if exception.key in self._exceptions:
            raise DuplicateExceptionError(source_target, target)
        self._exceptions[exception.key] = exception
        return exception

    def find_exception(
        self, source_target: str, target: str, target_package: str
    ) -> PolicyException | None:
        """Return the exception matching ``(source, target)`` or ``(source, package)``."""
        exception = self._exceptions.get((source_target, target))
        if exception is None:
            exception = self._exceptions.get((source_target, target_package))
        return exception

    def exceptions(self) -> list[PolicyException]:
        return [self._exceptions[key] for key in sorted(self._exceptions)]

    def group_graph(self) -> dict[str, set[str]]:
        """Return the policy as an adjacency mapping over every registered group."""
        graph: dict[str, set[str]] = {name: set() for name in self.registry.names()}
        for source, target in self.edges():
            graph[source].add(target)
        return graph
