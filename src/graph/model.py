"""In-memory dependency graph over build targets."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True)
class Target:
    """A buildable unit and the package that owns it."""

    label: str
    package: str
    groups: tuple[str, ...] = ()


@dataclass(frozen=True)
class DependencyGraph:
    """Immutable target graph with each target's owning package and groups."""

    targets: Mapping[str, Target]
    edges: tuple[tuple[str, str], ...]

    @classmethod
    def build(
        cls, targets: Mapping[str, Target], edges: list[tuple[str, str]]
    ) -> DependencyGraph:
        return cls(
            targets=MappingProxyType(dict(sorted(targets.items()))),
            edges=tuple(edges),
        )

    def package_of(self, label: str) -> str:
        return self.targets[label].package

    def groups_of(self, label: str) -> tuple[str, ...]:
        return self.targets[label].groups

    def packages(self) -> list[str]:
        return sorted({target.package for target in self.targets.values()})

    def unique_edges(self) -> list[tuple[str, str]]:
        return sorted(set(self.edges))
