"""Package group registry."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from rules.errors import DuplicateGroupNameError, EmptyPatternSetError
from rules.patterns import PackagePattern, PatternTrie


@dataclass(frozen=True)
class PackageGroup:
    """A named set of packages sharing a layering role."""

    name: str
    patterns: tuple[PackagePattern, ...]
    rationale: str = ""

    @property
    def pattern_texts(self) -> tuple[str, ...]:
        return tuple(pattern.text for pattern in self.patterns)


class GroupRegistry:
    """Registry of package groups keyed by name.

    Groups may overlap: ``groups_containing`` returns every group whose
    patterns match a package path.
    """

    def __init__(self) -> None:
        self._groups: dict[str, PackageGroup] = {}
        self._trie = PatternTrie()
        self._cache: dict[str, frozenset[PackageGroup]] = {}

    def register_group(
        self, name: str, patterns: Sequence[str], rationale: str = ""
    ) -> PackageGroup:
        if name in self._groups:
            raise DuplicateGroupNameError(name)
        if not patterns:
            raise EmptyPatternSetError(name)

        parsed = tuple(PackagePattern.parse(pattern) for pattern in patterns)
        if all(pattern.exclude for pattern in parsed):
            # Exclusions alone can never admit a package.
            raise EmptyPatternSetError(name)

        group = PackageGroup(name=name, patterns=parsed, rationale=rationale.strip())
        for pattern in parsed:
            self._trie.insert(name, pattern)
        self._groups[name] = group
        self._cache.clear()
        return group

    def groups_containing(self, package: str) -> frozenset[PackageGroup]:
        cached = self._cache.get(package)
        if cached is None:
            cached = frozenset(self._groups[name] for name in self._trie.match(package))
            self._cache[package] = cached
        return cached

    def group_names_containing(self, package: str) -> tuple[str, ...]:
        return tuple(sorted(group.name for group in self.groups_containing(package)))

    def get(self, name: str) -> PackageGroup | None:
        return self._groups.get(name)

    def names(self) -> list[str]:
        return sorted(self._groups)

    def __contains__(self, name: object) -> bool:
        return name in self._groups

    def __iter__(self) -> Iterator[PackageGroup]:
        return iter(self._groups.values())

    def __len__(self) -> int:
        return len(self._groups)
