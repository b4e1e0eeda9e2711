"""Package path patterns and the trie used to match them."""

from __future__ import annotations

from dataclasses import dataclass, field

from rules.errors import InvalidPatternError
from utils import is_label, package_segments

RECURSIVE_SUFFIX = "..."
EXCLUDE_PREFIX = "-"


@dataclass(frozen=True)
class PackagePattern:
    """A parsed package pattern.

    ``//a/b`` matches exactly package ``//a/b``; ``//a/b/...`` matches it and
    every package below it. A leading ``-`` turns the pattern into an
    exclusion.
    """

    text: str
    segments: tuple[str, ...]
    recursive: bool
    exclude: bool

    @classmethod
    def parse(cls, text: str) -> PackagePattern:
        raw = text.strip()
        exclude = raw.startswith(EXCLUDE_PREFIX)
        if exclude:
            raw = raw[len(EXCLUDE_PREFIX) :]

        if not is_label(raw):
            raise InvalidPatternError(text, "must start with '//' or '@repo//'")
        if ":" in raw:
            raise InvalidPatternError(text, "must name packages, not targets")
        if "*" in raw:
            raise InvalidPatternError(text, "glob characters are not supported")

        segments = package_segments(raw)
        recursive = len(segments) > 1 and segments[-1] == RECURSIVE_SUFFIX
        if recursive:
            segments = segments[:-1]
        if RECURSIVE_SUFFIX in segments:
            raise InvalidPatternError(text, "'...' may only be the last segment")

        return cls(
            text=text.strip(),
            segments=tuple(segments),
            recursive=recursive,
            exclude=exclude,
        )


@dataclass
class _TrieNode:
    children: dict[str, _TrieNode] = field(default_factory=dict)
    # (group name, pattern) for every pattern ending at this node
    entries: list[tuple[str, PackagePattern]] = field(default_factory=list)


class PatternTrie:
    """Segment trie mapping package paths to the groups whose patterns match.

    For every group the most specific (deepest) matching pattern decides
    membership; at equal depth an exclusion beats an inclusion.
    """

    def __init__(self) -> None:
        self._root = _TrieNode()

    def insert(self, group: str, pattern: PackagePattern) -> None:
        node = self._root
        for segment in pattern.segments:
            node = node.children.setdefault(segment, _TrieNode())
        node.entries.append((group, pattern))

    def match(self, package: str) -> set[str]:
        segments = package_segments(package)
        best: dict[str, tuple[int, bool]] = {}

        node: _TrieNode | None = self._root
        for depth in range(len(segments) + 1):
            if node is None:
                break
            at_leaf = depth == len(segments)
            for group, pattern in node.entries:
                if not pattern.recursive and not at_leaf:
                    continue
                current = best.get(group)
                if (
                    current is None
                    or depth > current[0]
                    or (depth == current[0] and pattern.exclude)
                ):
                    best[group] = (depth, pattern.exclude)
            if at_leaf:
                break
            node = node.children.get(segments[depth])

        return {group for group, (_depth, exclude) in best.items() if not exclude}
