"""Load the real dependency graph produced by a build-graph query."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING

import orjson
from pydantic import BaseModel, Field, ValidationError

from graph.model import DependencyGraph, Target
from rules.errors import MalformedGraphError, UnresolvedTargetError
from utils import is_label, label_package, package_segments

if TYPE_CHECKING:
    from rules.groups import GroupRegistry

logger = logging.getLogger(__name__)

EDGE_SEPARATOR = "->"
STDIN_MARKER = "-"


class GraphDocument(BaseModel):
    """Raw graph input as emitted by the build-graph query tooling."""

    edges: list[tuple[str, str]] = Field(
        default_factory=list,
        description="Dependency edges as (from_target, to_target) pairs",
    )
    packages: list[str] | None = Field(
        default=None,
        description="Known package paths; derived from labels when absent",
    )
    targets: dict[str, str] = Field(
        default_factory=dict,
        description="Explicit owning package per target label",
    )


def _parse_edgelist(text: str, source: str) -> GraphDocument:
    edges: list[tuple[str, str]] = []
    for line_no, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        left, sep, right = line.partition(EDGE_SEPARATOR)
        if not sep or not left.strip() or not right.strip():
            msg = f"{source}:{line_no}: expected '<from> {EDGE_SEPARATOR} <to>'"
            raise MalformedGraphError(msg)
        edges.append((left.strip(), right.strip()))
    return GraphDocument(edges=edges)


def parse_graph_text(text: str, source: str = "<graph>") -> GraphDocument:
    """Parse a JSON graph document or an edge-list text."""
    if not text.lstrip().startswith("{"):
        return _parse_edgelist(text, source)

    try:
        data = orjson.loads(text)
    except orjson.JSONDecodeError as exc:
        msg = f"Invalid JSON in {source}: {exc}"
        raise MalformedGraphError(msg) from exc

    try:
        return GraphDocument.model_validate(data)
    except ValidationError as exc:
        msg = f"Invalid graph document in {source}: {exc}"
        raise MalformedGraphError(msg) from exc


def read_graph(location: str) -> GraphDocument:
    """Read graph input from a file path, or from stdin when given ``-``."""
    if location == STDIN_MARKER:
        try:
            text = sys.stdin.read()
        except (OSError, UnicodeDecodeError) as exc:
            msg = f"Failed to read graph input from stdin: {exc}"
            raise MalformedGraphError(msg) from exc
        return parse_graph_text(text, "<stdin>")

    path = Path(location)
    try:
        with path.open(encoding="utf-8") as handle:
            text = handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Failed to read graph input {path}: {exc}"
        raise MalformedGraphError(msg) from exc
    return parse_graph_text(text, str(path))


class _PackageIndex:
    """Longest-prefix lookup of a label path over known package paths."""

    _TERMINAL = ""

    def __init__(self, packages: Iterable[str]) -> None:
        self._root: dict = {}
        for package in packages:
            node = self._root
            for segment in package_segments(package):
                node = node.setdefault(segment, {})
            node[self._TERMINAL] = package

    def resolve(self, path: str) -> str | None:
        node = self._root
        found: str | None = None
        for segment in package_segments(path):
            node = node.get(segment)
            if node is None:
                break
            found = node.get(self._TERMINAL, found)
        return found


def _validate_label(label: str) -> None:
    if not is_label(label):
        msg = (
            f"Malformed target label '{label}': "
            "expected '//pkg:name' or '@repo//pkg:name'"
        )
        raise MalformedGraphError(msg)


def load(
    raw_edges: Iterable[tuple[str, str]],
    registry: GroupRegistry,
    *,
    packages: Iterable[str] | None = None,
    owners: Mapping[str, str] | None = None,
) -> DependencyGraph:
    """Build a ``DependencyGraph`` from raw edges.

    Each target is mapped to its owning package (explicit owner first, then
    longest-prefix match over ``packages``, or the label's own package when
    ``packages`` is None) and from there to every group containing it.

    Raises:
        MalformedGraphError: If a label is not a valid target label.
        UnresolvedTargetError: If any target has no owning package.
    """
    owners = dict(owners or {})
    edges = [(source, target) for source, target in raw_edges]

    labels: set[str] = set(owners)
    for source, target in edges:
        labels.add(source)
        labels.add(target)
    for label in sorted(labels):
        _validate_label(label)

    index = _PackageIndex(packages) if packages is not None else None

    resolved: dict[str, Target] = {}
    unresolved: list[str] = []
    for label in sorted(labels):
        package = owners.get(label)
        if package is None:
            if index is None:
                package = label_package(label)
            else:
                package = index.resolve(label_package(label))
        if package is None:
            unresolved.append(label)
            continue
        groups = registry.group_names_containing(package)
        resolved[label] = Target(label=label, package=package, groups=groups)

    if unresolved:
        raise UnresolvedTargetError(unresolved)

    graph = DependencyGraph.build(resolved, edges)
    logger.debug(
        "loaded graph: %d targets, %d edges, %d packages",
        len(graph.targets),
        len(graph.edges),
        len(graph.packages()),
    )
    return graph


def load_document(document: GraphDocument, registry: GroupRegistry) -> DependencyGraph:
    return load(
        document.edges,
        registry,
        packages=document.packages,
        owners=document.targets,
    )
