"""Target dependency graph model and loading."""

from graph.loader import GraphDocument, load, load_document, read_graph
from graph.model import DependencyGraph, Target

__all__ = [
    "DependencyGraph",
    "GraphDocument",
    "Target",
    "load",
    "load_document",
    "read_graph",
]
