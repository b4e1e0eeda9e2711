"""Policy checking over the real dependency graph."""

from check.checker import CheckResult, Violation, check_edge, check_graph

__all__ = ["CheckResult", "Violation", "check_edge", "check_graph"]
