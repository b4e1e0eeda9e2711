"""Command-line interface for pkgfence-core."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from check.checker import check_graph
from graph.algos import find_group_cycles
from graph.loader import STDIN_MARKER, load_document, read_graph
from report.render import EXIT_ERROR, render
from rules.config import load_policy
from rules.errors import ConfigError, LoadError

if TYPE_CHECKING:
    from check.checker import CheckResult
    from rules.policy import Policy

logger = logging.getLogger("pkgfence")


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        msg = f"must be >= 1, got {number}"
        raise argparse.ArgumentTypeError(msg)
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pkgfence",
        description="Check build target dependencies against package group policy.",
    )
    parser.add_argument(
        "--policy",
        required=True,
        help="Policy file with package groups, rules and exceptions (.toml or .json)",
    )
    parser.add_argument(
        "--graph",
        required=True,
        help=f"Dependency graph input (JSON or edge list), '{STDIN_MARKER}' for stdin",
    )
    parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Report format (default: text)",
    )
    parser.add_argument(
        "--jobs",
        type=_positive_int,
        default=1,
        help="Worker threads for edge checks (default: 1)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser


def _warn_advisories(
    policy_path: Path, policy: Policy, result: CheckResult
) -> None:
    for cycle in find_group_cycles(policy.group_graph()):
        logger.warning(
            "%s: package groups depend on each other in a cycle: %s",
            policy_path,
            ", ".join(cycle),
        )
    for exception in result.unused_exceptions(policy):
        logger.warning(
            "%s: exception '%s' -> '%s' permitted no edge; it may be stale (%s)",
            policy_path,
            exception.source,
            exception.target,
            exception.rationale,
        )


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    policy_path = Path(args.policy).expanduser()
    try:
        loaded = load_policy(policy_path)
        graph = load_document(read_graph(args.graph), loaded.registry)
    except (ConfigError, LoadError) as exc:
        sys.stderr.write(f"error: {exc}\n")
        return EXIT_ERROR

    result = check_graph(graph, loaded.policy, jobs=args.jobs)
    _warn_advisories(policy_path, loaded.policy, result)

    report = render(
        result.violations,
        fmt=args.format,
        policy_path=str(policy_path),
        edges_checked=result.edges_checked,
        policy=loaded.policy,
    )
    sys.stdout.write(report.text)
    return report.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
