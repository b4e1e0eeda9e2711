"""Deterministic rendering of check results."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

import orjson

from contract.models import ViolationRecord

if TYPE_CHECKING:
    from check.checker import Violation
    from rules.policy import Policy

ReportFormat = Literal["text", "json"]

EXIT_OK = 0
EXIT_VIOLATIONS = 1
EXIT_ERROR = 2


@dataclass(frozen=True)
class Report:
    text: str
    exit_code: int


def _quote_all(names: Sequence[str]) -> str:
    return ", ".join(f"'{name}'" for name in names)


def _group_phrase(names: Sequence[str]) -> str:
    if len(names) == 1:
        return f"group '{names[0]}'"
    return f"one of groups {_quote_all(names)}"


def remediation(violation: Violation, policy_path: str) -> str:
    """Suggest how to make ``violation`` pass."""
    hint = (
        f"add an exception '{violation.from_target}' -> '{violation.to_target}' "
        f"to {policy_path}"
    )
    if not violation.from_groups:
        return f"{hint}, or add package {violation.from_package} to a package group"
    if not violation.to_groups:
        return f"{hint}, or add package {violation.to_package} to a package group"
    return (
        f"{hint}, or request a rule from {_group_phrase(violation.from_groups)} "
        f"to {_group_phrase(violation.to_groups)}"
    )


def _format_groups(groups: Sequence[str]) -> str:
    return ", ".join(groups) if groups else "(none)"


def _group_rationales(violation: Violation, policy: Policy | None) -> list[str]:
    if policy is None:
        return []
    lines: list[str] = []
    for name in dict.fromkeys(violation.from_groups + violation.to_groups):
        group = policy.registry.get(name)
        if group is not None and group.rationale:
            text = " ".join(group.rationale.split())
            lines.append(f"  rationale ({name}): {text}")
    return lines


def _render_text(
    violations: Sequence[Violation],
    unresolved: Sequence[str],
    policy_path: str,
    edges_checked: int | None,
    policy: Policy | None,
) -> str:
    lines: list[str] = []
    if not violations and not unresolved:
        checked = f"{edges_checked} edges checked, " if edges_checked is not None else ""
        return f"OK: {checked}no dependency violations\n"

    lines.append(
        f"FAIL: {len(violations)} dependency violation(s), "
        f"{len(unresolved)} unresolved target(s)"
    )
    for violation in violations:
        lines.append("")
        lines.append(f"{violation.from_target} -> {violation.to_target}")
        lines.append(
            f"  from: package {violation.from_package}, "
            f"groups: {_format_groups(violation.from_groups)}"
        )
        lines.append(
            f"  to:   package {violation.to_package}, "
            f"groups: {_format_groups(violation.to_groups)}"
        )
        lines.extend(_group_rationales(violation, policy))
        lines.append(f"  remediation: {remediation(violation, policy_path)}")

    if unresolved:
        lines.append("")
        lines.extend(f"unresolved target: {label}" for label in unresolved)

    return "\n".join(lines) + "\n"


def _render_json(violations: Sequence[Violation]) -> str:
    payload = [
        ViolationRecord.from_violation(violation).model_dump(by_alias=True)
        for violation in violations
    ]
    opts = orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2
    return orjson.dumps(payload, option=opts).decode("utf-8") + "\n"


def render(
    violations: Iterable[Violation],
    unresolved_targets: Iterable[str] = (),
    *,
    fmt: ReportFormat = "text",
    policy_path: str = "the policy file",
    edges_checked: int | None = None,
    policy: Policy | None = None,
) -> Report:
    """Render a report and pick the exit code.

    Output depends only on the set of violations and unresolved targets,
    never on their input order. JSON output lists violations only. When
    ``policy`` is given, text output quotes the rationale of every group an
    offending edge touches.
    """
    by_key = {violation.key: violation for violation in violations}
    ordered = [by_key[key] for key in sorted(by_key)]
    unresolved = sorted(set(unresolved_targets))

    if fmt == "json":
        text = _render_json(ordered)
    else:
        text = _render_text(
            ordered, unresolved, policy_path, edges_checked, policy
        )

    exit_code = EXIT_VIOLATIONS if ordered or unresolved else EXIT_OK
    return Report(text=text, exit_code=exit_code)
