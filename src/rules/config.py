from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import orjson
import tomllib
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from rules.errors import ConfigError
from rules.groups import GroupRegistry
from rules.policy import Policy, UngroupedBehavior

logger = logging.getLogger(__name__)

DEFAULT_POLICY_FILENAME = "pkggroups.toml"


class _StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class GroupDef(_StrictModel):
    """Definition of a single package group."""

    name: str = Field(description="Group name (e.g., 'system-tests')")
    packages: list[str] = Field(
        description="Package patterns belonging to this group",
    )
    rationale: str = Field(
        default="",
        description="Why these packages share a layering role",
    )


class RuleDef(_StrictModel):
    """Allowed dependencies from one group to others."""

    from_group: str = Field(alias="from", description="Source group name")
    to: list[str] = Field(
        default_factory=list,
        description="Group names the source group may depend on",
    )
    rationale: str = Field(default="", description="Why the edge is allowed")


class ExceptionDef(_StrictModel):
    """A single-edge override of the group rules."""

    from_target: str = Field(alias="from", description="Exact source target label")
    to: str = Field(description="Exact target label or package path")
    rationale: str = Field(description="Why this edge is tolerated")


class PolicyConfig(_StrictModel):
    """Configuration for package groups, rules and exceptions."""

    ungrouped: UngroupedBehavior = Field(
        default="deny",
        description="Behavior for edges touching packages outside every group",
    )
    groups: list[GroupDef] = Field(
        default_factory=list,
        description="Package group definitions",
    )
    rules: list[RuleDef] = Field(
        default_factory=list,
        description="Allowed dependency rules between groups",
    )
    exceptions: list[ExceptionDef] = Field(
        default_factory=list,
        description="Per-target exceptions to the rules",
    )


@dataclass(frozen=True)
class LoadedPolicy:
    """A policy built from a configuration file."""

    path: Path
    config: PolicyConfig
    registry: GroupRegistry
    policy: Policy


def _read_document(path: Path) -> dict:
    try:
        raw = path.read_bytes()
    except OSError as exc:
        msg = f"Failed to read policy file {path}: {exc}"
        raise ConfigError(msg) from exc

    if path.suffix == ".json":
        try:
            data = orjson.loads(raw)
        except orjson.JSONDecodeError as exc:
            msg = f"Invalid JSON in {path}: {exc}"
            raise ConfigError(msg) from exc
    else:
        try:
            data = tomllib.loads(raw.decode("utf-8"))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
            msg = f"Invalid TOML in {path}: {exc}"
            raise ConfigError(msg) from exc

    if not isinstance(data, dict):
        msg = f"Invalid config in {path}: top level must be a table"
        raise ConfigError(msg)
    return data


def parse_policy_config(data: dict, *, source: str = "<policy>") -> PolicyConfig:
    try:
        return PolicyConfig.model_validate(data)
    except ValidationError as exc:
        msg = f"Invalid config in {source}: {exc}"
        raise ConfigError(msg) from exc


def build_policy(config: PolicyConfig) -> Policy:
    """Construct the group registry and policy described by a config.

    Raises the specific ``ConfigError`` subclass for the first offending
    entry.
    """
    registry = GroupRegistry()
    for group in config.groups:
        registry.register_group(group.name, group.packages, group.rationale)

    policy = Policy(registry, ungrouped=config.ungrouped)
    for rule in config.rules:
        for target_group in rule.to:
            policy.allow(rule.from_group, target_group, rule.rationale)

    for exception in config.exceptions:
        policy.add_exception(exception.from_target, exception.to, exception.rationale)

    logger.debug(
        "built policy: %d groups, %d rules, %d exceptions",
        len(registry),
        len(policy.edges()),
        len(policy.exceptions()),
    )
    return policy


def load_policy(path: Path) -> LoadedPolicy:
    """Load and build the policy stored at ``path`` (TOML, or JSON by suffix)."""
    data = _read_document(path)
    config = parse_policy_config(data, source=str(path))
    policy = build_policy(config)
    return LoadedPolicy(
        path=path, config=config, registry=policy.registry, policy=policy
    )
