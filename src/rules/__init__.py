"""Package groups, policy rules and their configuration."""

from rules.config import (
    LoadedPolicy,
    PolicyConfig,
    build_policy,
    load_policy,
)
from rules.errors import ConfigError, LoadError
from rules.groups import GroupRegistry, PackageGroup
from rules.policy import Policy, PolicyException

__all__ = [
    "ConfigError",
    "GroupRegistry",
    "LoadError",
    "LoadedPolicy",
    "PackageGroup",
    "Policy",
    "PolicyConfig",
    "PolicyException",
    "build_policy",
    "load_policy",
]
