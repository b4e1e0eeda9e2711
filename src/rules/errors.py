"""Error taxonomy for policy configuration and graph loading.

``ConfigError`` and ``LoadError`` are both fatal: the CLI maps them to exit
code 2 and never starts the check phase. Policy violations are not errors;
they are collected by the checker.
"""

from __future__ import annotations

from collections.abc import Sequence


class ConfigError(Exception):
    """Raised when the policy configuration is invalid."""


class DuplicateGroupNameError(ConfigError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Package group '{name}' is already registered")
        self.name = name


class EmptyPatternSetError(ConfigError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Package group '{name}' has no package patterns")
        self.name = name


class InvalidPatternError(ConfigError):
    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Invalid package pattern '{pattern}': {reason}")
        self.pattern = pattern


class UnknownGroupError(ConfigError):
    def __init__(self, name: str, context: str) -> None:
        super().__init__(f"Unknown package group '{name}' in {context}")
        self.name = name


class EmptyRationaleError(ConfigError):
    def __init__(self, source: str, target: str) -> None:
        super().__init__(
            f"Exception '{source}' -> '{target}' must carry a non-blank rationale"
        )
        self.source = source
        self.target = target


class InvalidExceptionEndpointError(ConfigError):
    def __init__(self, value: str) -> None:
        super().__init__(
            f"Exception endpoint '{value}' is not a target label or package; "
            "exceptions name exact targets, not package groups"
        )
        self.value = value


class WildcardExceptionError(ConfigError):
    def __init__(self, value: str) -> None:
        super().__init__(
            f"Exception endpoint '{value}' uses wildcard syntax; "
            "exceptions must name an exact target or package"
        )
        self.value = value


class DuplicateExceptionError(ConfigError):
    def __init__(self, source: str, target: str) -> None:
        super().__init__(f"Exception '{source}' -> '{target}' is declared twice")
        self.source = source
        self.target = target


class LoadError(Exception):
    """Raised when the dependency graph input cannot be loaded."""


class MalformedGraphError(LoadError):
    """Raised when graph input cannot be parsed."""


class UnresolvedTargetError(LoadError):
    """Raised when targets cannot be mapped to any known package.

    All unresolved targets of a load are collected before raising so a
    single run reports every one of them.
    """

    def __init__(self, targets: Sequence[str]) -> None:
        self.targets = tuple(sorted(set(targets)))
        listing = ", ".join(self.targets)
        super().__init__(
            f"{len(self.targets)} target(s) do not belong to any known package: "
            f"{listing}"
        )
