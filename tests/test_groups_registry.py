from __future__ import annotations

import pytest

from rules.errors import (
    ConfigError,
    DuplicateGroupNameError,
    EmptyPatternSetError,
)
from rules.groups import GroupRegistry


def _registry() -> GroupRegistry:
    registry = GroupRegistry()
    registry.register_group("system-tests", ["//rs/tests/..."], "System testing.")
    registry.register_group("release", ["//publish/..."])
    registry.register_group("ic-os", ["//ic-os/...", "//rs/ic_os/..."])
    return registry


def test_register_group_returns_handle_with_rationale() -> None:
    registry = GroupRegistry()

    group = registry.register_group("release", ["//publish/..."], "  Releases.  ")

    assert group.name == "release"
    assert group.pattern_texts == ("//publish/...",)
    assert group.rationale == "Releases."
    assert registry.get("release") is group
    assert "release" in registry


def test_register_group_rejects_duplicate_name() -> None:
    registry = _registry()

    with pytest.raises(DuplicateGroupNameError, match="release"):
        registry.register_group("release", ["//other/..."])


def test_register_group_rejects_empty_pattern_set() -> None:
    registry = GroupRegistry()

    with pytest.raises(EmptyPatternSetError):
        registry.register_group("empty", [])


def test_register_group_rejects_exclusion_only_pattern_set() -> None:
    registry = GroupRegistry()

    with pytest.raises(EmptyPatternSetError):
        registry.register_group("nothing", ["-//rs/..."])


def test_registry_errors_are_config_errors() -> None:
    registry = _registry()

    with pytest.raises(ConfigError):
        registry.register_group("ic-os", ["//x/..."])


def test_failed_registration_leaves_registry_unchanged() -> None:
    registry = _registry()

    with pytest.raises(ConfigError):
        registry.register_group("broken", ["//ok/...", "not-a-pattern"])

    assert "broken" not in registry
    assert registry.groups_containing("//ok/pkg") == frozenset()


def test_groups_containing_supports_multi_membership() -> None:
    registry = _registry()
    registry.register_group("rs", ["//rs/..."])

    names = {group.name for group in registry.groups_containing("//rs/ic_os/vm")}

    assert names == {"ic-os", "rs"}
    assert registry.group_names_containing("//rs/ic_os/vm") == ("ic-os", "rs")


def test_groups_containing_returns_empty_for_unmatched_package() -> None:
    registry = _registry()

    assert registry.groups_containing("//rs/consensus") == frozenset()
    assert registry.group_names_containing("//rs/consensus") == ()


def test_groups_containing_reflects_groups_registered_later() -> None:
    registry = _registry()
    assert registry.group_names_containing("//rs/consensus") == ()

    registry.register_group("rs-core", ["//rs/consensus"])

    assert registry.group_names_containing("//rs/consensus") == ("rs-core",)


def test_names_are_sorted() -> None:
    registry = _registry()

    assert registry.names() == ["ic-os", "release", "system-tests"]
    assert len(registry) == 3
