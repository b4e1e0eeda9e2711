from __future__ import annotations

import pytest

from rules.errors import (
    DuplicateExceptionError,
    EmptyRationaleError,
    InvalidExceptionEndpointError,
    UnknownGroupError,
    WildcardExceptionError,
)
from rules.groups import GroupRegistry
from rules.policy import Policy


def _policy() -> Policy:
    registry = GroupRegistry()
    registry.register_group("system-tests", ["//rs/tests/..."])
    registry.register_group("release", ["//publish/..."])
    registry.register_group("ic-os", ["//ic-os/...", "//rs/ic_os/..."])
    return Policy(registry)


def test_allow_registers_direct_permission() -> None:
    policy = _policy()

    policy.allow("ic-os", "release")

    assert policy.is_permitted("ic-os", "release") is True
    assert policy.is_permitted("release", "ic-os") is False


def test_allow_is_idempotent() -> None:
    policy = _policy()

    policy.allow("ic-os", "release")
    policy.allow("ic-os", "release")

    assert policy.edges() == [("ic-os", "release")]


def test_permissions_are_not_transitive() -> None:
    """A -> B and B -> C must never imply A -> C."""
    policy = _policy()
    policy.allow("system-tests", "ic-os")
    policy.allow("ic-os", "release")

    assert policy.is_permitted("system-tests", "release") is False


def test_self_dependency_requires_explicit_edge() -> None:
    policy = _policy()
    assert policy.is_permitted("release", "release") is False

    policy.allow("release", "release")

    assert policy.is_permitted("release", "release") is True


def test_allow_rejects_unknown_group() -> None:
    policy = _policy()

    with pytest.raises(UnknownGroupError, match="nope"):
        policy.allow("release", "nope")


def test_rule_rationale_is_kept() -> None:
    policy = _policy()

    policy.allow("ic-os", "release", "  images embed release artifacts ")

    assert policy.rule_rationale("ic-os", "release") == "images embed release artifacts"
    assert policy.rule_rationale("release", "ic-os") == ""


@pytest.mark.parametrize("rationale", ["", "   ", "\n\t"])
def test_add_exception_requires_rationale(rationale: str) -> None:
    policy = _policy()

    with pytest.raises(EmptyRationaleError):
        policy.add_exception("//publish/y", "//rs/tests/z", rationale)


@pytest.mark.parametrize(
    ("source", "target"),
    [
        ("//publish/y", "//rs/tests/..."),
        ("//publish/...", "//rs/tests/z"),
        ("//publish/y", "//rs/tests:all"),
        ("//publish/y", "//rs/tests:*"),
        ("//publish/y", "//rs/tests:__subpackages__"),
        ("//publish/y:__pkg__", "//rs/tests/z"),
    ],
)
def test_add_exception_rejects_wildcards(source: str, target: str) -> None:
    policy = _policy()

    with pytest.raises(WildcardExceptionError):
        policy.add_exception(source, target, "temporary migration shim")


@pytest.mark.parametrize(
    ("source", "target"),
    [
        ("//publish/y", "system-tests"),
        ("release", "//rs/tests/z"),
        ("publish/y", "//rs/tests/z"),
    ],
)
def test_add_exception_rejects_group_names_and_bare_paths(
    source: str, target: str
) -> None:
    policy = _policy()

    with pytest.raises(InvalidExceptionEndpointError, match="not package groups"):
        policy.add_exception(source, target, "temporary migration shim")


def test_add_exception_accepts_label_named_like_a_wildcard_prefix() -> None:
    policy = _policy()

    exception = policy.add_exception(
        "//publish/y", "//rs/tests:all_tests", "temporary migration shim"
    )

    assert exception.target == "//rs/tests:all_tests"


def test_add_exception_normalizes_package_spelling() -> None:
    policy = _policy()

    exception = policy.add_exception(
        "//publish/y:bin", "//rs/tests/driver:__pkg__", "temporary migration shim"
    )

    assert exception.target == "//rs/tests/driver"
    assert policy.find_exception(
        "//publish/y:bin", "//rs/tests/driver:other", "//rs/tests/driver"
    ) == exception


def test_add_exception_rejects_duplicates() -> None:
    policy = _policy()
    policy.add_exception("//publish/y", "//rs/tests/z", "temporary migration shim")

    with pytest.raises(DuplicateExceptionError):
        policy.add_exception("//publish/y", "//rs/tests/z", "another reason")


def test_find_exception_matches_exact_target_or_package_only() -> None:
    policy = _policy()
    exception = policy.add_exception(
        "//publish/y:bin", "//rs/tests/z:lib", "temporary migration shim"
    )

    package = "//rs/tests/z"

    assert policy.find_exception("//publish/y:bin", "//rs/tests/z:lib", package) == (
        exception
    )
    assert policy.find_exception("//publish/y:bin", "//rs/tests/z:x", package) is None
    assert policy.find_exception("//publish/y:x", "//rs/tests/z:lib", package) is None


def test_exceptions_are_listed_sorted() -> None:
    policy = _policy()
    policy.add_exception("//publish/z", "//rs/tests/a", "b")
    policy.add_exception("//publish/a", "//rs/tests/b", "a")

    assert [exception.key for exception in policy.exceptions()] == [
        ("//publish/a", "//rs/tests/b"),
        ("//publish/z", "//rs/tests/a"),
    ]


def test_group_graph_includes_every_group() -> None:
    policy = _policy()
    policy.allow("ic-os", "release")

    assert policy.group_graph() == {
        "ic-os": {"release"},
        "release": set(),
        "system-tests": set(),
    }
