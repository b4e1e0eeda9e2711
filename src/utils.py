"""Shared utilities for label and package path handling."""

from __future__ import annotations

PKG_SUFFIX = ":__pkg__"


def label_package(label: str) -> str:
    """Return the package path a target label lives in.

    Args:
        label: Target label (e.g., "//rs/tests/driver:ic-system-test-driver")

    Returns:
        Package path (e.g., "//rs/tests/driver")

    Examples:
        >>> label_package("//rs/tests/driver:ic-system-test-driver")
        '//rs/tests/driver'
        >>> label_package("//publish/y")
        '//publish/y'
        >>> label_package("//:BUILD")
        '//'
    """
    package, _sep, _name = label.partition(":")
    return package


def is_label(value: str) -> bool:
    """Return True when value looks like a main-repo or external label."""
    return value.startswith("//") or (value.startswith("@") and "//" in value)


def package_segments(package: str) -> list[str]:
    """Split a package path into its directory segments.

    The repository prefix (``//`` or ``@repo//``) is kept as the first
    segment so that packages of different repositories never share a
    prefix.

    Examples:
        >>> package_segments("//rs/tests")
        ['//', 'rs', 'tests']
        >>> package_segments("//")
        ['//']
        >>> package_segments("@crate//src")
        ['@crate//', 'src']
    """
    repo, sep, rest = package.partition("//")
    head = f"{repo}{sep}"
    return [head, *(part for part in rest.split("/") if part)]


def normalize_package_ref(value: str) -> str:
    """Map the ``//pkg:__pkg__`` spelling of a package to ``//pkg``."""
    if value.endswith(PKG_SUFFIX):
        return value[: -len(PKG_SUFFIX)]
    return value
