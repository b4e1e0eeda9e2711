"""Stable report contract for pkgfence-core.

Treat these exports as the authoritative boundary for tooling that parses
``--format json`` output.
"""

from contract.models import ViolationRecord

__all__ = ["ViolationRecord"]
