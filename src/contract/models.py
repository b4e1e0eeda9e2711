"""Machine-readable report records.

These records are the stable JSON surface consumed by downstream tooling
(for example a job posting violations as a pull-request comment).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from check.checker import Violation


class ViolationRecord(BaseModel):
    """A dependency edge that violates the package group policy."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_target: str = Field(alias="from")
    to_target: str = Field(alias="to")
    from_groups: list[str] = Field(alias="fromGroups", default_factory=list)
    to_groups: list[str] = Field(alias="toGroups", default_factory=list)

    @classmethod
    def from_violation(cls, violation: Violation) -> ViolationRecord:
        return cls(
            from_target=violation.from_target,
            to_target=violation.to_target,
            from_groups=list(violation.from_groups),
            to_groups=list(violation.to_groups),
        )


__all__ = ["ViolationRecord"]
