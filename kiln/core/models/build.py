"""
Build outcome models.

BuildOutcome is the two-valued result of a rebuild action; BuildReport is
the record the graph keeps of its most recent update() call.
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from .base import ImmutableModel


class BuildOutcome(str, Enum):
    """Result of rebuilding one node, or of a whole graph update."""

    SUCCESS = "success"
    FAILURE = "failure"

    @classmethod
    def from_result(cls, result: object) -> BuildOutcome:
        """
        Normalise whatever an action returned.

        None counts as success (actions with nothing to report), bools map
        directly, and a BuildOutcome is passed through.
        """
        if isinstance(result, BuildOutcome):
            return result
        if result is None or result is True:
            return cls.SUCCESS
        if result is False:
            return cls.FAILURE
        raise TypeError(f"Rebuild action returned unsupported value: {result!r}")

    def __bool__(self) -> bool:
        return self is BuildOutcome.SUCCESS


class PassRecord(ImmutableModel):
    """What happened during one scheduling pass."""

    index: int = Field(ge=0, description="Zero-based pass number")
    checked: list[str] = Field(default_factory=list, description="Paths checked for staleness")
    stale: list[str] = Field(default_factory=list, description="Paths found stale")
    failed: list[str] = Field(default_factory=list, description="Paths whose rebuild failed")
    outcome: BuildOutcome = Field(default=BuildOutcome.SUCCESS)


class BuildReport(ImmutableModel):
    """Summary of one BuildGraph.update() call."""

    outcome: BuildOutcome = Field(description="Aggregate outcome of the update")
    strategy: str = Field(description="Scheduling strategy that produced this report")
    passes: list[PassRecord] = Field(default_factory=list)

    @property
    def pass_count(self) -> int:
        return len(self.passes)

    @property
    def rebuilt(self) -> list[str]:
        """Paths whose rebuild action ran, in pass order."""
        return [path for record in self.passes for path in record.stale]

    @property
    def failed(self) -> list[str]:
        return [path for record in self.passes for path in record.failed]

    @property
    def succeeded(self) -> bool:
        return self.outcome is BuildOutcome.SUCCESS
