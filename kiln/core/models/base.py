"""
Pydantic base classes shared by kiln's models.

Config sections and buildfile tables relax strictness for TOML input; the
records a build produces are frozen.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class KilnBaseModel(BaseModel):
    """Strict model: no implicit coercion, unknown fields rejected, assignments validated."""

    model_config = ConfigDict(
        strict=True,
        validate_assignment=True,
        extra="forbid",
        revalidate_instances="never",
    )


class ImmutableModel(KilnBaseModel):
    """Frozen model for records handed out after a build."""

    model_config = ConfigDict(frozen=True, validate_assignment=False)
