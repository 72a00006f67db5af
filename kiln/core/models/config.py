"""
Configuration models.

One model per TOML section (``[scheduler]``, ``[output]``, ``[logging]``).
Values arrive from TOML and environment strings, so these models coerce
types and ignore keys they do not know.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import ConfigDict, Field, field_validator

from .base import KilnBaseModel

LogLevel = Literal["debug", "info", "warning", "error"]
SchedulerStrategy = Literal["layered", "fixpoint"]


class ConfigBaseModel(KilnBaseModel):
    """Lenient base for config sections."""

    model_config = ConfigDict(strict=False, extra="ignore")


class SchedulerConfig(ConfigBaseModel):
    """``[scheduler]``: how BuildGraph.update() runs its passes."""

    strategy: SchedulerStrategy = "layered"
    max_workers: int | None = Field(default=None, ge=1)

    @field_validator("max_workers", mode="before")
    @classmethod
    def zero_means_default(cls, v: Any) -> Any:
        # 0 or an empty environment variable: let the executor decide
        if v in (0, "0", ""):
            return None
        return v


class OutputConfig(ConfigBaseModel):
    """``[output]``: CLI presentation."""

    quiet: bool = False
    color: bool = True


class LoggingConfig(ConfigBaseModel):
    """``[logging]``: diagnostic log handlers and threshold."""

    level: LogLevel = "warning"
    console: bool = False
    file: bool = True


class KilnConfig(ConfigBaseModel):
    """All sections together, independent of where the values came from."""

    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Value for a dotted key like ``scheduler.strategy``.

        Returns ``default`` if any part of the key is not a config field.
        """
        value: Any = self
        for part in key.split("."):
            if not isinstance(value, ConfigBaseModel) or part not in type(value).model_fields:
                return default
            value = getattr(value, part)
        return value

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> KilnConfig:
        return cls.model_validate(data)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()
