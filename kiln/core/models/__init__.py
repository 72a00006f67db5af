"""
Pydantic models for kiln.

Configuration sections and the records the build graph produces.
"""

from .base import ImmutableModel, KilnBaseModel
from .build import BuildOutcome, BuildReport, PassRecord
from .config import (
    KilnConfig,
    LoggingConfig,
    OutputConfig,
    SchedulerConfig,
)

__all__ = [
    "BuildOutcome",
    "BuildReport",
    "ImmutableModel",
    "KilnBaseModel",
    "KilnConfig",
    "LoggingConfig",
    "OutputConfig",
    "PassRecord",
    "SchedulerConfig",
]
