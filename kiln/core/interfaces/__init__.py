"""
Interface definitions for kiln.

Abstract base classes for the pluggable seams of the engine: rebuild
actions, internal logging and user-facing output.
"""

from .action import IRebuildAction
from .logger import ILogger
from .presenter import IPresenter

__all__ = [
    "ILogger",
    "IPresenter",
    "IRebuildAction",
]
