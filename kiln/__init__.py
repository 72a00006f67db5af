"""
kiln - a minimal incremental-build engine.

Artifacts are files connected by dependency edges; each carries a rebuild
action. A BuildGraph finds the artifacts that are stale relative to their
inputs and re-runs only the actions it needs to.
"""

from .actions import CallableAction, ShellAction, TouchAction
from .builder import Builder
from .core.exceptions import (
    CyclicDependencyError,
    KilnException,
    UnregisteredDependencyError,
)
from .core.interfaces.action import IRebuildAction
from .graph import ArtifactNode, BuildGraph, BuildOutcome, BuildReport

__all__ = [
    "ArtifactNode",
    "BuildGraph",
    "BuildOutcome",
    "BuildReport",
    "Builder",
    "CallableAction",
    "CyclicDependencyError",
    "IRebuildAction",
    "KilnException",
    "ShellAction",
    "TouchAction",
    "UnregisteredDependencyError",
]
