"""
Dependency graph and incremental rebuild engine.

ArtifactNode models one file and its inputs; BuildGraph owns the nodes and
schedules rebuilds of the stale ones.
"""

from ..core.models.build import BuildOutcome, BuildReport, PassRecord
from .fingerprint import exists, last_write_time, touch
from .graph import DEFAULT_STRATEGY, STRATEGIES, BuildGraph
from .node import ArtifactNode

__all__ = [
    "DEFAULT_STRATEGY",
    "STRATEGIES",
    "ArtifactNode",
    "BuildGraph",
    "BuildOutcome",
    "BuildReport",
    "PassRecord",
    "exists",
    "last_write_time",
    "touch",
]
