"""
Rebuild action interface.

A rebuild action regenerates one artifact. The graph never interprets what
an action does; it only propagates the outcome the action reports.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...graph.node import ArtifactNode
    from ..models.build import BuildOutcome


class IRebuildAction(ABC):
    """
    Interface for rebuild actions.

    Implementations receive the node being rebuilt so they can read its
    path and dependency list (to synthesize a command line, for example).
    Plain callables with the same shape are accepted wherever an
    IRebuildAction is.
    """

    @abstractmethod
    def __call__(self, node: ArtifactNode) -> BuildOutcome | bool | None:
        """
        Regenerate the node's artifact.

        Args:
            node: The node being rebuilt

        Returns:
            BuildOutcome, or a bool, or None (treated as success)
        """
        pass

    def describe(self, node: ArtifactNode) -> str:
        """Short human-readable description of what the action does."""
        return type(self).__name__
