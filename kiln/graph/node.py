"""
Artifact nodes.

An ArtifactNode stands for one file, either a source or something built.
It knows its own dependencies and how to rebuild itself, but nothing about
the graph it is registered in.
"""

from __future__ import annotations

import os
import weakref
from collections.abc import Callable, Iterable
from pathlib import Path

from ..core.interfaces.logger import ILogger
from ..core.models.build import BuildOutcome
from .fingerprint import MISSING, exists, fingerprint, is_stale_against

# IRebuildAction instances or any callable taking the node
RebuildAction = Callable[..., object]


class ArtifactNode:
    """
    One file in the dependency graph.

    Dependencies are held as weak references: the graph owns node lifetime,
    and a dependency that has been garbage collected is treated as
    satisfied.

    Usage:
        header = ArtifactNode("include/app.h")
        source = ArtifactNode("src/app.c")
        binary = ArtifactNode("build/app", [header, source], ShellAction("cc ..."))
        if binary.need_update():
            binary.update()
    """

    def __init__(
        self,
        path: str | os.PathLike,
        dependencies: Iterable[ArtifactNode] = (),
        action: RebuildAction | None = None,
        logger: ILogger | None = None,
    ):
        """
        Create a node and sample its fingerprint.

        A missing file is not an error; its fingerprint is simply 0.

        Args:
            path: File this node represents
            dependencies: Nodes this one is built from
            action: Rebuild action, or None for a plain source file
            logger: Logger for internal diagnostics
        """
        self._path = Path(path)
        self._action = action
        self._logger = logger
        self._dependencies: list[weakref.ref[ArtifactNode]] = []
        self._dependency_fingerprints: list[int] = []
        self._fingerprint = fingerprint(self._path)

        for dependency in dependencies:
            self._append(dependency)
        self._refresh_dependency_fingerprints()

    @property
    def logger(self) -> ILogger:
        """Get logger, resolving from container or creating NullLogger."""
        if self._logger is None:
            from ..core.di import resolve_or_default
            from ..services.logging import NullLogger

            self._logger = resolve_or_default(ILogger, NullLogger)  # type: ignore[type-abstract]
        return self._logger

    @property
    def path(self) -> Path:
        return self._path

    @property
    def fingerprint(self) -> int:
        """Fingerprint as of construction or the last update()."""
        return self._fingerprint

    @property
    def action(self) -> RebuildAction | None:
        return self._action

    @property
    def is_source(self) -> bool:
        """True for nodes without a rebuild action."""
        return self._action is None

    @property
    def dependencies(self) -> tuple[ArtifactNode, ...]:
        """Dependencies that still resolve, in declaration order."""
        return tuple(node for node in (ref() for ref in self._dependencies) if node is not None)

    @property
    def dangling_dependencies(self) -> int:
        """Number of dependency references whose node no longer exists."""
        return sum(1 for ref in self._dependencies if ref() is None)

    @property
    def dependency_fingerprints(self) -> tuple[int, ...]:
        """Snapshot of each dependency's fingerprint, index-aligned with the references."""
        return tuple(self._dependency_fingerprints)

    def add_dependency(self, dependency: ArtifactNode | Iterable[ArtifactNode]) -> None:
        """
        Append one node or several nodes to the dependency list.

        New entries start with an unobserved (0) fingerprint snapshot.
        """
        if isinstance(dependency, ArtifactNode):
            self._append(dependency)
        else:
            for node in dependency:
                self._append(node)

    def need_update(self) -> bool:
        """
        Whether this node has to be rebuilt.

        True when the file is missing, or when any resolvable dependency's
        file was modified at or after this node's file (or is missing).
        Dependencies that no longer resolve are ignored.
        """
        own = fingerprint(self._path)
        if own == MISSING:
            return True

        for dependency in self.dependencies:
            if is_stale_against(own, fingerprint(dependency.path)):
                return True

        return False

    def update(self) -> BuildOutcome:
        """
        Run the rebuild action and refresh fingerprints.

        The action's outcome is returned unchanged. An exception raised by
        the action is logged and reported as FAILURE.
        """
        outcome = self._run_action()
        self._fingerprint = fingerprint(self._path)
        self._refresh_dependency_fingerprints()
        return outcome

    def describe(self) -> str:
        """Short description of the rebuild action for logs."""
        if self._action is None:
            return "source"
        describe = getattr(self._action, "describe", None)
        if callable(describe):
            return describe(self)
        return getattr(self._action, "__name__", type(self._action).__name__)

    def _run_action(self) -> BuildOutcome:
        if self._action is None:
            if exists(self._path):
                return BuildOutcome.SUCCESS
            self.logger.error("No rule to make %s", self._path)
            return BuildOutcome.FAILURE

        self.logger.debug("Rebuilding %s (%s)", self._path, self.describe())
        try:
            outcome = BuildOutcome.from_result(self._action(self))
        except Exception as e:
            self.logger.error("Rebuild action for %s raised: %s", self._path, e, exc_info=True)
            return BuildOutcome.FAILURE

        if outcome is BuildOutcome.FAILURE:
            self.logger.warning("Rebuild action for %s reported failure", self._path)
        return outcome

    def _append(self, dependency: ArtifactNode) -> None:
        self._dependencies.append(weakref.ref(dependency))
        self._dependency_fingerprints.append(MISSING)

    def _refresh_dependency_fingerprints(self) -> None:
        # Uses each dependency's own last recorded fingerprint, not a fresh stat
        for i, ref in enumerate(self._dependencies):
            dependency = ref()
            if dependency is not None:
                self._dependency_fingerprints[i] = dependency.fingerprint

    def __repr__(self) -> str:
        return f"ArtifactNode({str(self._path)!r})"
