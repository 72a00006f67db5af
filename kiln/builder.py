"""
Builder layer.

Collects target and source declarations by path, deduplicates them, and
turns them into a wired BuildGraph. Declarations may come in any order: an
input may be named before (or without) its own target declaration.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .actions import ShellAction
from .core.exceptions import DuplicateTargetError, InvalidArgumentError, UnknownNodeError
from .core.interfaces.logger import ILogger
from .graph.graph import DEFAULT_STRATEGY, BuildGraph
from .graph.node import ArtifactNode, RebuildAction


@dataclass
class Declaration:
    """One declared file: a source when action is None, a target otherwise."""

    path: Path
    inputs: list[Path] = field(default_factory=list)
    action: RebuildAction | None = None

    @property
    def is_target(self) -> bool:
        return self.action is not None


class Builder:
    """
    Assemble a build graph from path-based declarations.

    Usage:
        builder = Builder(root="project")
        builder.target("build/app", ["src/main.c", "src/util.c"],
                       command="cc {inputs} -o {target}")
        graph = builder.graph()
        graph.update()
    """

    def __init__(self, root: str | os.PathLike | None = None, logger: ILogger | None = None):
        """
        Initialize builder.

        Args:
            root: Directory relative paths are resolved against (and the
                working directory of command targets); made absolute here
            logger: Logger passed on to graphs and nodes
        """
        self._root = Path(os.path.abspath(root)) if root is not None else None
        self._logger = logger
        self._declarations: dict[Path, Declaration] = {}

    @property
    def root(self) -> Path | None:
        return self._root

    @property
    def declarations(self) -> list[Declaration]:
        """All declarations in first-mention order."""
        return list(self._declarations.values())

    def resolve(self, path: str | os.PathLike) -> Path:
        """Normalise a path the way declarations are keyed."""
        resolved = Path(path)
        if self._root is not None and not resolved.is_absolute():
            resolved = self._root / resolved
        return Path(os.path.normpath(resolved))

    def source(self, path: str | os.PathLike) -> Path:
        """Declare a source file; returns its key. Existing declarations are kept."""
        key = self.resolve(path)
        if key not in self._declarations:
            self._declarations[key] = Declaration(path=key)
        return key

    def target(
        self,
        path: str | os.PathLike,
        inputs: Iterable[str | os.PathLike] = (),
        action: RebuildAction | None = None,
        command: str | None = None,
        timeout: float | None = None,
    ) -> Path:
        """
        Declare a target built from ``inputs``.

        Inputs not declared yet become sources; they turn into targets if
        declared as such later. Declaring the same target again is a no-op
        when inputs and action match.

        Args:
            path: Target file
            inputs: Files the target is built from
            action: Rebuild action
            command: Shell command template (alternative to ``action``)
            timeout: Timeout for ``command``

        Returns:
            The target's key

        Raises:
            InvalidArgumentError: If both or neither of action and command are given
            DuplicateTargetError: If the target was already declared differently
        """
        if (action is None) == (command is None):
            raise InvalidArgumentError(
                "A target needs exactly one of 'action' or 'command'",
                argument="action",
                value=str(path),
            )
        if command is not None:
            action = ShellAction(command, cwd=self._root, timeout=timeout, logger=self._logger)

        key = self.resolve(path)
        input_keys = [self.resolve(p) for p in inputs]
        if key in input_keys:
            raise InvalidArgumentError(f"{key} cannot be an input of itself", argument="inputs")
        for input_key in input_keys:
            self.source(input_key)

        existing = self._declarations.get(key)
        if existing is not None and existing.is_target:
            if existing.inputs == input_keys and existing.action == action:
                return key
            raise DuplicateTargetError(
                f"Target {key} is already defined with a different rule", path=str(key)
            )

        self._declarations[key] = Declaration(path=key, inputs=input_keys, action=action)
        return key

    def closure(self, targets: Iterable[str | os.PathLike]) -> list[Path]:
        """
        Keys of ``targets`` and everything they depend on.

        Raises:
            UnknownNodeError: If a requested target was never declared
        """
        wanted: list[Path] = []
        seen: set[Path] = set()
        pending = []
        for target in targets:
            key = self.resolve(target)
            if key not in self._declarations:
                raise UnknownNodeError(f"Unknown target: {target}", path=str(target))
            pending.append(key)

        while pending:
            key = pending.pop()
            if key in seen:
                continue
            seen.add(key)
            wanted.append(key)
            pending.extend(self._declarations[key].inputs)

        order = list(self._declarations)
        return sorted(wanted, key=order.index)

    def graph(
        self,
        targets: Iterable[str | os.PathLike] | None = None,
        strategy: str = DEFAULT_STRATEGY,
        max_workers: int | None = None,
    ) -> BuildGraph:
        """
        Materialise declarations into a new BuildGraph.

        Every call creates fresh nodes, so fingerprints reflect the
        filesystem at the time of the call.

        Args:
            targets: Restrict the graph to these targets and their inputs
            strategy: Scheduling strategy for the graph
            max_workers: Worker threads per pass

        Returns:
            Graph with one node per declared path
        """
        keys = list(self._declarations) if targets is None else self.closure(targets)

        nodes = {
            key: ArtifactNode(key, action=self._declarations[key].action, logger=self._logger)
            for key in keys
        }
        for key, node in nodes.items():
            node.add_dependency(nodes[dep] for dep in self._declarations[key].inputs)

        graph = BuildGraph(strategy=strategy, max_workers=max_workers, logger=self._logger)
        graph.extend(nodes.values())
        return graph
