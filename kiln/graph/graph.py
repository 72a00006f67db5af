"""
Build graph and scheduler.

The graph owns a set of ArtifactNodes and brings them up to date in passes.
Each pass checks a batch of nodes for staleness in parallel, rebuilds the
stale ones in parallel, and waits for all of them before the next pass
starts.

Two schedules are available:

- ``layered`` (default): nodes are grouped by dependency depth and each
  layer is one pass, leaves first. A node is never checked in the same
  pass that rebuilds one of its dependencies.
- ``fixpoint``: every pass scans every node; passes repeat until one finds
  nothing stale. Dependents of a node rebuilt in pass N are picked up in
  pass N+1.

Both stop at the first pass with a failing rebuild.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator, Sequence
from concurrent.futures import Executor, ThreadPoolExecutor
from pathlib import Path

from ..core.exceptions import (
    ConfigValidationError,
    CyclicDependencyError,
    UnknownNodeError,
    UnregisteredDependencyError,
)
from ..core.interfaces.logger import ILogger
from ..core.models.build import BuildOutcome, BuildReport, PassRecord
from .node import ArtifactNode

STRATEGIES = ("layered", "fixpoint")
DEFAULT_STRATEGY = "layered"

# DFS node states
_UNVISITED, _ON_STACK, _DONE = 0, 1, 2


class BuildGraph:
    """
    Owner and scheduler of artifact nodes.

    Usage:
        graph = BuildGraph()
        graph.add(source)
        graph.add(target)
        if graph.update() is BuildOutcome.FAILURE:
            print(graph.last_report.failed)
    """

    def __init__(
        self,
        strategy: str = DEFAULT_STRATEGY,
        max_workers: int | None = None,
        logger: ILogger | None = None,
    ):
        """
        Initialize an empty graph.

        Args:
            strategy: 'layered' or 'fixpoint'
            max_workers: Worker threads per pass (None: executor default)
            logger: Logger for internal diagnostics

        Raises:
            ConfigValidationError: If strategy or max_workers is invalid
        """
        if strategy not in STRATEGIES:
            raise ConfigValidationError(
                f"Unknown scheduling strategy '{strategy}'. Use one of: {', '.join(STRATEGIES)}",
                key="scheduler.strategy",
                value=strategy,
            )
        if max_workers is not None and max_workers < 1:
            raise ConfigValidationError(
                "max_workers must be at least 1",
                key="scheduler.max_workers",
                value=str(max_workers),
            )

        self._strategy = strategy
        self._max_workers = max_workers
        self._logger = logger
        self._nodes: list[ArtifactNode] = []
        self._last_report: BuildReport | None = None

    @property
    def logger(self) -> ILogger:
        """Get logger, resolving from container or creating NullLogger."""
        if self._logger is None:
            from ..core.di import resolve_or_default
            from ..services.logging import NullLogger

            self._logger = resolve_or_default(ILogger, NullLogger)  # type: ignore[type-abstract]
        return self._logger

    @property
    def strategy(self) -> str:
        return self._strategy

    @property
    def nodes(self) -> tuple[ArtifactNode, ...]:
        """Registered nodes in registration order (duplicates included)."""
        return tuple(self._nodes)

    @property
    def last_report(self) -> BuildReport | None:
        """Report of the most recent update(), or None before the first one."""
        return self._last_report

    def add(self, node: ArtifactNode) -> int:
        """
        Register a node for scheduling.

        No deduplication and no cycle check happen here; validate() and
        update() check the whole graph.

        Returns:
            Handle of the node (its registration index)
        """
        self._nodes.append(node)
        return len(self._nodes) - 1

    def extend(self, nodes: Iterable[ArtifactNode]) -> list[int]:
        """Register several nodes, returning their handles."""
        return [self.add(node) for node in nodes]

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[ArtifactNode]:
        return iter(self._nodes)

    def __contains__(self, node: object) -> bool:
        return any(registered is node for registered in self._nodes)

    def __getitem__(self, handle: int) -> ArtifactNode:
        try:
            return self._nodes[handle]
        except IndexError as e:
            raise UnknownNodeError(f"No node with handle {handle}", cause=e) from e

    def find(self, path: str | os.PathLike) -> ArtifactNode:
        """
        Look up the first registered node for ``path``.

        Raises:
            UnknownNodeError: If no registered node has that path
        """
        wanted = Path(path)
        for node in self._nodes:
            if node.path == wanted:
                return node
        raise UnknownNodeError(f"No node for {path}", path=str(path))

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(self) -> None:
        """
        Check the graph's structure.

        Raises:
            UnregisteredDependencyError: If an edge leaves the graph
            CyclicDependencyError: If the edges contain a cycle
        """
        self.layers()

    def layers(self) -> list[list[ArtifactNode]]:
        """
        Group nodes by dependency depth.

        Depth is the longest path to a node without dependencies; layer 0
        holds those nodes. Each node appears once even if it was
        registered more than once.

        Raises:
            UnregisteredDependencyError: If an edge leaves the graph
            CyclicDependencyError: If the edges contain a cycle
        """
        unique = self._unique_nodes()
        edges = self._edges(unique)
        depths = self._depths(unique, edges)

        layers: list[list[ArtifactNode]] = [[] for _ in range(max(depths, default=-1) + 1)]
        for node, depth in zip(unique, depths):
            layers[depth].append(node)
        return layers

    def _unique_nodes(self) -> list[ArtifactNode]:
        seen: set[int] = set()
        unique = []
        for node in self._nodes:
            if id(node) not in seen:
                seen.add(id(node))
                unique.append(node)
        return unique

    def _edges(self, unique: Sequence[ArtifactNode]) -> list[list[int]]:
        index = {id(node): i for i, node in enumerate(unique)}
        edges = []
        for node in unique:
            if node.dangling_dependencies:
                raise UnregisteredDependencyError(
                    f"{node.path} depends on a node that no longer exists",
                    node=str(node.path),
                )
            targets = []
            for dependency in node.dependencies:
                if id(dependency) not in index:
                    raise UnregisteredDependencyError(
                        f"{node.path} depends on {dependency.path}, which is not in the graph",
                        node=str(node.path),
                        dependency=str(dependency.path),
                    )
                targets.append(index[id(dependency)])
            edges.append(targets)
        return edges

    def _depths(self, unique: Sequence[ArtifactNode], edges: list[list[int]]) -> list[int]:
        depths = [0] * len(unique)
        state = [_UNVISITED] * len(unique)

        for root in range(len(unique)):
            if state[root] != _UNVISITED:
                continue
            state[root] = _ON_STACK
            stack = [(root, iter(edges[root]))]
            while stack:
                current, children = stack[-1]
                for child in children:
                    if state[child] == _ON_STACK:
                        path = [entry for entry, _ in stack]
                        cycle = [str(unique[i].path) for i in path[path.index(child) :]]
                        cycle.append(str(unique[child].path))
                        raise CyclicDependencyError(
                            f"Dependency cycle: {' -> '.join(cycle)}",
                            cycle=cycle,
                        )
                    if state[child] == _UNVISITED:
                        state[child] = _ON_STACK
                        stack.append((child, iter(edges[child])))
                        break
                else:
                    stack.pop()
                    state[current] = _DONE
                    depths[current] = 1 + max((depths[c] for c in edges[current]), default=-1)

        return depths

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def stale_nodes(self, transitive: bool = False) -> list[ArtifactNode]:
        """
        Nodes that currently need rebuilding.

        Args:
            transitive: Also include nodes that depend, directly or not, on
                a stale node and would therefore be rebuilt after it

        Returns:
            Stale nodes, leaves first
        """
        stale: list[ArtifactNode] = []
        stale_ids: set[int] = set()
        for layer in self.layers():
            for node in layer:
                downstream = transitive and any(id(d) in stale_ids for d in node.dependencies)
                if downstream or node.need_update():
                    stale.append(node)
                    stale_ids.add(id(node))
        return stale

    # -------------------------------------------------------------------------
    # Scheduling
    # -------------------------------------------------------------------------

    def update(self) -> BuildOutcome:
        """
        Bring every node up to date.

        Validates the graph, then runs passes with the configured strategy
        until nothing is stale or a pass has a failing rebuild. Nodes
        rebuilt before a failure keep their new state.

        Returns:
            SUCCESS, or FAILURE if any rebuild failed

        Raises:
            UnregisteredDependencyError: If an edge leaves the graph
            CyclicDependencyError: If the edges contain a cycle
        """
        layers = self.layers()
        self.logger.debug(
            "Updating graph: %d node(s), %d layer(s), strategy=%s",
            len(self._nodes),
            len(layers),
            self._strategy,
        )

        with ThreadPoolExecutor(
            max_workers=self._max_workers, thread_name_prefix="kiln"
        ) as executor:
            if self._strategy == "layered":
                passes = self._run_layered(executor, layers)
            else:
                passes = self._run_fixpoint(executor)

        failed = any(record.outcome is BuildOutcome.FAILURE for record in passes)
        outcome = BuildOutcome.FAILURE if failed else BuildOutcome.SUCCESS
        self._last_report = BuildReport(outcome=outcome, strategy=self._strategy, passes=passes)

        self.logger.info(
            "Graph update finished: %s after %d pass(es), %d rebuild(s)",
            outcome.value,
            len(passes),
            len(self._last_report.rebuilt),
        )
        return outcome

    def _run_layered(
        self, executor: Executor, layers: list[list[ArtifactNode]]
    ) -> list[PassRecord]:
        passes = []
        for index, layer in enumerate(layers):
            record = self._run_pass(executor, index, layer)
            passes.append(record)
            if record.outcome is BuildOutcome.FAILURE:
                break
        return passes

    def _run_fixpoint(self, executor: Executor) -> list[PassRecord]:
        passes = []
        while True:
            record = self._run_pass(executor, len(passes), self._unique_nodes())
            passes.append(record)
            if record.outcome is BuildOutcome.FAILURE or not record.stale:
                return passes

    def _run_pass(
        self, executor: Executor, index: int, candidates: Sequence[ArtifactNode]
    ) -> PassRecord:
        flags = list(executor.map(_need_update, candidates))
        stale = [node for node, flag in zip(candidates, flags) if flag]
        self.logger.debug(
            "Pass %d: %d checked, %d stale %s",
            index,
            len(candidates),
            len(stale),
            [str(node.path) for node in stale],
        )

        outcomes = list(executor.map(_update, stale))
        failed = [node for node, outcome in zip(stale, outcomes) if outcome is BuildOutcome.FAILURE]
        for node in failed:
            self.logger.error("Rebuild failed: %s", node.path)

        return PassRecord(
            index=index,
            checked=[str(node.path) for node in candidates],
            stale=[str(node.path) for node in stale],
            failed=[str(node.path) for node in failed],
            outcome=BuildOutcome.FAILURE if failed else BuildOutcome.SUCCESS,
        )


def _need_update(node: ArtifactNode) -> bool:
    return node.need_update()


def _update(node: ArtifactNode) -> BuildOutcome:
    return node.update()
