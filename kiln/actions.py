"""
Rebuild actions.

Concrete IRebuildAction implementations: running a shell command, calling a
Python function, and touching a stamp file. Whatever goes wrong inside an
action is folded into a BuildOutcome so the scheduler only ever sees
success or failure.
"""

from __future__ import annotations

import shlex
import subprocess
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from .core.exceptions import ActionExecutionError
from .core.interfaces.action import IRebuildAction
from .core.interfaces.logger import ILogger
from .core.models.build import BuildOutcome
from .graph.fingerprint import touch

if TYPE_CHECKING:
    from .graph.node import ArtifactNode


class ShellAction(IRebuildAction):
    """
    Rebuild a node by running a shell command.

    The command may reference the node through placeholders, each replaced
    by shell-quoted paths:

    - ``{target}``: the node's own path
    - ``{inputs}``: all dependency paths, space separated
    - ``{input}``: the first dependency path

    Usage:
        action = ShellAction("cc {inputs} -o {target}")
        node = ArtifactNode("build/app", [main_c, util_c], action)
    """

    def __init__(
        self,
        command: str,
        cwd: str | Path | None = None,
        timeout: float | None = None,
        env: dict[str, str] | None = None,
        logger: ILogger | None = None,
    ):
        """
        Initialize shell action.

        Args:
            command: Command template
            cwd: Working directory for the command
            timeout: Seconds before the command is killed and counted as failed
            env: Environment for the command (None: inherit)
            logger: Logger for internal diagnostics
        """
        self.command = command
        self.cwd = cwd
        self.timeout = timeout
        self.env = env
        self._logger = logger

    @property
    def logger(self) -> ILogger:
        """Get logger, resolving from container or creating NullLogger."""
        if self._logger is None:
            from .core.di import resolve_or_default
            from .services.logging import NullLogger

            self._logger = resolve_or_default(ILogger, NullLogger)  # type: ignore[type-abstract]
        return self._logger

    def render(self, node: ArtifactNode) -> str:
        """Substitute the node's paths into the command template."""
        inputs = [shlex.quote(str(dep.path)) for dep in node.dependencies]
        return (
            self.command.replace("{target}", shlex.quote(str(node.path)))
            .replace("{inputs}", " ".join(inputs))
            .replace("{input}", inputs[0] if inputs else "")
        )

    def describe(self, node: ArtifactNode) -> str:
        return self.render(node)

    def __call__(self, node: ArtifactNode) -> BuildOutcome:
        """Run the command; exit code 0 is success, anything else failure."""
        try:
            self.run_checked(node)
        except ActionExecutionError as e:
            self.logger.warning("%s", e)
            return BuildOutcome.FAILURE
        return BuildOutcome.SUCCESS

    def run_checked(self, node: ArtifactNode) -> subprocess.CompletedProcess:
        """
        Run the command and raise unless it exits with status 0.

        Raises:
            ActionExecutionError: On non-zero exit, timeout, or OS error
        """
        command = self.render(node)
        self.logger.debug("Running: %s", command)

        try:
            # shell=True so templates can use pipes and redirection
            result = subprocess.run(
                command,
                shell=True,
                cwd=self.cwd,
                env=self.env,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ActionExecutionError(
                f"Command for {node.path} timed out after {self.timeout}s",
                command=command,
                cause=e,
            ) from e
        except OSError as e:
            raise ActionExecutionError(
                f"Could not run command for {node.path}: {e}",
                command=command,
                cause=e,
            ) from e

        if result.returncode != 0:
            raise ActionExecutionError(
                f"Command for {node.path} failed with exit code {result.returncode}",
                exit_code=result.returncode,
                command=command,
            )
        return result

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ShellAction):
            return NotImplemented
        return (self.command, self.cwd, self.timeout, self.env) == (
            other.command,
            other.cwd,
            other.timeout,
            other.env,
        )

    def __hash__(self) -> int:
        return hash((self.command, str(self.cwd), self.timeout))

    def __repr__(self) -> str:
        return f"ShellAction({self.command!r})"


class CallableAction(IRebuildAction):
    """Adapt a plain function ``func(node) -> BuildOutcome | bool | None``."""

    def __init__(self, func: Callable[[ArtifactNode], object], description: str | None = None):
        self.func = func
        self.description = description or getattr(func, "__name__", repr(func))

    def __call__(self, node: ArtifactNode) -> BuildOutcome:
        return BuildOutcome.from_result(self.func(node))

    def describe(self, node: ArtifactNode) -> str:
        return self.description


class TouchAction(IRebuildAction):
    """Create or touch the node's file, e.g. for stamp targets."""

    def __call__(self, node: ArtifactNode) -> BuildOutcome:
        touch(node.path)
        return BuildOutcome.SUCCESS

    def describe(self, node: ArtifactNode) -> str:
        return f"touch {node.path}"
