"""
Exception hierarchy for kiln.

Structural problems (bad graphs, bad buildfiles, bad configuration) are
raised as typed exceptions. Rebuild outcomes are not exceptions: an action
reports success or failure through BuildOutcome.
"""

from __future__ import annotations

from typing import Any


class KilnException(Exception):
    """
    Base exception for all kiln errors.

    Keyword arguments other than ``context`` and ``cause`` are added to the
    context when not None, so subclasses name their details without extra
    plumbing::

        raise UnknownNodeError("No node for out/app", path="out/app")

    Attributes:
        message: Human-readable error description
        context: Details for debugging (paths, cycle members, commands)
        exit_code: Suggested exit code for the CLI
        recoverable: Whether running again could succeed without changes
    """

    exit_code: int = 1
    recoverable: bool = True

    def __init__(
        self,
        message: str,
        *,
        context: dict[str, Any] | None = None,
        cause: BaseException | None = None,
        **details: Any,
    ) -> None:
        self.message = message
        self.context = dict(context or {})
        self.context.update((key, value) for key, value in details.items() if value is not None)
        if cause is not None:
            self.__cause__ = cause
        super().__init__(message)

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value!r}" for key, value in self.context.items())
        return f"{self.message} ({details})"


# =============================================================================
# Configuration
# =============================================================================


class KilnConfigError(KilnException):
    """Configuration could not be used."""


class ConfigValidationError(KilnConfigError, ValueError):
    """
    A configuration value is out of range (context: ``key``, ``value``).

    Also a ValueError, for callers that validate arguments generically.
    """


# =============================================================================
# Graph structure
# =============================================================================


class KilnGraphError(KilnException):
    """The graph cannot be scheduled as declared; editing it is the only fix."""

    recoverable = False


class CyclicDependencyError(KilnGraphError):
    """
    The dependency edges contain a cycle.

    Raised before any rebuild action runs. ``cycle`` lists the paths along
    the loop, first path repeated at the end.
    """

    def __init__(self, message: str, *, cycle: list[str] | None = None, **kwargs: Any) -> None:
        super().__init__(message, cycle=cycle or None, **kwargs)
        self.cycle = list(cycle or [])


class UnregisteredDependencyError(KilnGraphError):
    """A node depends on one outside the graph (context: ``node``, ``dependency``)."""


class UnknownNodeError(KilnGraphError):
    """Lookup by handle or path found nothing (context: ``path``)."""


class DuplicateTargetError(KilnGraphError):
    """One path was declared as a target with two different rules (context: ``path``)."""


# =============================================================================
# Buildfile
# =============================================================================


class BuildfileError(KilnException):
    """
    A buildfile is unreadable or invalid (context: ``file_path``).

    Covers TOML syntax errors, schema violations and default targets that
    are never defined.
    """


# =============================================================================
# Execution
# =============================================================================


class KilnExecutionError(KilnException):
    """Running a rebuild action went wrong."""


class ActionExecutionError(KilnExecutionError):
    """
    A rebuild command could not be run, timed out or exited non-zero.

    Only ShellAction.run_checked raises this; as a rebuild action the
    command's failure is folded into a FAILURE outcome instead.
    """

    def __init__(
        self,
        message: str,
        *,
        exit_code: int | None = None,
        command: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, exit_code=exit_code, command=command, **kwargs)
        self.returncode = exit_code


# =============================================================================
# Arguments
# =============================================================================


class InvalidArgumentError(KilnException, ValueError):
    """An API or command-line argument failed validation (context: ``argument``, ``value``)."""
