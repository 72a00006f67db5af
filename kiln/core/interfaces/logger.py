"""
Diagnostic logging interface.

The graph, its nodes and the rebuild actions report what they do through
ILogger; results meant for the person running a build go through
IPresenter instead. Rebuilds run on worker threads, so implementations
must accept calls from several threads at once.
"""

from abc import ABC, abstractmethod
from typing import Any


class ILogger(ABC):
    """
    Sink for internal diagnostics.

    Messages use %-style arguments, formatted only if the level is enabled.
    """

    @abstractmethod
    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Per-pass and per-node detail."""

    @abstractmethod
    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        """One-line summaries, e.g. a finished graph update."""

    @abstractmethod
    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        """A rebuild reported failure."""

    @abstractmethod
    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        """A rebuild raised, or a node has no way to be made."""

    @abstractmethod
    def set_level(self, level: str) -> None:
        """
        Change the threshold.

        Args:
            level: 'debug', 'info', 'warning' or 'error'
        """
