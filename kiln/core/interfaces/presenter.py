"""
User-facing output interface.

The build engine never prints; the CLI commands hand messages, tables and
build reports to an IPresenter.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models.build import BuildReport


class IPresenter(ABC):
    """Output seam for CLI commands."""

    @abstractmethod
    def print(self, message: str) -> None:
        """Plain line on standard output."""

    @abstractmethod
    def print_error(self, message: str) -> None:
        """Error line on standard error."""

    @abstractmethod
    def print_warning(self, message: str) -> None:
        """Warning line on standard error."""

    @abstractmethod
    def print_success(self, message: str) -> None:
        """Highlighted line on standard output."""

    @abstractmethod
    def print_table(self, headers: list[str], rows: list[list[str]]) -> None:
        """Aligned columns; prints nothing for an empty ``rows``."""

    @abstractmethod
    def print_report(
        self,
        report: BuildReport,
        quiet: bool = False,
        display: Callable[[str], str] | None = None,
    ) -> None:
        """
        Show the result of a build.

        Args:
            report: Report of the finished update
            quiet: Summary line only
            display: Turns a node path into what is shown for it
        """
