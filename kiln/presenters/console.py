"""
Terminal presenter for the kiln CLI.

ANSI colours are used only when standard output is a terminal.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from typing import TYPE_CHECKING, TextIO

from ..core.interfaces.presenter import IPresenter

if TYPE_CHECKING:
    from ..core.models.build import BuildReport

RED = "91"
GREEN = "92"
YELLOW = "93"
BOLD = "1"


class ConsolePresenter(IPresenter):
    """Line-oriented output with optional colour."""

    def __init__(self, use_color: bool = True, file: TextIO | None = None) -> None:
        """
        Args:
            use_color: Colour output when stdout is a terminal
            file: Write normal output here instead of sys.stdout
        """
        self._use_color = use_color and sys.stdout.isatty()
        self._file = file

    @property
    def out(self) -> TextIO:
        # Resolved per call: CliRunner swaps sys.stdout between invocations
        return self._file or sys.stdout

    @property
    def err(self) -> TextIO:
        return sys.stderr

    def _paint(self, text: str, code: str) -> str:
        return f"\033[{code}m{text}\033[0m" if self._use_color else text

    def print(self, message: str) -> None:
        print(message, file=self.out)

    def print_error(self, message: str) -> None:
        print(self._paint(f"Error: {message}", RED), file=self.err)

    def print_warning(self, message: str) -> None:
        print(self._paint(f"Warning: {message}", YELLOW), file=self.err)

    def print_success(self, message: str) -> None:
        print(self._paint(message, GREEN), file=self.out)

    def print_table(self, headers: list[str], rows: list[list[str]]) -> None:
        if not rows:
            return

        widths = [
            max([len(header)] + [len(str(row[i])) for row in rows if i < len(row)])
            for i, header in enumerate(headers)
        ]

        def line(cells: list[str]) -> str:
            padded = [str(cell).ljust(widths[i]) for i, cell in enumerate(cells[: len(widths)])]
            return "  ".join(padded).rstrip()

        heading = line(headers)
        print(self._paint(heading, BOLD), file=self.out)
        print("-" * len(heading), file=self.out)
        for row in rows:
            print(line(row), file=self.out)

    def print_report(
        self,
        report: BuildReport,
        quiet: bool = False,
        display: Callable[[str], str] | None = None,
    ) -> None:
        """
        One ``[OK]``/``[FAIL]`` line per rebuilt path, then a summary.

        A failed build ends with an error naming the failing pass and paths.
        """
        show = display or str
        if not quiet:
            for record in report.passes:
                failed = set(record.failed)
                for path in record.stale:
                    if path in failed:
                        marker = self._paint("✗", RED) if self._use_color else "[FAIL]"
                    else:
                        marker = self._paint("✓", GREEN) if self._use_color else "[OK]"
                    print(f"{marker} {show(path)}", file=self.out)

        if not report.succeeded:
            names = ", ".join(show(path) for path in report.failed)
            self.print_error(f"Build failed in pass {report.pass_count}: {names}")
        elif report.rebuilt:
            self.print_success(
                f"Rebuilt {len(report.rebuilt)} target(s) in {report.pass_count} pass(es)."
            )
        else:
            self.print_success("Everything is up to date.")
