"""User-facing output for the kiln CLI."""

from .console import ConsolePresenter

__all__ = ["ConsolePresenter"]
