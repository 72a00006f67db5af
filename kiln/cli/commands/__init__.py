"""Subcommands of ``kiln``; kiln.cli adds everything in COMMANDS to the group."""

from .build import build
from .status import status

COMMANDS = [build, status]

__all__ = ["COMMANDS", "build", "status"]
