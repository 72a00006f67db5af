"""
Shared helpers for commands that work on a buildfile.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import click

from ...buildfile import BUILDFILE_NAME, Buildfile, find_buildfile, load_buildfile
from ...builder import Builder
from ...core.exceptions import KilnException
from ..context import KilnContext


@dataclass
class Project:
    """A loaded buildfile and the builder declared from it."""

    path: Path
    buildfile: Buildfile
    builder: Builder

    @property
    def root(self) -> Path:
        return self.path.parent

    def display(self, path: str | os.PathLike) -> str:
        """Path relative to the project root, for output."""
        return os.path.relpath(path, self.root)


def load_project(ctx: KilnContext, buildfile: Path | None) -> Project:
    """
    Locate and load the buildfile.

    Raises:
        click.ClickException: If no buildfile is found or it is invalid
    """
    path = buildfile if buildfile is not None else find_buildfile(ctx.cwd)
    if path is None:
        raise click.ClickException(
            f"No {BUILDFILE_NAME} found in {ctx.cwd} or any parent directory."
        )
    if not path.is_absolute():
        path = ctx.cwd / path

    ctx.logger.debug("Using buildfile %s", path)
    try:
        loaded = load_buildfile(path)
        builder = loaded.to_builder(root=path.parent, logger=ctx.logger)
    except KilnException as e:
        raise click.ClickException(str(e)) from e

    return Project(path=path, buildfile=loaded, builder=builder)
