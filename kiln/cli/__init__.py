"""
The ``kiln`` command line.

``cli`` is the Click group; the subcommands live in kiln.cli.commands and
are attached when this package is imported.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import click

from ..core.exceptions import KilnException
from .context import KilnContext

try:
    __version__ = version("kiln-build")
except PackageNotFoundError:
    __version__ = "0.1.0"


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="kiln")
@click.option(
    "-C",
    "--directory",
    type=click.Path(exists=True, file_okay=False, resolve_path=True, path_type=Path),
    default=None,
    help="Run as if started in this directory",
)
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx: click.Context, directory: Path | None, verbose: bool) -> None:
    """kiln - minimal incremental builds

    Rebuilds only the targets whose inputs changed, judged by file
    modification times.

    \b
    Examples:
        kiln build             Build the default (or every) target
        kiln build build/app   Build one target and what it needs
        kiln status            List files that are out of date
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)
    try:
        ctx.obj = KilnContext.create(cwd=directory, verbose=verbose)
    except KilnException as e:
        raise click.ClickException(str(e)) from e


def _add_commands() -> None:
    from .commands import COMMANDS

    for command in COMMANDS:
        cli.add_command(command)


_add_commands()

__all__ = ["KilnContext", "__version__", "cli"]
