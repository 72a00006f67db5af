"""
Native Click implementation of the status command.

Usage: kiln status [options] [TARGET...]
"""

from __future__ import annotations

from pathlib import Path

import click

from ...core.exceptions import KilnException
from ..context import KilnContext
from ._project import load_project


@click.command("status")
@click.argument("targets", nargs=-1)
@click.option(
    "-f",
    "--file",
    "buildfile",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Buildfile to use (default: nearest kiln.toml)",
)
@click.pass_obj
def status(ctx: KilnContext, targets: tuple[str, ...], buildfile: Path | None) -> None:
    """List targets that a build would rebuild.

    Includes targets that are stale now and targets downstream of them.
    Missing source files are listed as well, since the build would fail
    on them.
    """
    project = load_project(ctx, buildfile)

    try:
        graph = project.builder.graph(targets=list(targets) or None)
        stale = graph.stale_nodes(transitive=True)
    except KilnException as e:
        raise click.ClickException(str(e)) from e

    if not stale:
        ctx.presenter.print_success("Everything is up to date.")
        return

    rows = []
    for node in stale:
        if node.is_source:
            state = "missing source"
        elif node.need_update():
            state = "stale"
        else:
            state = "downstream"
        rows.append([project.display(node.path), state])

    ctx.presenter.print(f"{len(stale)} file(s) out of date:")
    ctx.presenter.print_table(["PATH", "STATE"], rows)
