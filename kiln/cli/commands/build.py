"""
Native Click implementation of the build command.

Usage: kiln build [options] [TARGET...]
"""

from __future__ import annotations

from pathlib import Path

import click

from ...core.exceptions import KilnException
from ...graph.graph import STRATEGIES
from ..context import KilnContext
from ._project import load_project


@click.command("build")
@click.argument("targets", nargs=-1)
@click.option(
    "-f",
    "--file",
    "buildfile",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Buildfile to use (default: nearest kiln.toml)",
)
@click.option("-j", "--jobs", type=click.IntRange(min=1), default=None, help="Worker threads")
@click.option(
    "--strategy",
    type=click.Choice(STRATEGIES),
    default=None,
    help="Scheduling strategy (default from config: layered)",
)
@click.option("-q", "--quiet", is_flag=True, default=None, help="Only print the summary")
@click.pass_obj
def build(
    ctx: KilnContext,
    targets: tuple[str, ...],
    buildfile: Path | None,
    jobs: int | None,
    strategy: str | None,
    quiet: bool | None,
) -> None:
    """Bring targets up to date.

    Without TARGET arguments, builds the buildfile's default targets, or
    every target if it names none.

    \b
    Examples:
        kiln build
        kiln build build/app
        kiln build -j 4 --strategy fixpoint
    """
    project = load_project(ctx, buildfile)
    wanted = list(targets) or project.buildfile.default or None

    scheduler = ctx.settings.scheduler
    try:
        graph = project.builder.graph(
            targets=wanted,
            strategy=strategy or scheduler.strategy,
            max_workers=jobs or scheduler.max_workers,
        )
        graph.update()
    except KilnException as e:
        raise click.ClickException(str(e)) from e

    report = graph.last_report
    if report is None:
        raise click.ClickException("The build graph did not produce a report.")

    quiet_setting = ctx.settings.output.quiet if quiet is None else quiet
    ctx.presenter.print_report(report, quiet=quiet_setting, display=project.display)

    if not report.succeeded:
        raise SystemExit(1)
