"""State shared by kiln subcommands through ``ctx.obj``."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..core.bootstrap import bootstrap
from ..core.interfaces.logger import ILogger
from ..core.interfaces.presenter import IPresenter
from ..core.settings import KilnSettings, load_settings


@dataclass
class KilnContext:
    """What every subcommand needs: where it runs and the wired services.

    Attributes:
        cwd: Directory the command runs in
        settings: Merged configuration (TOML, environment, defaults)
        presenter: User-facing output
        logger: Internal diagnostics
    """

    cwd: Path
    settings: KilnSettings
    presenter: IPresenter
    logger: ILogger

    @classmethod
    def create(cls, cwd: Path | None = None, verbose: bool = False) -> KilnContext:
        """Load settings for ``cwd``, wire the services and collect them.

        With ``verbose`` the logger is replaced by one that writes debug
        output to stderr. A config file that could not be used is reported
        as a warning.

        Args:
            cwd: Working directory override (defaults to Path.cwd())
            verbose: Log debug output to stderr

        Returns:
            Configured KilnContext instance
        """
        cwd = Path.cwd() if cwd is None else Path(cwd).resolve()

        settings = load_settings(start_dir=str(cwd))
        container = bootstrap(start_dir=cwd, settings=settings)

        if verbose:
            from ..services.logging import KilnLogger

            container.register_singleton(
                ILogger,  # type: ignore[type-abstract]
                implementation=KilnLogger.from_config(
                    settings.logging, level="debug", console_enabled=True
                ),
            )

        presenter = container.resolve(IPresenter)  # type: ignore[type-abstract]
        if settings.config_error:
            presenter.print_warning(settings.config_error)

        return cls(
            cwd=cwd,
            settings=settings,
            presenter=presenter,
            logger=container.resolve(ILogger),  # type: ignore[type-abstract]
        )
