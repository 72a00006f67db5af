"""
Wiring of kiln's services.

The CLI calls bootstrap() once per invocation to put a presenter and a
logger into the service container. Code that imports kiln as a library
can skip this; the graph and the actions then log to a NullLogger.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from .container import ServiceContainer, get_container
from .interfaces.logger import ILogger
from .interfaces.presenter import IPresenter

if TYPE_CHECKING:
    from .settings import KilnSettings

_initialized = False


def bootstrap(
    start_dir: Path | None = None,
    settings: KilnSettings | None = None,
) -> ServiceContainer:
    """
    Register the presenter and logger, once.

    Later calls return the container untouched until reset() is called.

    Args:
        start_dir: Where to look for kiln.toml when ``settings`` is not given
        settings: Already loaded settings to configure the services with
    """
    global _initialized

    container = get_container()
    if not _initialized:
        if settings is None:
            from .settings import load_settings

            settings = load_settings(start_dir=str(start_dir) if start_dir else None)
        _wire(container, settings)
        _initialized = True
    return container


def _wire(container: ServiceContainer, settings: KilnSettings) -> None:
    from ..presenters.console import ConsolePresenter
    from ..services.logging import KilnLogger

    logging_config = settings.logging
    container.register_singleton(
        IPresenter,  # type: ignore[type-abstract]
        implementation=ConsolePresenter(use_color=settings.output.color),
    )
    # The log file is opened on first use, not at startup
    container.register_singleton(
        ILogger,  # type: ignore[type-abstract]
        factory=lambda: KilnLogger.from_config(logging_config),
    )


def reset() -> None:
    """Empty the container and allow bootstrap() to run again (used by tests)."""
    global _initialized
    ServiceContainer.reset()
    _initialized = False


def is_initialized() -> bool:
    return _initialized
