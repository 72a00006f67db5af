"""
Diagnostic logging for kiln.

KilnLogger sends records to stderr and/or a rotating log file in the user's
home directory. Records carry the thread name, since rebuilds within a
pass run on the executor's ``kiln_N`` worker threads.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

from ..core.interfaces.logger import ILogger

if TYPE_CHECKING:
    from ..core.models.config import LoggingConfig


class KilnLogger(ILogger):
    """stdlib-backed ILogger with optional console and file handlers."""

    LOG_FILE_PATH = Path.home() / ".kiln" / "kiln.log"
    MAX_FILE_SIZE = 10 * 1024 * 1024
    BACKUP_COUNT = 3
    FORMAT = "%(asctime)s [%(levelname)s] %(name)s (%(threadName)s): %(message)s"

    LEVELS: ClassVar[dict[str, int]] = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
    }

    def __init__(
        self,
        name: str = "kiln",
        level: str = "warning",
        console_enabled: bool = False,
        file_enabled: bool = True,
        log_file: Path | None = None,
    ) -> None:
        """
        Configure the named stdlib logger, replacing any handlers it had.

        Args:
            name: stdlib logger name
            level: Threshold for every handler
            console_enabled: Log to stderr
            file_enabled: Log to ``log_file``
            log_file: Log file location (default ~/.kiln/kiln.log)
        """
        self._logger = logging.getLogger(name)
        self._logger.handlers.clear()
        self._logger.setLevel(logging.DEBUG)
        self._logger.propagate = False
        self._log_file = log_file or self.LOG_FILE_PATH

        threshold = self._threshold(level)
        formatter = logging.Formatter(self.FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        handlers: list[logging.Handler] = []
        if console_enabled:
            handlers.append(logging.StreamHandler(sys.stderr))
        if file_enabled:
            self._log_file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(
                RotatingFileHandler(
                    self._log_file, maxBytes=self.MAX_FILE_SIZE, backupCount=self.BACKUP_COUNT
                )
            )

        for handler in handlers:
            handler.setLevel(threshold)
            handler.setFormatter(formatter)
            self._logger.addHandler(handler)

    @classmethod
    def from_config(cls, config: LoggingConfig, **overrides: Any) -> KilnLogger:
        """Build a logger from the ``[logging]`` config section."""
        options: dict[str, Any] = {
            "level": config.level,
            "console_enabled": config.console,
            "file_enabled": config.file,
        }
        options.update(overrides)
        return cls(**options)

    @classmethod
    def _threshold(cls, level: str) -> int:
        return cls.LEVELS.get(level.lower(), logging.WARNING)

    @property
    def log_file(self) -> Path:
        return self._log_file

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.debug(message, *args, **kwargs)

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.info(message, *args, **kwargs)

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.warning(message, *args, **kwargs)

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.error(message, *args, **kwargs)

    def set_level(self, level: str) -> None:
        threshold = self._threshold(level)
        for handler in self._logger.handlers:
            handler.setLevel(threshold)


class NullLogger(ILogger):
    """Discards everything; the fallback when nothing is registered."""

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def set_level(self, level: str) -> None:
        pass
