"""
Settings loading for kiln.

Values are merged from, highest priority first:

1. Keyword arguments to KilnSettings
2. Environment variables ``KILN_<SECTION>__<FIELD>``, e.g.
   ``KILN_SCHEDULER__MAX_WORKERS=8``
3. ``.kiln/config.toml``, or the ``[tool.kiln]`` table of a
   ``pyproject.toml``; the nearest one walking up from the start directory
4. Model defaults
"""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib

from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from .exceptions import ConfigValidationError
from .models.config import LoggingConfig, OutputConfig, SchedulerConfig

CONFIG_DIR = ".kiln"
CONFIG_FILE = "config.toml"


def _get_logger():
    from ..services.logging import NullLogger
    from .di import resolve_or_default
    from .interfaces.logger import ILogger

    return resolve_or_default(ILogger, NullLogger)


def _has_kiln_table(pyproject: Path) -> bool:
    try:
        with open(pyproject, "rb") as f:
            data = tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as e:
        _get_logger().debug("Skipping %s: %s", pyproject, e)
        return False
    return "kiln" in data.get("tool", {})


def find_config_file(start_dir: str | None = None) -> Path | None:
    """
    Nearest config file at or above ``start_dir`` (default: cwd).

    In each directory ``.kiln/config.toml`` wins over ``pyproject.toml``;
    the latter only counts if it has a ``[tool.kiln]`` table.
    """
    start = Path(start_dir) if start_dir else Path.cwd()
    for directory in [start, *start.parents]:
        candidate = directory / CONFIG_DIR / CONFIG_FILE
        if candidate.is_file():
            return candidate
        pyproject = directory / "pyproject.toml"
        if pyproject.is_file() and _has_kiln_table(pyproject):
            return pyproject
    return None


@dataclass
class ConfigFile:
    """Raw contents of a config file, or why it could not be used."""

    path: Path | None = None
    data: dict[str, Any] = field(default_factory=dict)
    error: str | None = None


def read_config_file(path: Path | None) -> ConfigFile:
    """
    Read the kiln sections of ``path``.

    Unreadable or invalid files are not fatal: the error is logged and
    returned, and the settings fall back to environment and defaults.
    """
    if path is None:
        return ConfigFile()
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        _get_logger().warning("Invalid TOML in %s: %s", path, e)
        return ConfigFile(path=path, error=f"Failed to parse config file: {e}")
    except OSError as e:
        _get_logger().warning("Cannot read %s: %s", path, e)
        return ConfigFile(path=path, error=f"Failed to read config file: {e}")

    if path.name == "pyproject.toml":
        data = data.get("tool", {}).get("kiln", {})
    return ConfigFile(path=path, data=data)


# The file being loaded; settings_customise_sources() cannot take arguments.
_active_file: ContextVar[ConfigFile] = ContextVar("kiln_active_config_file")


class TomlConfigSource(PydanticBaseSettingsSource):
    """Settings source backed by an already-read ConfigFile."""

    def __init__(self, settings_cls: type[BaseSettings], config_file: ConfigFile):
        super().__init__(settings_cls)
        self._config_file = config_file

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._config_file.data.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return {
            name: value
            for name, value in self._config_file.data.items()
            if name in self.settings_cls.model_fields
        }


class KilnSettings(BaseSettings):
    """Merged kiln configuration. Build it with load_settings()."""

    model_config = SettingsConfigDict(
        env_prefix="KILN_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    scheduler: SchedulerConfig = SchedulerConfig()
    output: OutputConfig = OutputConfig()
    logging: LoggingConfig = LoggingConfig()

    _config_file: str | None = None
    _config_error: str | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        config_file = _active_file.get(ConfigFile())
        return (init_settings, env_settings, TomlConfigSource(settings_cls, config_file))

    @property
    def config_file(self) -> str | None:
        """Config file the values came from, if any."""
        return self._config_file

    @property
    def config_error(self) -> str | None:
        """Why the config file was ignored, if it was."""
        return self._config_error

    def to_dict(self) -> dict[str, Any]:
        """Sections as plain dicts, plus ``_config_file``/``_config_error`` when set."""
        result: dict[str, Any] = {
            "scheduler": self.scheduler.model_dump(),
            "output": self.output.model_dump(),
            "logging": self.logging.model_dump(),
        }
        if self._config_file:
            result["_config_file"] = self._config_file
        if self._config_error:
            result["_config_error"] = self._config_error
        return result


def load_settings(config_path: Path | None = None, start_dir: str | None = None) -> KilnSettings:
    """
    Load settings from environment and config file.

    A config file with invalid values is ignored and reported through
    ``config_error``, like one that cannot be parsed.

    Args:
        config_path: Config file to use instead of searching
        start_dir: Where the search for a config file starts (default: cwd)

    Raises:
        ConfigValidationError: If environment variables hold invalid values
    """
    path = Path(config_path) if config_path is not None else find_config_file(start_dir)
    config_file = read_config_file(path)

    try:
        settings = _settings_from(config_file)
    except ValidationError as e:
        if not config_file.data:
            raise _invalid(e) from e
        _get_logger().warning("Ignoring %s: %s", path, e)
        config_file = ConfigFile(
            path=path, error=f"Invalid values in config file {path}: {_describe(e)}"
        )
        try:
            settings = _settings_from(config_file)
        except ValidationError as env_error:
            raise _invalid(env_error) from env_error

    if config_file.path is not None and config_file.error is None:
        settings._config_file = str(config_file.path)
    settings._config_error = config_file.error
    return settings


def _settings_from(config_file: ConfigFile) -> KilnSettings:
    token = _active_file.set(config_file)
    try:
        return KilnSettings()
    finally:
        _active_file.reset(token)


def _describe(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}" for item in error.errors()
    )


def _invalid(error: ValidationError) -> ConfigValidationError:
    # Values that are still invalid without the file came from the environment
    errors = error.errors()
    key = ".".join(str(part) for part in errors[0]["loc"]) if errors else None
    return ConfigValidationError(f"Invalid kiln settings: {_describe(error)}", key=key)
