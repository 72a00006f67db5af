"""Read-only helpers over kiln's merged configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .core.models.config import KilnConfig
from .core.settings import load_settings


def _get_default_config() -> dict[str, Any]:
    """Configuration with nothing but model defaults applied."""
    return KilnConfig().to_dict()


def load_config(config_path: Path | None = None, start_dir: str | None = None) -> dict[str, Any]:
    """
    Merged configuration as nested dicts.

    Args:
        config_path: Config file to use instead of searching
        start_dir: Where the search for a config file starts (default: cwd)

    Returns:
        One dict per section; ``_config_file`` / ``_config_error`` are
        present when a file was used or rejected.
    """
    return load_settings(config_path=config_path, start_dir=start_dir).to_dict()


def config_get(key: str, start_dir: str | None = None, default: Any = None) -> Any:
    """Look up a dotted key such as ``scheduler.max_workers``."""
    return KilnConfig.from_dict(load_config(start_dir=start_dir)).get(key, default)
