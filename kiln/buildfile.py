"""
Buildfile loading.

A buildfile is a TOML document (``kiln.toml`` by default) listing targets:

    default = ["build/app"]

    [targets."build/app"]
    inputs = ["build/main.o", "build/util.o"]
    command = "cc {inputs} -o {target}"

    [targets."build/main.o"]
    inputs = ["src/main.c", "include/app.h"]
    command = "cc -c {input} -o {target}"
    timeout = 60

Paths are relative to the buildfile's directory, which is also the working
directory of every command.
"""

from __future__ import annotations

from pathlib import Path

try:
    import tomllib
except ImportError:
    import tomli as tomllib

from pydantic import ConfigDict, Field, ValidationError, field_validator

from .builder import Builder
from .core.exceptions import BuildfileError
from .core.interfaces.logger import ILogger
from .core.models.base import KilnBaseModel

BUILDFILE_NAME = "kiln.toml"


class BuildfileModel(KilnBaseModel):
    """Base for buildfile tables: TOML types coerced, unknown keys rejected."""

    model_config = ConfigDict(strict=False, extra="forbid", validate_assignment=True)


class TargetSpec(BuildfileModel):
    """One ``[targets."<path>"]`` table."""

    inputs: list[str] = Field(default_factory=list)
    command: str
    timeout: float | None = Field(default=None, gt=0)

    @field_validator("command")
    @classmethod
    def command_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("command must not be empty")
        return v


class Buildfile(BuildfileModel):
    """Parsed buildfile."""

    default: list[str] = Field(default_factory=list)
    targets: dict[str, TargetSpec] = Field(default_factory=dict)

    def to_builder(self, root: Path, logger: ILogger | None = None) -> Builder:
        """
        Declare every target on a new Builder rooted at ``root``.

        Raises:
            BuildfileError: If a default target is not defined
        """
        builder = Builder(root=root, logger=logger)
        for path, spec in self.targets.items():
            builder.target(path, spec.inputs, command=spec.command, timeout=spec.timeout)

        undefined = [name for name in self.default if name not in self.targets]
        if undefined:
            raise BuildfileError(
                f"Default target(s) not defined: {', '.join(undefined)}",
                context={"default": undefined},
            )
        return builder


def find_buildfile(start_dir: str | Path | None = None) -> Path | None:
    """
    Find kiln.toml by walking up from start_dir (or cwd).

    Returns:
        Path to the buildfile, or None if not found.
    """
    start = Path(start_dir) if start_dir else Path.cwd()
    for parent in [start, *list(start.parents)]:
        candidate = parent / BUILDFILE_NAME
        if candidate.is_file():
            return candidate
    return None


def load_buildfile(path: str | Path) -> Buildfile:
    """
    Read and validate a buildfile.

    Raises:
        BuildfileError: If the file cannot be read, is not valid TOML, or
            does not match the buildfile schema
    """
    path = Path(path)
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise BuildfileError(f"Invalid TOML: {e}", file_path=str(path), cause=e) from e
    except OSError as e:
        raise BuildfileError(f"Cannot read buildfile: {e}", file_path=str(path), cause=e) from e

    try:
        return Buildfile.model_validate(data)
    except ValidationError as e:
        problems = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        ]
        raise BuildfileError(
            f"Invalid buildfile: {'; '.join(problems)}",
            file_path=str(path),
            cause=e,
        ) from e
