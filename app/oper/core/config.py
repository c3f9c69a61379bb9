"""Configuration model and I/O for oper.

The configuration binds keys to custom commands that are run against the
selected commit, and sizes the diff cache. It is stored in
~/.config/oper/config.toml and written from the bundled default on first
use.

Example:
    diff_cache_size = 32

    [[custom_command]]
    key = "i"
    executable = "gitk"
    args = "--select-commit={}"
"""

import logging
import os
import shlex
import tomllib
from importlib import resources
from pathlib import Path
from tempfile import NamedTemporaryFile
from types import MappingProxyType
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from oper.core.paths import get_config_path
from oper.tui.keys import RESERVED_KEYS

logger = logging.getLogger(__name__)

# Token replaced with the selected commit id in argument templates
COMMIT_PLACEHOLDER = "{}"

DEFAULT_DIFF_CACHE_SIZE = 32


class CustomCommand(BaseModel):
    """A key bound to an external command.

    Attributes:
        key: Single character that triggers the command.
        executable: Program to start.
        args: Argument template; every "{}" is replaced with the commit id.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    key: Annotated[str, Field(min_length=1, max_length=1, description="Trigger key")]
    executable: Annotated[str, Field(min_length=1, description="Program to start")]
    args: Annotated[str | None, Field(description="Argument template")] = None

    @field_validator("key")
    @classmethod
    def validate_not_reserved(cls, v: str) -> str:
        """Reject keys that are taken by built-in navigation."""
        if v in RESERVED_KEYS:
            msg = f"key '{v}' is reserved for a built-in action"
            raise ValueError(msg)
        return v

    @field_validator("executable")
    @classmethod
    def validate_executable(cls, v: str) -> str:
        """Reject blank executables."""
        if not v.strip():
            msg = "executable cannot be blank"
            raise ValueError(msg)
        return v.strip()

    @field_validator("args")
    @classmethod
    def validate_args(cls, v: str | None) -> str | None:
        """Reject templates that cannot be split into arguments."""
        if v is None:
            return v
        try:
            shlex.split(v)
        except ValueError as e:
            msg = f"args cannot be split into arguments: {e}"
            raise ValueError(msg) from None
        return v


class OperConfig(BaseModel):
    """Complete oper configuration.

    Attributes:
        diff_cache_size: Number of rendered diffs kept in memory.
        custom_command: Custom key bindings, in file order.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    diff_cache_size: Annotated[
        int,
        Field(ge=1, le=4096, description="Number of cached diffs (1-4096)"),
    ] = DEFAULT_DIFF_CACHE_SIZE
    custom_command: Annotated[
        tuple[CustomCommand, ...],
        Field(description="Custom key bindings"),
    ] = ()

    @model_validator(mode="after")
    def validate_unique_keys(self) -> "OperConfig":
        """Validate that no key is bound twice."""
        seen: set[str] = set()
        duplicates: set[str] = set()
        for command in self.custom_command:
            if command.key in seen:
                duplicates.add(command.key)
            seen.add(command.key)
        if duplicates:
            msg = f"Keys bound to more than one custom command: {sorted(duplicates)}"
            raise ValueError(msg)
        return self

    @property
    def commands(self) -> MappingProxyType[str, CustomCommand]:
        """Read-only key to command table."""
        return MappingProxyType({command.key: command for command in self.custom_command})


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


class ConfigValidationError(ConfigError):
    """Raised when the config content is invalid."""


def get_bundled_config_path() -> Path:
    """Get the bundled default configuration path.

    Returns:
        Path to the bundled data/config.toml
    """
    return resources.files("oper.data").joinpath("config.toml")  # type: ignore[return-value]


def _write_atomic(path: Path, data: bytes) -> None:
    """Write ``data`` to ``path`` through a temporary file and os.replace().

    Raises:
        ConfigError: If the file cannot be written.
    """
    tmp_path: Path | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            f.write(data)
        os.replace(str(tmp_path), str(path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config {path}: {e}") from e


def write_default_config(path: Path) -> Path:
    """Write the bundled default configuration to ``path``.

    The bundled file is validated first and then copied unchanged, so the
    explanatory comments reach the user's copy.

    Args:
        path: Destination file.

    Returns:
        Path where the config was written.

    Raises:
        ConfigError: If the bundled default is invalid or the file cannot
            be written.
    """
    bundled = Path(get_bundled_config_path()).read_bytes()
    parse_config(bundled.decode("utf-8"))
    _write_atomic(path, bundled)
    logger.info("Wrote default configuration to %s", path)
    return path


def parse_config(content: str) -> OperConfig:
    """Parse and validate configuration from TOML text.

    Args:
        content: TOML document.

    Returns:
        Validated OperConfig.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
    """
    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e

    try:
        return OperConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid config content: {e}") from e


def load_config(path: Path | None = None) -> OperConfig:
    """Load the configuration.

    Without an explicit path the default location is used and created from
    the bundled default when missing. An explicit path must exist.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated OperConfig object.

    Raises:
        ConfigError: If the file is missing (explicit path), unreadable,
            malformed, or binds a reserved key.
    """
    if path is None:
        config_path = get_config_path()
        if not config_path.exists():
            write_default_config(config_path)
    else:
        config_path = path
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")

    try:
        content = config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Failed to read config {config_path}: {e}") from e

    config = parse_config(content)
    logger.debug(
        "Loaded %d custom command(s) from %s", len(config.custom_command), config_path
    )
    return config
