"""User configuration for deployctl.

Configuration is stored in ~/.config/deployctl/config.toml. Every field
has a default, so a missing file is not an error for normal runs.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Literal

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from deployctl.core.errors import ConfigError, ConfigNotFoundError, ConfigParseError
from deployctl.core.paths import get_config_path

logger = logging.getLogger(__name__)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class DeployConfig(BaseModel):
    """Runtime settings for workloads.

    Attributes:
        log_level: Logging level for the CLI.
        request_timeout: Total timeout for a single download, in seconds.
        connect_timeout: Connection timeout, in seconds.
        chunk_size: Download chunk size in bytes.
        terminate_running: Terminate processes running from the install
            directory before a maintenance run.
        locale: Locale of user-facing messages (e.g. "en", "de").
    """

    model_config = ConfigDict(extra="forbid")

    log_level: Annotated[LogLevel, Field(description="Logging level")] = "INFO"
    request_timeout: Annotated[
        int,
        Field(ge=10, le=3600, description="Download timeout in seconds (10-3600)"),
    ] = 300
    connect_timeout: Annotated[
        int,
        Field(ge=1, le=120, description="Connect timeout in seconds (1-120)"),
    ] = 30
    chunk_size: Annotated[
        int,
        Field(ge=1024, description="Download chunk size in bytes"),
    ] = 65536
    terminate_running: Annotated[
        bool,
        Field(description="Terminate processes running from the install directory"),
    ] = True
    locale: Annotated[
        str,
        Field(pattern=r"^[a-z]{2}(_[A-Z]{2})?$", description="Message locale"),
    ] = "en"


def load_config(path: Path | None = None) -> DeployConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated DeployConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return DeployConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def load_config_or_default(path: Path | None = None) -> DeployConfig:
    """Load configuration, falling back to defaults on any error."""
    try:
        return load_config(path)
    except ConfigNotFoundError:
        return DeployConfig()
    except ConfigError as e:
        logger.warning("Using default configuration: %s", e)
        return DeployConfig()


def save_config(config: DeployConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(config.model_dump(), f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path
