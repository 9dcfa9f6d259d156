"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. Environment variables (ENGINELIB_*)
2. Config file (~/.enginelib/config.toml)
3. Default values

Environment variables:
- ENGINELIB_CONFIG_PATH: Path to config file (overrides default location)
- ENGINELIB_DEFAULT_SCHEMA_VERSION: Schema version for new libraries
- ENGINELIB_STORE_TIMEOUT: Seconds to wait for a store lock
- ENGINELIB_SLOW_TRANSACTION_SECONDS: Warn about saves slower than this
"""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from enginelib.config.env import EnvReader
from enginelib.config.models import EngineLibConfig
from enginelib.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".enginelib"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"


def get_default_config_path(env: Mapping[str, str] | None = None) -> Path:
    """Get the config file path.

    Can be overridden by the ENGINELIB_CONFIG_PATH environment variable.
    """
    return EnvReader(env).get_path("ENGINELIB_CONFIG_PATH", DEFAULT_CONFIG_FILE)


def load_toml_file(path: Path) -> dict[str, Any]:
    """Read a TOML file into a dictionary.

    Args:
        path: File to read.

    Returns:
        Parsed content, or an empty dict if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not valid TOML.
    """
    if not path.exists():
        logger.debug("Config file %s not found, using defaults", path)
        return {}
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e


def _apply_env_overrides(data: dict[str, Any], reader: EnvReader) -> None:
    """Overlay ENGINELIB_* environment variables onto file values."""
    overrides: list[tuple[str, str, Any]] = [
        (
            "library",
            "default_schema_version",
            reader.get_str("ENGINELIB_DEFAULT_SCHEMA_VERSION"),
        ),
        ("store", "timeout", reader.get_float("ENGINELIB_STORE_TIMEOUT")),
        (
            "store",
            "slow_transaction_seconds",
            reader.get_float("ENGINELIB_SLOW_TRANSACTION_SECONDS"),
        ),
    ]
    for section, key, value in overrides:
        if value is None:
            continue
        target = data.setdefault(section, {})
        if not isinstance(target, dict):
            raise ConfigError(f"Config section [{section}] must be a table")
        target[key] = value


def get_config(
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> EngineLibConfig:
    """Load configuration from file and environment.

    Args:
        config_path: Config file to read. Defaults to get_default_config_path().
        env: Environment mapping to use instead of os.environ.

    Returns:
        Validated EngineLibConfig.

    Raises:
        ConfigError: If the file is unreadable or any value is invalid.
    """
    path = config_path if config_path is not None else get_default_config_path(env)
    data = load_toml_file(path)
    _apply_env_overrides(data, EnvReader(env))

    try:
        return EngineLibConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e
