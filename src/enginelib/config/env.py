"""Environment variable reader with dependency injection support.

This module provides the EnvReader class for reading and parsing
environment variables. It accepts an optional env mapping so tests never
have to modify os.environ.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger(__name__)


class EnvReader:
    """Environment variable reader with type conversion.

    Example:
        # Production usage (reads from os.environ)
        reader = EnvReader()
        timeout = reader.get_float("ENGINELIB_STORE_TIMEOUT", 30.0)

        # Testing usage (inject custom env)
        reader = EnvReader(env={"ENGINELIB_STORE_TIMEOUT": "5"})
        timeout = reader.get_float("ENGINELIB_STORE_TIMEOUT", 30.0)  # 5.0
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        """Initialize the environment reader.

        Args:
            env: Optional mapping to use instead of os.environ.
        """
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def get_str(self, var: str, default: str | None = None) -> str | None:
        """Get a string from an environment variable, or default if unset."""
        value = self._env.get(var)
        if value is None:
            return default
        return value

    def get_float(self, var: str, default: float | None = None) -> float | None:
        """Get a float from an environment variable.

        Returns default if the variable is unset or cannot be parsed; an
        unparsable value is logged as a warning.
        """
        value = self._env.get(var)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            logger.warning("Invalid float value for %s: %s", var, value)
            return default

    def get_bool(self, var: str, default: bool | None = None) -> bool | None:
        """Get a boolean from an environment variable.

        "true", "1", "yes" and "on" (any case) are true; any other set value
        is false.
        """
        value = self._env.get(var)
        if value is None:
            return default
        return value.lower() in ("true", "1", "yes", "on")

    def get_path(self, var: str, default: Path | None = None) -> Path | None:
        """Get a path from an environment variable, with ~ expanded."""
        value = self._env.get(var)
        if value is None:
            return default
        return Path(value).expanduser()
