"""Configuration for enginelib.

Usage:
    from enginelib.config import get_config

    config = get_config()
    print(config.library.default_schema_version)
"""

from enginelib.config.env import EnvReader
from enginelib.config.loader import (
    DEFAULT_CONFIG_DIR,
    DEFAULT_CONFIG_FILE,
    get_config,
    get_default_config_path,
    load_toml_file,
)
from enginelib.config.models import (
    EngineLibConfig,
    LibraryConfig,
    StoreConfig,
)

__all__ = [
    "DEFAULT_CONFIG_DIR",
    "DEFAULT_CONFIG_FILE",
    "EngineLibConfig",
    "EnvReader",
    "LibraryConfig",
    "StoreConfig",
    "get_config",
    "get_default_config_path",
    "load_toml_file",
]
