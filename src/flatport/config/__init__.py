"""Application configuration helpers."""

from __future__ import annotations

from .env import env_int, env_path, require_env_vars
from .errors import ConfigurationError, InvalidOptionError, MissingConfigurationError
from .importing import ImportConfig, get_import_config
from .storage import DatabaseConfig, data_dir, get_database_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "ImportConfig",
    "InvalidOptionError",
    "MissingConfigurationError",
    "data_dir",
    "env_int",
    "env_path",
    "get_database_config",
    "get_import_config",
    "require_env_vars",
]
