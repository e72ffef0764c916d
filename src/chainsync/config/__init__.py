"""Application configuration helpers."""

from __future__ import annotations

from .api import ApiConfig, get_api_config
from .distribution import DistributionConfig, get_distribution_config
from .env import float_from_env, int_from_env, require_env_vars, str_from_env
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import ResilienceConfig
from .logging import configure_logging
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_storage_config,
)
from .sync import SyncConfig, get_sync_config

__all__ = [
    "ApiConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "DistributionConfig",
    "MissingConfigurationError",
    "ResilienceConfig",
    "StorageConfig",
    "SyncConfig",
    "configure_logging",
    "float_from_env",
    "get_api_config",
    "get_database_config",
    "get_database_uri",
    "get_distribution_config",
    "get_storage_config",
    "get_sync_config",
    "int_from_env",
    "require_env_vars",
    "str_from_env",
]
