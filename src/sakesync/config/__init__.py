"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag, env_float, optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .sakenowa import SakenowaConfig, get_sakenowa_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .sync import SyncConfig, get_sync_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SakenowaConfig",
    "StorageConfig",
    "SyncConfig",
    "env_flag",
    "env_float",
    "get_database_config",
    "get_sakenowa_config",
    "get_storage_config",
    "get_sync_config",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
]
