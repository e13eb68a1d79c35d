"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .fragment import FragmentConfig, get_fragment_config
from .storage import StorageConfig, get_storage_config

__all__ = [
    "ConfigurationError",
    "FragmentConfig",
    "MissingConfigurationError",
    "StorageConfig",
    "get_fragment_config",
    "get_storage_config",
    "optional_env_var",
    "require_env_vars",
]
