"""Configuration package for MarketChat.

This package provides Pydantic configuration models and loading utilities.
"""

from marketchat.core.config.loader import (
    check_unexpanded_vars,
    expand_env_vars,
    expand_env_vars_recursive,
    load_config,
    load_config_or_default,
)
from marketchat.core.config.models import (
    DEFAULT_BASE_URL,
    ApiConfig,
    ChatConfig,
    Config,
    LoggingConfig,
    StorageConfig,
)

__all__ = [
    # Models
    "DEFAULT_BASE_URL",
    "ApiConfig",
    "ChatConfig",
    "Config",
    "LoggingConfig",
    "StorageConfig",
    # Loaders
    "check_unexpanded_vars",
    "expand_env_vars",
    "expand_env_vars_recursive",
    "load_config",
    "load_config_or_default",
]
