"""
Configuration loader.

App config: reads config.yaml, resolves the account address and endpoint
overrides from environment variables.
"""

from config.loader import (
    ApiConfig,
    AppConfig,
    BookConfig,
    LoggingConfig,
    StreamConfig,
    load_config,
)

__all__ = [
    "ApiConfig",
    "AppConfig",
    "BookConfig",
    "LoggingConfig",
    "StreamConfig",
    "load_config",
]
