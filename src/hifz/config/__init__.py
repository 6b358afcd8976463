"""Configuration package for the Hifz tracker."""

from hifz.config.app_config import (
    AppConfig,
    LoggingConfig,
    ServerConfig,
    StatsConfig,
    clear_config_cache,
    load_app_config,
)
from hifz.config.logging import setup_logging

__all__ = [
    "AppConfig",
    "LoggingConfig",
    "ServerConfig",
    "StatsConfig",
    "clear_config_cache",
    "load_app_config",
    "setup_logging",
]
