"""Application configuration loader.

Loads configuration from the YAML file named by ``HIFZ_CONFIG`` (default
``config/hifz.yaml``), falling back to built-in defaults when the file is
missing. A few environment variables override the file.

Usage:
    from hifz.config.app_config import load_app_config

    config = load_app_config()
    days = config.stats.default_days
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to the working directory)
CONFIG_FILE = Path("config/hifz.yaml")
CONFIG_ENV = "HIFZ_CONFIG"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class ServerConfig:
    """Where the API listens."""

    host: str = "127.0.0.1"
    port: int = 8000


@dataclass
class StatsConfig:
    """Defaults for statistics query parameters."""

    default_days: int = 30
    recent_limit: int = 5
    max_days: int = 365


@dataclass
class LoggingConfig:
    """Log level and renderer (``console`` or ``json``)."""

    level: str = "INFO"
    format: str = "console"


@dataclass
class AppConfig:
    """Application-wide configuration."""

    server: ServerConfig = field(default_factory=ServerConfig)
    stats: StatsConfig = field(default_factory=StatsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    seed_sample_data: bool = True
    cors_origins: list[str] = field(default_factory=lambda: ["*"])


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "server": {"host": "127.0.0.1", "port": 8000},
        "stats": {"default_days": 30, "recent_limit": 5, "max_days": 365},
        "logging": {"level": "INFO", "format": "console"},
        "seed_sample_data": True,
        "cors_origins": ["*"],
    }


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    defaults = _get_defaults()

    server_data = {**defaults["server"], **(data.get("server") or {})}
    stats_data = {**defaults["stats"], **(data.get("stats") or {})}
    logging_data = {**defaults["logging"], **(data.get("logging") or {})}

    cors = data.get("cors_origins", defaults["cors_origins"])
    if isinstance(cors, str):
        cors = [o.strip() for o in cors.split(",") if o.strip()]

    return AppConfig(
        server=ServerConfig(host=str(server_data["host"]), port=int(server_data["port"])),
        stats=StatsConfig(
            default_days=int(stats_data["default_days"]),
            recent_limit=int(stats_data["recent_limit"]),
            max_days=int(stats_data["max_days"]),
        ),
        logging=LoggingConfig(
            level=str(logging_data["level"]).upper(),
            format=str(logging_data["format"]),
        ),
        seed_sample_data=bool(data.get("seed_sample_data", defaults["seed_sample_data"])),
        cors_origins=list(cors) or ["*"],
    )


def _apply_env_overrides(config: AppConfig) -> AppConfig:
    """Apply HIFZ_* environment variables on top of file values."""
    level = os.environ.get("HIFZ_LOG_LEVEL")
    if level:
        config.logging.level = level.upper()

    seed = os.environ.get("HIFZ_SEED_SAMPLE_DATA")
    if seed is not None:
        config.seed_sample_data = seed.strip().lower() in _TRUE_VALUES

    return config


def get_config_path() -> Path:
    """Config file path, honouring the HIFZ_CONFIG environment variable."""
    override = os.environ.get(CONFIG_ENV)
    return Path(override) if override else CONFIG_FILE


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    path = get_config_path()
    data: dict[str, Any]

    if path.exists():
        logger.debug("loading_app_config", source=str(path))
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    else:
        logger.debug("using_default_config", missing=str(path))
        data = _get_defaults()

    _cached_config = _apply_env_overrides(_parse_config(data))
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
