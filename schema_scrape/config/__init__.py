"""Configuration management."""

from .config import (
    Config,
    CatalogSourceConfig,
    ScrapeConfig,
    LoggingConfig,
    load_config,
)

__all__ = [
    "Config",
    "CatalogSourceConfig",
    "ScrapeConfig",
    "LoggingConfig",
    "load_config",
]
