"""Configuration loading and validation."""

from threadboard.config.loader import load_config
from threadboard.config.schema import (
    APIConfig,
    AuthConfig,
    DatabaseConfig,
    ListingConfig,
    LoggingConfig,
    ThreadboardConfig,
)

__all__ = [
    "APIConfig",
    "AuthConfig",
    "DatabaseConfig",
    "ListingConfig",
    "LoggingConfig",
    "ThreadboardConfig",
    "load_config",
]
