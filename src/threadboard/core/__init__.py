"""Core types and errors."""

from threadboard.core.errors import (
    ConfigError,
    ConflictError,
    InvalidInputError,
    NotFoundError,
    StorageError,
    ThreadboardError,
)

__all__ = [
    "ConfigError",
    "ConflictError",
    "InvalidInputError",
    "NotFoundError",
    "StorageError",
    "ThreadboardError",
]
