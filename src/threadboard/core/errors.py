"""Exception hierarchy for threadboard.

Every module imports from here. The hierarchy is:

    ThreadboardError
    ├── NotFoundError(entity, entity_id)
    ├── InvalidInputError
    ├── ConflictError
    ├── StorageError
    └── ConfigError

``NotFoundError``, ``InvalidInputError`` and ``ConflictError`` map onto
404, 400 and 409 at the HTTP boundary; ``StorageError`` is the internal
failure kind.
"""

from __future__ import annotations


class ThreadboardError(Exception):
    """Base exception for all threadboard errors."""

    kind: str = "internal"

    @property
    def message(self) -> str:
        return str(self)


# ─── Domain Errors ────────────────────────────────────────────


class NotFoundError(ThreadboardError):
    """A referenced post, comment or vote target does not exist."""

    kind = "not_found"

    def __init__(self, entity: str, entity_id: str) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class InvalidInputError(ThreadboardError):
    """Input that should have been rejected at the boundary."""

    kind = "invalid_input"


class ConflictError(ThreadboardError):
    """A uniqueness constraint was violated (duplicate username, double vote)."""

    kind = "conflict"


# ─── Infrastructure Errors ────────────────────────────────────


class StorageError(ThreadboardError):
    """Unexpected database failure."""


class ConfigError(ThreadboardError):
    """Invalid configuration."""
