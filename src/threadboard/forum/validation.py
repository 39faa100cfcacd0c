"""Structural checks the core repeats even though the boundary validates first."""

from __future__ import annotations

from threadboard.core.errors import InvalidInputError


def require_text(value: str | None, field_name: str) -> str:
    """Return ``value`` unchanged, or raise if it is missing or blank."""
    if value is None or not value.strip():
        msg = f"{field_name} must not be empty"
        raise InvalidInputError(msg)
    return value


def optional_text(value: str | None) -> str | None:
    """Collapse blank optional fields to ``None``."""
    if value is None or not value.strip():
        return None
    return value


def require_page(page: int, limit: int) -> None:
    if page < 1:
        msg = f"page must be >= 1 (got {page})"
        raise InvalidInputError(msg)
    if limit < 1:
        msg = f"limit must be >= 1 (got {limit})"
        raise InvalidInputError(msg)
