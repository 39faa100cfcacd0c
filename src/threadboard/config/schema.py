"""Pydantic models for threadboard configuration."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


class DatabaseConfig(BaseModel):
    """Database connection settings."""

    url: str = "sqlite+aiosqlite:///~/.local/share/threadboard/threadboard.db"
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 3600


class ListingConfig(BaseModel):
    """Pagination defaults for post and comment listings."""

    default_limit: int = Field(default=10, ge=1)
    max_limit: int = Field(default=100, ge=1)
    child_preview_limit: int = Field(default=2, ge=0)

    @model_validator(mode="after")
    def _default_within_cap(self) -> ListingConfig:
        if self.default_limit > self.max_limit:
            msg = (
                f"default_limit ({self.default_limit}) exceeds "
                f"max_limit ({self.max_limit})"
            )
            raise ValueError(msg)
        return self


class APIConfig(BaseModel):
    """REST adapter settings."""

    host: str = "127.0.0.1"
    port: int = 8080
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:5173"])


class AuthConfig(BaseModel):
    """Signup and bearer token settings."""

    jwt_secret: str = ""
    jwt_secret_env: str | None = "THREADBOARD_JWT_SECRET"
    token_expiry_hours: int = 24
    registration_enabled: bool = True


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    file: str = ""
    structured: bool = False


class ThreadboardConfig(BaseModel):
    """Top-level configuration for threadboard."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    listing: ListingConfig = Field(default_factory=ListingConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
