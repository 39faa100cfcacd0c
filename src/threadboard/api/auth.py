"""Signup, login and bearer-token identity for the threadboard API."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from threadboard.forum.users import UserService

router = APIRouter(prefix="/api/auth", tags=["auth"])

# --- JWT ---


def create_token(user_id: str, secret: str, expiry_hours: int = 24) -> str:
    """Create a JWT token."""
    payload = {
        "sub": user_id,
        "exp": datetime.now(UTC) + timedelta(hours=expiry_hours),
        "iat": datetime.now(UTC),
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def decode_token(token: str, secret: str) -> dict[str, Any]:
    """Decode and validate a JWT token."""
    try:
        return jwt.decode(token, secret, algorithms=["HS256"])
    except jwt.ExpiredSignatureError as err:
        raise HTTPException(status_code=401, detail="Token expired") from err
    except jwt.InvalidTokenError as err:
        raise HTTPException(status_code=401, detail="Invalid token") from err


def _secret(request: Request) -> str:
    secret = request.app.state.config.auth.jwt_secret
    if not secret:
        raise HTTPException(status_code=500, detail="JWT secret not configured")
    return secret


# --- Request models ---


class CredentialsRequest(BaseModel):
    username: str = Field(min_length=3, max_length=31, pattern=r"^[a-zA-Z0-9_]+$")
    password: str = Field(min_length=3, max_length=255)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    username: str


class UserResponse(BaseModel):
    id: str
    username: str


# --- Dependencies ---


async def get_viewer_id(request: Request) -> str | None:
    """FastAPI dependency: the viewer's user id, or None for anonymous reads."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None
    if not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid Authorization header")

    token = auth_header.split(" ", 1)[1]
    payload = decode_token(token, _secret(request))
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")
    return user_id


async def require_user_id(
    viewer_id: str | None = Depends(get_viewer_id),  # noqa: B008
) -> str:
    """FastAPI dependency: the caller's user id; 401 when anonymous."""
    if viewer_id is None:
        raise HTTPException(
            status_code=401, detail="Missing or invalid Authorization header"
        )
    return viewer_id


# --- Endpoints ---


@router.post("/signup", response_model=TokenResponse, status_code=201)
async def signup(body: CredentialsRequest, request: Request) -> TokenResponse:
    """Register a new user and return a token for it."""
    config = request.app.state.config
    if not config.auth.registration_enabled:
        raise HTTPException(status_code=403, detail="Registration is disabled")
    secret = _secret(request)

    async with request.app.state.db_factory() as session:
        user = await UserService(session).create_user(body.username, body.password)

    token = create_token(user.id, secret, config.auth.token_expiry_hours)
    return TokenResponse(access_token=token, user_id=user.id, username=user.username)


@router.post("/login", response_model=TokenResponse)
async def login(body: CredentialsRequest, request: Request) -> TokenResponse:
    """Authenticate and get token."""
    config = request.app.state.config
    secret = _secret(request)

    async with request.app.state.db_factory() as session:
        user = await UserService(session).authenticate(body.username, body.password)

    if user is None:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_token(user.id, secret, config.auth.token_expiry_hours)
    return TokenResponse(access_token=token, user_id=user.id, username=user.username)


@router.get("/user", response_model=UserResponse)
async def current_user(
    request: Request,
    user_id: str = Depends(require_user_id),  # noqa: B008
) -> UserResponse:
    """Get the authenticated user."""
    async with request.app.state.db_factory() as session:
        user = await UserService(session).get_user(user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    return UserResponse(id=user.id, username=user.username)
