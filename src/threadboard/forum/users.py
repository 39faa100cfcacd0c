"""User accounts: signup and credential checks."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import bcrypt
from sqlalchemy import select

from threadboard.forum.validation import require_text
from threadboard.store.database import transaction
from threadboard.store.models import User

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Verify password against hash."""
    return bcrypt.checkpw(password.encode(), password_hash.encode())


class UserService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_user(self, username: str, password: str) -> User:
        """Register a user.

        Uniqueness is left to the ``username`` index: a duplicate surfaces
        from the insert as ConflictError rather than from a pre-check.
        """
        require_text(username, "username")
        require_text(password, "password")

        user = User(username=username, password_hash=hash_password(password))
        async with transaction(self._session, conflict="Username already used"):
            self._session.add(user)
            await self._session.flush()

        logger.info("Registered user %s (%s)", username, user.id)
        return user

    async def get_user(self, user_id: str) -> User | None:
        return await self._session.get(User, user_id)

    async def authenticate(self, username: str, password: str) -> User | None:
        """Return the user if the credentials match, otherwise None."""
        stmt = select(User).where(User.username == username)
        user = (await self._session.execute(stmt)).scalar_one_or_none()
        if user is None or not verify_password(password, user.password_hash):
            return None
        return user
