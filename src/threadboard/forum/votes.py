"""Upvote toggling.

A toggle either withdraws the caller's existing upvote (-1) or records a
new one (+1). The point change is applied as a relative update so
concurrent toggles on the same target never lose an increment; the unique
index on (target, user) turns a racing double-insert from the same user
into a ConflictError instead of a second vote. A voter id with no user row
is reported as a missing User.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, select, update

from threadboard.core.errors import NotFoundError
from threadboard.forum.views import VoteResult
from threadboard.store.database import transaction
from threadboard.store.models import Comment, CommentUpvote, Post, PostUpvote

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _VoteTarget:
    label: str
    model: Any
    upvote_model: Any
    fk_name: str


_POST = _VoteTarget("Post", Post, PostUpvote, "post_id")
_COMMENT = _VoteTarget("Comment", Comment, CommentUpvote, "comment_id")


class VoteService:
    """Toggles a user's upvote on posts and comments."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def toggle_post_upvote(self, post_id: str, user_id: str) -> VoteResult:
        return await self._toggle(_POST, post_id, user_id)

    async def toggle_comment_upvote(
        self, comment_id: str, user_id: str
    ) -> VoteResult:
        return await self._toggle(_COMMENT, comment_id, user_id)

    async def _toggle(
        self, target: _VoteTarget, target_id: str, user_id: str
    ) -> VoteResult:
        upvote = target.upvote_model
        fk = getattr(upvote, target.fk_name)

        async with transaction(
            self._session,
            conflict="Vote already in progress",
            missing=("User", user_id),
        ):
            existing_stmt = (
                select(upvote.id)
                .where(fk == target_id, upvote.user_id == user_id)
                .limit(1)
            )
            existing_id = (
                await self._session.execute(existing_stmt)
            ).scalar_one_or_none()
            delta = -1 if existing_id is not None else 1

            model = target.model
            points_stmt = (
                update(model)
                .where(model.id == target_id)
                .values(points=model.points + delta)
                .returning(model.points)
            )
            points = (await self._session.execute(points_stmt)).scalar_one_or_none()
            if points is None:
                raise NotFoundError(target.label, target_id)

            if existing_id is not None:
                await self._session.execute(
                    delete(upvote).where(upvote.id == existing_id)
                )
            else:
                row = upvote(**{target.fk_name: target_id, "user_id": user_id})
                self._session.add(row)
                await self._session.flush()

        is_upvoted = existing_id is None
        logger.debug(
            "%s %s upvote by %s: %s (points=%d)",
            target.label,
            target_id,
            user_id,
            "added" if is_upvoted else "withdrawn",
            points,
        )
        return VoteResult(points=points, is_upvoted=is_upvoted)
