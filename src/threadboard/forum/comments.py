"""Comment insertion with counter propagation.

A new comment moves exactly two kinds of counters: the owning post's
``comment_count`` (every comment, at any depth) and, for replies, the
immediate parent's ``comment_count``. Deeper ancestors are never touched.

Existence of the post / parent is established by the counter update
itself (``UPDATE ... RETURNING``): zero returned rows means the target is
missing and the transaction is rolled back.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import update

from threadboard.core.errors import NotFoundError
from threadboard.forum.validation import require_text
from threadboard.store.database import transaction
from threadboard.store.models import Comment, Post

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


class CommentService:
    """Creates top-level comments and replies."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _bump_post(self, post_id: str) -> None:
        stmt = (
            update(Post)
            .where(Post.id == post_id)
            .values(comment_count=Post.comment_count + 1)
            .returning(Post.comment_count)
        )
        result = await self._session.execute(stmt)
        if result.scalar_one_or_none() is None:
            raise NotFoundError("Post", post_id)

    async def create_root_comment(
        self, post_id: str, author_id: str, content: str
    ) -> Comment:
        """Comment directly on a post (depth 0).

        Raises NotFoundError if the post or the author does not exist and
        InvalidInputError if the content is blank.
        """
        require_text(content, "content")

        async with transaction(self._session, missing=("User", author_id)):
            await self._bump_post(post_id)
            comment = Comment(
                user_id=author_id,
                post_id=post_id,
                parent_comment_id=None,
                content=content,
                depth=0,
            )
            self._session.add(comment)
            await self._session.flush()

        logger.debug("Created comment %s on post %s", comment.id, post_id)
        return comment

    async def create_reply(
        self, parent_comment_id: str, author_id: str, content: str
    ) -> Comment:
        """Reply to an existing comment.

        The reply inherits the parent's post and sits one level deeper.
        Raises NotFoundError if the parent comment, or the post it belongs
        to, does not exist.
        """
        require_text(content, "content")

        async with transaction(self._session, missing=("User", author_id)):
            stmt = (
                update(Comment)
                .where(Comment.id == parent_comment_id)
                .values(comment_count=Comment.comment_count + 1)
                .returning(Comment.post_id, Comment.depth)
            )
            parent = (await self._session.execute(stmt)).one_or_none()
            if parent is None:
                raise NotFoundError("Parent comment", parent_comment_id)

            await self._bump_post(parent.post_id)

            comment = Comment(
                user_id=author_id,
                post_id=parent.post_id,
                parent_comment_id=parent_comment_id,
                content=content,
                depth=parent.depth + 1,
            )
            self._session.add(comment)
            await self._session.flush()

        logger.debug(
            "Created reply %s under %s (depth %d)",
            comment.id,
            parent_comment_id,
            comment.depth,
        )
        return comment
