"""Counter verification against raw rows.

Recomputes every denormalized value from the underlying vote and comment
rows and reports each mismatch as a :class:`CounterDrift`. Used by the
test suite and the ``threadboard check`` command; nothing at runtime
depends on it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, literal, select
from sqlalchemy.orm import aliased

from threadboard.store.models import Comment, CommentUpvote, Post, PostUpvote

if TYPE_CHECKING:
    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CounterDrift:
    entity: str
    entity_id: str
    field: str
    stored: int | str
    expected: int | str

    def __str__(self) -> str:
        return (
            f"{self.entity} {self.entity_id}: {self.field}={self.stored} "
            f"(expected {self.expected})"
        )


async def _collect(
    session: AsyncSession, stmt: Select[Any], entity: str, field: str
) -> list[CounterDrift]:
    rows = (await session.execute(stmt)).all()
    return [CounterDrift(entity, row[0], field, row[1], row[2]) for row in rows]


async def check_consistency(session: AsyncSession) -> list[CounterDrift]:
    """Return every counter or tree field that disagrees with the raw rows."""
    drifts: list[CounterDrift] = []

    post_votes = (
        select(func.count(PostUpvote.id))
        .where(PostUpvote.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
    )
    drifts += await _collect(
        session,
        select(Post.id, Post.points, post_votes).where(Post.points != post_votes),
        "Post",
        "points",
    )

    post_comments = (
        select(func.count(Comment.id))
        .where(Comment.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
    )
    drifts += await _collect(
        session,
        select(Post.id, Post.comment_count, post_comments).where(
            Post.comment_count != post_comments
        ),
        "Post",
        "comment_count",
    )

    comment_votes = (
        select(func.count(CommentUpvote.id))
        .where(CommentUpvote.comment_id == Comment.id)
        .correlate(Comment)
        .scalar_subquery()
    )
    drifts += await _collect(
        session,
        select(Comment.id, Comment.points, comment_votes).where(
            Comment.points != comment_votes
        ),
        "Comment",
        "points",
    )

    child = aliased(Comment)
    direct_children = (
        select(func.count(child.id))
        .where(child.parent_comment_id == Comment.id)
        .correlate(Comment)
        .scalar_subquery()
    )
    drifts += await _collect(
        session,
        select(Comment.id, Comment.comment_count, direct_children).where(
            Comment.comment_count != direct_children
        ),
        "Comment",
        "comment_count",
    )

    parent = aliased(Comment)
    drifts += await _collect(
        session,
        select(Comment.id, Comment.depth, parent.depth + 1)
        .join(parent, parent.id == Comment.parent_comment_id)
        .where(Comment.depth != parent.depth + 1),
        "Comment",
        "depth",
    )
    drifts += await _collect(
        session,
        select(Comment.id, Comment.depth, literal(0)).where(
            Comment.parent_comment_id.is_(None), Comment.depth != 0
        ),
        "Comment",
        "depth",
    )
    drifts += await _collect(
        session,
        select(Comment.id, Comment.post_id, parent.post_id)
        .join(parent, parent.id == Comment.parent_comment_id)
        .where(Comment.post_id != parent.post_id),
        "Comment",
        "post_id",
    )

    for drift in drifts:
        logger.warning("Counter drift: %s", drift)
    return drifts
