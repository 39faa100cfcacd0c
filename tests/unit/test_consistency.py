"""Tests for the counter consistency checker."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import update

from threadboard.forum.comments import CommentService
from threadboard.forum.consistency import CounterDrift, check_consistency
from threadboard.forum.votes import VoteService
from threadboard.store.models import Comment, Post
from tests.fixtures.seed import seed_post, seed_user

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


async def _seed_thread(session: AsyncSession) -> tuple[str, str, str]:
    """Post with a root comment and a reply, all voted on. Returns ids."""
    user = await seed_user(session)
    post = await seed_post(session, user.id)
    comments = CommentService(session)
    votes = VoteService(session)
    root = await comments.create_root_comment(post.id, user.id, "root")
    reply = await comments.create_reply(root.id, user.id, "reply")
    await votes.toggle_post_upvote(post.id, user.id)
    await votes.toggle_comment_upvote(reply.id, user.id)
    return post.id, root.id, reply.id


class TestCheckConsistency:
    async def test_empty_store(self, db_session: AsyncSession):
        assert await check_consistency(db_session) == []

    async def test_engine_writes_stay_consistent(self, db_session: AsyncSession):
        await _seed_thread(db_session)
        assert await check_consistency(db_session) == []

    async def test_detects_post_drift(self, db_session: AsyncSession):
        post_id, _, _ = await _seed_thread(db_session)
        await db_session.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(points=7, comment_count=1)
        )
        await db_session.commit()

        drifts = await check_consistency(db_session)

        assert CounterDrift("Post", post_id, "points", 7, 1) in drifts
        assert CounterDrift("Post", post_id, "comment_count", 1, 2) in drifts

    async def test_detects_comment_drift(self, db_session: AsyncSession):
        _, root_id, reply_id = await _seed_thread(db_session)
        await db_session.execute(
            update(Comment).where(Comment.id == root_id).values(comment_count=5)
        )
        await db_session.execute(
            update(Comment).where(Comment.id == reply_id).values(depth=3, points=0)
        )
        await db_session.commit()

        drifts = await check_consistency(db_session)
        fields = {(d.entity_id, d.field) for d in drifts}

        assert fields == {
            (root_id, "comment_count"),
            (reply_id, "depth"),
            (reply_id, "points"),
        }

    def test_drift_str(self):
        drift = CounterDrift("Post", "abc", "points", 3, 2)
        assert str(drift) == "Post abc: points=3 (expected 2)"
