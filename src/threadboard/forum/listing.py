"""Paginated post and comment listings.

Every listing shares one contract: ``offset = (page - 1) * limit``,
``total_pages = ceil(matching / limit)``, sort by points or creation time
with the row id as a tie-break in the same direction. Items are annotated
with the viewer's own upvote through a left join restricted to that
viewer; anonymous viewers see ``is_upvoted=False`` everywhere.

Comment trees are never loaded recursively. A top-level listing can carry
a small preview of each comment's direct children; anything deeper is
paged by the caller through :meth:`ListingService.list_child_comments`.

Reads run outside an explicit transaction and may observe counters that
trail a concurrent write. Loaded rows always replace copies already held
in the session's identity map.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, func, literal, select

from threadboard.core.errors import NotFoundError
from threadboard.forum.validation import require_page
from threadboard.forum.views import CommentView, Order, Page, PostView, SortBy
from threadboard.store.models import Comment, CommentUpvote, Post, PostUpvote, User

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, Select
    from sqlalchemy.ext.asyncio import AsyncSession

DEFAULT_CHILD_PREVIEW = 2


def _order_clauses(sort_col: Any, id_col: Any, order: Order) -> list[Any]:
    if order is Order.DESC:
        return [sort_col.desc(), id_col.desc()]
    return [sort_col.asc(), id_col.asc()]


def _upvote_flag(
    upvote: Any, fk_col: Any, target_id_col: Any, viewer_id: str | None
) -> tuple[Any, ColumnElement[bool] | None]:
    """Return the ``is_upvoted`` column and the join condition that feeds it."""
    if viewer_id is None:
        return literal(False).label("is_upvoted"), None
    onclause = and_(fk_col == target_id_col, upvote.user_id == viewer_id)
    return upvote.id.is_not(None).label("is_upvoted"), onclause


class ListingService:
    """Read side of the discussion store."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        child_preview_limit: int = DEFAULT_CHILD_PREVIEW,
    ) -> None:
        self._session = session
        self._child_preview_limit = child_preview_limit

    # ── Posts ────────────────────────────────────────────────────

    def _post_select(self, viewer_id: str | None) -> Select[Any]:
        flag, onclause = _upvote_flag(
            PostUpvote, PostUpvote.post_id, Post.id, viewer_id
        )
        stmt = select(Post, User.username, flag).outerjoin(
            User, User.id == Post.user_id
        )
        if onclause is not None:
            stmt = stmt.outerjoin(PostUpvote, onclause)
        return stmt.execution_options(populate_existing=True)

    async def list_posts(
        self,
        *,
        page: int = 1,
        limit: int = 10,
        sort_by: SortBy = SortBy.POINTS,
        order: Order = Order.DESC,
        author_id: str | None = None,
        url: str | None = None,
        viewer_id: str | None = None,
    ) -> Page[PostView]:
        """List posts, optionally filtered by author and exact URL."""
        require_page(page, limit)

        filters = []
        if author_id is not None:
            filters.append(Post.user_id == author_id)
        if url is not None:
            filters.append(Post.url == url)

        count_stmt = select(func.count(Post.id))
        for condition in filters:
            count_stmt = count_stmt.where(condition)
        total = (await self._session.execute(count_stmt)).scalar_one()

        sort_col = Post.points if sort_by is SortBy.POINTS else Post.created_at
        stmt = self._post_select(viewer_id)
        for condition in filters:
            stmt = stmt.where(condition)
        stmt = (
            stmt.order_by(*_order_clauses(sort_col, Post.id, order))
            .limit(limit)
            .offset((page - 1) * limit)
        )
        rows = (await self._session.execute(stmt)).all()
        items = [PostView.from_row(post, name, flag) for post, name, flag in rows]
        return Page(items=items, page=page, limit=limit, total_count=total)

    async def get_post(
        self, post_id: str, *, viewer_id: str | None = None
    ) -> PostView:
        """Load a single post. Raises NotFoundError if it does not exist."""
        stmt = self._post_select(viewer_id).where(Post.id == post_id)
        row = (await self._session.execute(stmt)).one_or_none()
        if row is None:
            raise NotFoundError("Post", post_id)
        post, name, flag = row
        return PostView.from_row(post, name, flag)

    # ── Comments ─────────────────────────────────────────────────

    def _comment_select(self, viewer_id: str | None) -> Select[Any]:
        flag, onclause = _upvote_flag(
            CommentUpvote, CommentUpvote.comment_id, Comment.id, viewer_id
        )
        stmt = select(Comment, User.username, flag).outerjoin(
            User, User.id == Comment.user_id
        )
        if onclause is not None:
            stmt = stmt.outerjoin(CommentUpvote, onclause)
        return stmt.execution_options(populate_existing=True)

    async def _exists(self, model: Any, entity_id: str) -> bool:
        stmt = select(model.id).where(model.id == entity_id)
        return (await self._session.execute(stmt)).scalar_one_or_none() is not None

    async def _page_comments(
        self,
        where: ColumnElement[bool],
        *,
        page: int,
        limit: int,
        sort_by: SortBy,
        order: Order,
        viewer_id: str | None,
    ) -> Page[CommentView]:
        count_stmt = select(func.count(Comment.id)).where(where)
        total = (await self._session.execute(count_stmt)).scalar_one()

        sort_col = Comment.points if sort_by is SortBy.POINTS else Comment.created_at
        stmt = (
            self._comment_select(viewer_id)
            .where(where)
            .order_by(*_order_clauses(sort_col, Comment.id, order))
            .limit(limit)
            .offset((page - 1) * limit)
        )
        rows = (await self._session.execute(stmt)).all()
        items = [CommentView.from_row(c, name, flag) for c, name, flag in rows]
        return Page(items=items, page=page, limit=limit, total_count=total)

    async def _attach_children(
        self,
        parents: list[CommentView],
        *,
        sort_by: SortBy,
        order: Order,
        viewer_id: str | None,
    ) -> None:
        """Load up to ``child_preview_limit`` children per parent in one query."""
        if not parents or self._child_preview_limit <= 0:
            return

        sort_col = Comment.points if sort_by is SortBy.POINTS else Comment.created_at
        rank = (
            func.row_number()
            .over(
                partition_by=Comment.parent_comment_id,
                order_by=_order_clauses(sort_col, Comment.id, order),
            )
            .label("rank")
        )
        ranked = (
            select(Comment.id.label("id"), rank)
            .where(Comment.parent_comment_id.in_([p.id for p in parents]))
            .subquery()
        )
        stmt = (
            self._comment_select(viewer_id)
            .join(ranked, ranked.c.id == Comment.id)
            .where(ranked.c.rank <= self._child_preview_limit)
            .order_by(Comment.parent_comment_id, ranked.c.rank)
        )
        rows = (await self._session.execute(stmt)).all()

        by_parent: dict[str, list[CommentView]] = defaultdict(list)
        for comment, name, flag in rows:
            by_parent[comment.parent_comment_id].append(
                CommentView.from_row(comment, name, flag)
            )
        for parent in parents:
            parent.children = by_parent.get(parent.id, [])

    async def list_comments(
        self,
        post_id: str,
        *,
        page: int = 1,
        limit: int = 10,
        sort_by: SortBy = SortBy.POINTS,
        order: Order = Order.DESC,
        include_children: bool = False,
        viewer_id: str | None = None,
    ) -> Page[CommentView]:
        """List the top-level comments of a post.

        With ``include_children`` each comment carries a preview of its
        first direct replies, ordered by the same sort as the parents.

        Raises NotFoundError if the post does not exist.
        """
        require_page(page, limit)
        if not await self._exists(Post, post_id):
            raise NotFoundError("Post", post_id)

        result = await self._page_comments(
            and_(Comment.post_id == post_id, Comment.parent_comment_id.is_(None)),
            page=page,
            limit=limit,
            sort_by=sort_by,
            order=order,
            viewer_id=viewer_id,
        )
        if include_children:
            await self._attach_children(
                result.items, sort_by=sort_by, order=order, viewer_id=viewer_id
            )
        return result

    async def list_child_comments(
        self,
        parent_comment_id: str,
        *,
        page: int = 1,
        limit: int = 10,
        sort_by: SortBy = SortBy.POINTS,
        order: Order = Order.DESC,
        viewer_id: str | None = None,
    ) -> Page[CommentView]:
        """List the direct replies of a comment.

        Raises NotFoundError if the parent comment does not exist.
        """
        require_page(page, limit)
        if not await self._exists(Comment, parent_comment_id):
            raise NotFoundError("Comment", parent_comment_id)

        return await self._page_comments(
            Comment.parent_comment_id == parent_comment_id,
            page=page,
            limit=limit,
            sort_by=sort_by,
            order=order,
            viewer_id=viewer_id,
        )
