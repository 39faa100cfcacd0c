"""Read models returned by the query and vote engines."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from datetime import datetime

    from threadboard.store.models import Comment, Post

T = TypeVar("T")


class SortBy(str, enum.Enum):
    """Listing sort key."""

    POINTS = "points"
    RECENT = "recent"


class Order(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True, slots=True)
class VoteResult:
    """Outcome of a toggle: the committed point total and the caller's vote state."""

    points: int
    is_upvoted: bool


@dataclass(frozen=True, slots=True)
class AuthorView:
    id: str
    username: str | None


@dataclass(slots=True)
class PostView:
    """A post annotated for one viewer."""

    id: str
    title: str
    url: str | None
    content: str | None
    points: int
    comment_count: int
    created_at: datetime
    author: AuthorView
    is_upvoted: bool = False

    @classmethod
    def from_row(
        cls, post: Post, username: str | None, is_upvoted: bool
    ) -> PostView:
        return cls(
            id=post.id,
            title=post.title,
            url=post.url,
            content=post.content,
            points=post.points,
            comment_count=post.comment_count,
            created_at=post.created_at,
            author=AuthorView(id=post.user_id, username=username),
            is_upvoted=bool(is_upvoted),
        )


@dataclass(slots=True)
class CommentView:
    """A comment annotated for one viewer, with an optional child preview."""

    id: str
    post_id: str
    parent_comment_id: str | None
    content: str
    points: int
    comment_count: int
    depth: int
    created_at: datetime
    author: AuthorView
    is_upvoted: bool = False
    children: list[CommentView] = field(default_factory=list)

    @classmethod
    def from_row(
        cls, comment: Comment, username: str | None, is_upvoted: bool
    ) -> CommentView:
        return cls(
            id=comment.id,
            post_id=comment.post_id,
            parent_comment_id=comment.parent_comment_id,
            content=comment.content,
            points=comment.points,
            comment_count=comment.comment_count,
            depth=comment.depth,
            created_at=comment.created_at,
            author=AuthorView(id=comment.user_id, username=username),
            is_upvoted=bool(is_upvoted),
        )


@dataclass(slots=True)
class Page(Generic[T]):
    """One page of a listing plus the page count for the whole result set."""

    items: list[T]
    page: int
    limit: int
    total_count: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.limit)
