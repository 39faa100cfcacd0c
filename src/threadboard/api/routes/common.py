"""Response models and listing parameters shared by the post and comment routes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from fastapi import Query, Request
from pydantic import BaseModel, ConfigDict, Field, model_validator

from threadboard.forum.listing import ListingService
from threadboard.forum.users import UserService
from threadboard.forum.views import Order, Page, SortBy

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class AuthorOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str | None = None


class PostOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    url: str | None = None
    content: str | None = None
    points: int
    comment_count: int
    created_at: datetime
    author: AuthorOut
    is_upvoted: bool = False


class CommentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    post_id: str
    parent_comment_id: str | None = None
    content: str
    points: int
    comment_count: int
    depth: int
    created_at: datetime
    author: AuthorOut
    is_upvoted: bool = False
    children: list[CommentOut] = Field(default_factory=list)


CommentOut.model_rebuild()


class Pagination(BaseModel):
    page: int
    total_pages: int


class VoteOut(BaseModel):
    points: int
    is_upvoted: bool


# -- Request bodies -------------------------------------------------------------


class CreatePostRequest(BaseModel):
    title: str = Field(min_length=3, max_length=300)
    url: str | None = None
    content: str | None = None

    @model_validator(mode="after")
    def _url_or_content(self) -> CreatePostRequest:
        if not (self.url or "").strip() and not (self.content or "").strip():
            msg = "Either url or content must be provided"
            raise ValueError(msg)
        return self


class CreateCommentRequest(BaseModel):
    content: str = Field(min_length=3, max_length=10_000)


# -- Listing parameters ---------------------------------------------------------


@dataclass(slots=True)
class ListingParams:
    page: int
    limit: int
    sort_by: SortBy
    order: Order


def listing_params(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    sort_by: SortBy = Query(SortBy.POINTS),  # noqa: B008
    order: Order = Query(Order.DESC),  # noqa: B008
) -> ListingParams:
    """FastAPI dependency: page/limit/sort with config defaults and a limit cap."""
    listing = request.app.state.config.listing
    effective = min(limit or listing.default_limit, listing.max_limit)
    return ListingParams(page=page, limit=effective, sort_by=sort_by, order=order)


def listing_service(request: Request, session: AsyncSession) -> ListingService:
    preview = request.app.state.config.listing.child_preview_limit
    return ListingService(session, child_preview_limit=preview)


def pagination(result: Page[Any]) -> Pagination:
    return Pagination(page=result.page, total_pages=result.total_pages)


async def author_name(session: AsyncSession, user_id: str) -> str | None:
    """Username to echo back on freshly created content."""
    user = await UserService(session).get_user(user_id)
    return user.username if user is not None else None
