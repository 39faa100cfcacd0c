"""Post endpoints: create, list, show, comment, upvote."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from threadboard.api.auth import get_viewer_id, require_user_id
from threadboard.api.routes.common import (
    CommentOut,
    CreateCommentRequest,
    CreatePostRequest,
    ListingParams,
    Pagination,
    PostOut,
    VoteOut,
    author_name,
    listing_params,
    listing_service,
    pagination,
)
from threadboard.forum.comments import CommentService
from threadboard.forum.posts import PostService
from threadboard.forum.views import CommentView
from threadboard.forum.votes import VoteService

router = APIRouter(prefix="/api/posts", tags=["posts"])


class PostCreated(BaseModel):
    post_id: str


class PostCreatedResponse(BaseModel):
    success: bool = True
    message: str = "Post created"
    data: PostCreated


class PostResponse(BaseModel):
    success: bool = True
    message: str = "Post fetched"
    data: PostOut


class PostListResponse(BaseModel):
    success: bool = True
    message: str = "Posts fetched"
    data: list[PostOut]
    pagination: Pagination


class CommentResponse(BaseModel):
    success: bool = True
    message: str = "Comment created"
    data: CommentOut


class CommentListResponse(BaseModel):
    success: bool = True
    message: str = "Comments fetched"
    data: list[CommentOut]
    pagination: Pagination


class VoteResponse(BaseModel):
    success: bool = True
    message: str = "Post updated"
    data: VoteOut


# -- POST /api/posts -----------------------------------------------------------


@router.post("", response_model=PostCreatedResponse, status_code=201)
async def create_post(
    body: CreatePostRequest,
    request: Request,
    user_id: str = Depends(require_user_id),  # noqa: B008
) -> PostCreatedResponse:
    async with request.app.state.db_factory() as session:
        post = await PostService(session).create_post(
            user_id, body.title, url=body.url, content=body.content
        )
    return PostCreatedResponse(data=PostCreated(post_id=post.id))


# -- GET /api/posts ------------------------------------------------------------


@router.get("", response_model=PostListResponse)
async def list_posts(
    request: Request,
    author: str | None = None,
    site: str | None = None,
    params: ListingParams = Depends(listing_params),  # noqa: B008
    viewer_id: str | None = Depends(get_viewer_id),  # noqa: B008
) -> PostListResponse:
    """List posts, optionally filtered by author id or exact URL."""
    async with request.app.state.db_factory() as session:
        result = await listing_service(request, session).list_posts(
            page=params.page,
            limit=params.limit,
            sort_by=params.sort_by,
            order=params.order,
            author_id=author,
            url=site,
            viewer_id=viewer_id,
        )
    return PostListResponse(
        data=[PostOut.model_validate(p) for p in result.items],
        pagination=pagination(result),
    )


# -- GET /api/posts/{post_id} --------------------------------------------------


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: str,
    request: Request,
    viewer_id: str | None = Depends(get_viewer_id),  # noqa: B008
) -> PostResponse:
    async with request.app.state.db_factory() as session:
        view = await listing_service(request, session).get_post(
            post_id, viewer_id=viewer_id
        )
    return PostResponse(data=PostOut.model_validate(view))


# -- POST /api/posts/{post_id}/comment -----------------------------------------


@router.post("/{post_id}/comment", response_model=CommentResponse, status_code=201)
async def create_comment(
    post_id: str,
    body: CreateCommentRequest,
    request: Request,
    user_id: str = Depends(require_user_id),  # noqa: B008
) -> CommentResponse:
    """Comment directly on a post."""
    async with request.app.state.db_factory() as session:
        comment = await CommentService(session).create_root_comment(
            post_id, user_id, body.content
        )
        username = await author_name(session, user_id)
    view = CommentView.from_row(comment, username, False)
    return CommentResponse(data=CommentOut.model_validate(view))


# -- GET /api/posts/{post_id}/comments -----------------------------------------


@router.get("/{post_id}/comments", response_model=CommentListResponse)
async def list_comments(
    post_id: str,
    request: Request,
    include_children: bool = False,
    params: ListingParams = Depends(listing_params),  # noqa: B008
    viewer_id: str | None = Depends(get_viewer_id),  # noqa: B008
) -> CommentListResponse:
    """Top-level comments of a post, with an optional preview of replies."""
    async with request.app.state.db_factory() as session:
        result = await listing_service(request, session).list_comments(
            post_id,
            page=params.page,
            limit=params.limit,
            sort_by=params.sort_by,
            order=params.order,
            include_children=include_children,
            viewer_id=viewer_id,
        )
    return CommentListResponse(
        data=[CommentOut.model_validate(c) for c in result.items],
        pagination=pagination(result),
    )


# -- PATCH /api/posts/{post_id}/upvote -----------------------------------------


@router.patch("/{post_id}/upvote", response_model=VoteResponse)
async def upvote_post(
    post_id: str,
    request: Request,
    user_id: str = Depends(require_user_id),  # noqa: B008
) -> VoteResponse:
    """Toggle the caller's upvote on a post."""
    async with request.app.state.db_factory() as session:
        result = await VoteService(session).toggle_post_upvote(post_id, user_id)
    return VoteResponse(
        data=VoteOut(points=result.points, is_upvoted=result.is_upvoted)
    )
