"""Comment endpoints: reply, list replies, upvote."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from threadboard.api.auth import get_viewer_id, require_user_id
from threadboard.api.routes.common import (
    CommentOut,
    CreateCommentRequest,
    ListingParams,
    VoteOut,
    author_name,
    listing_params,
    listing_service,
    pagination,
)
from threadboard.api.routes.posts import (
    CommentListResponse,
    CommentResponse,
    VoteResponse,
)
from threadboard.forum.comments import CommentService
from threadboard.forum.views import CommentView
from threadboard.forum.votes import VoteService

router = APIRouter(prefix="/api/comments", tags=["comments"])


@router.post("/{comment_id}", response_model=CommentResponse, status_code=201)
async def reply(
    comment_id: str,
    body: CreateCommentRequest,
    request: Request,
    user_id: str = Depends(require_user_id),  # noqa: B008
) -> CommentResponse:
    """Reply to a comment."""
    async with request.app.state.db_factory() as session:
        comment = await CommentService(session).create_reply(
            comment_id, user_id, body.content
        )
        username = await author_name(session, user_id)
    view = CommentView.from_row(comment, username, False)
    return CommentResponse(data=CommentOut.model_validate(view))


@router.get("/{comment_id}/comments", response_model=CommentListResponse)
async def list_replies(
    comment_id: str,
    request: Request,
    params: ListingParams = Depends(listing_params),  # noqa: B008
    viewer_id: str | None = Depends(get_viewer_id),  # noqa: B008
) -> CommentListResponse:
    """Page through the direct replies of a comment."""
    async with request.app.state.db_factory() as session:
        result = await listing_service(request, session).list_child_comments(
            comment_id,
            page=params.page,
            limit=params.limit,
            sort_by=params.sort_by,
            order=params.order,
            viewer_id=viewer_id,
        )
    return CommentListResponse(
        data=[CommentOut.model_validate(c) for c in result.items],
        pagination=pagination(result),
    )


@router.patch("/{comment_id}/upvote", response_model=VoteResponse)
async def upvote_comment(
    comment_id: str,
    request: Request,
    user_id: str = Depends(require_user_id),  # noqa: B008
) -> VoteResponse:
    """Toggle the caller's upvote on a comment."""
    async with request.app.state.db_factory() as session:
        result = await VoteService(session).toggle_comment_upvote(comment_id, user_id)
    return VoteResponse(
        message="Comment updated",
        data=VoteOut(points=result.points, is_upvoted=result.is_upvoted),
    )
