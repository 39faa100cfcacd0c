"""Discussion engine: posts, comments, votes and listings."""

from threadboard.forum.comments import CommentService
from threadboard.forum.consistency import CounterDrift, check_consistency
from threadboard.forum.listing import ListingService
from threadboard.forum.posts import PostService
from threadboard.forum.users import UserService
from threadboard.forum.views import (
    AuthorView,
    CommentView,
    Order,
    Page,
    PostView,
    SortBy,
    VoteResult,
)
from threadboard.forum.votes import VoteService

__all__ = [
    "AuthorView",
    "CommentService",
    "CommentView",
    "CounterDrift",
    "ListingService",
    "Order",
    "Page",
    "PostService",
    "PostView",
    "SortBy",
    "UserService",
    "VoteResult",
    "VoteService",
    "check_consistency",
]
