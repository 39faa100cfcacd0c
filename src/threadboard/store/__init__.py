"""Relational entity store."""

from threadboard.store.database import create_db, create_tables, transaction
from threadboard.store.models import (
    Base,
    Comment,
    CommentUpvote,
    Post,
    PostUpvote,
    User,
)

__all__ = [
    "Base",
    "Comment",
    "CommentUpvote",
    "Post",
    "PostUpvote",
    "User",
    "create_db",
    "create_tables",
    "transaction",
]
