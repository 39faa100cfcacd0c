"""Initial schema: users, posts, comments, upvotes.

Revision ID: 001
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: tuple[str, ...] | None = None
depends_on: str | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("password_hash", sa.String(128), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "posts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("url", sa.Text(), nullable=True),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("comment_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_posts_user_id", "posts", ["user_id"])
    op.create_index("ix_posts_created_at", "posts", ["created_at"])
    op.create_index("ix_posts_points", "posts", ["points"])

    op.create_table(
        "comments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column(
            "post_id", sa.String(36), sa.ForeignKey("posts.id"), nullable=False
        ),
        sa.Column(
            "parent_comment_id",
            sa.String(36),
            sa.ForeignKey("comments.id"),
            nullable=True,
        ),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("comment_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("depth", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_comments_user_id", "comments", ["user_id"])
    op.create_index(
        "ix_comments_post_parent", "comments", ["post_id", "parent_comment_id"]
    )
    op.create_index(
        "ix_comments_parent_comment_id", "comments", ["parent_comment_id"]
    )

    op.create_table(
        "post_upvotes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "post_id", sa.String(36), sa.ForeignKey("posts.id"), nullable=False
        ),
        sa.Column(
            "user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_post_upvotes_user_id", "post_upvotes", ["user_id"])
    op.create_index(
        "ix_post_upvotes_post_user",
        "post_upvotes",
        ["post_id", "user_id"],
        unique=True,
    )

    op.create_table(
        "comment_upvotes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "comment_id",
            sa.String(36),
            sa.ForeignKey("comments.id"),
            nullable=False,
        ),
        sa.Column(
            "user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_comment_upvotes_user_id", "comment_upvotes", ["user_id"])
    op.create_index(
        "ix_comment_upvotes_comment_user",
        "comment_upvotes",
        ["comment_id", "user_id"],
        unique=True,
    )


def downgrade() -> None:
    op.drop_table("comment_upvotes")
    op.drop_table("post_upvotes")
    op.drop_table("comments")
    op.drop_table("posts")
    op.drop_table("users")
