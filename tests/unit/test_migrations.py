"""Tests for Alembic migrations."""

from __future__ import annotations

import sqlite3

import pytest
from alembic import command
from alembic.config import Config


@pytest.fixture
def alembic_config(tmp_path):
    """Create an Alembic config pointing to a temp SQLite DB."""
    db_path = tmp_path / "test.db"
    cfg = Config("alembic.ini")
    cfg.set_main_option("sqlalchemy.url", f"sqlite:///{db_path}")
    return cfg, db_path


def _tables(db_path) -> set[str]:
    conn = sqlite3.connect(str(db_path))
    try:
        cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        return {row[0] for row in cursor.fetchall()}
    finally:
        conn.close()


def _indexes(db_path, table: str) -> dict[str, bool]:
    conn = sqlite3.connect(str(db_path))
    try:
        rows = conn.execute(f"PRAGMA index_list({table})").fetchall()
        return {row[1]: bool(row[2]) for row in rows}
    finally:
        conn.close()


class TestMigrations:
    def test_upgrade_to_001(self, alembic_config) -> None:
        cfg, db_path = alembic_config
        command.upgrade(cfg, "001")

        assert {
            "users",
            "posts",
            "comments",
            "post_upvotes",
            "comment_upvotes",
        } <= _tables(db_path)

    def test_upvote_pairs_are_unique(self, alembic_config) -> None:
        cfg, db_path = alembic_config
        command.upgrade(cfg, "head")

        assert _indexes(db_path, "post_upvotes")["ix_post_upvotes_post_user"]
        assert _indexes(db_path, "comment_upvotes")[
            "ix_comment_upvotes_comment_user"
        ]
        assert _indexes(db_path, "users")["ix_users_username"]

    def test_full_downgrade(self, alembic_config) -> None:
        cfg, db_path = alembic_config
        command.upgrade(cfg, "head")
        command.downgrade(cfg, "base")

        assert _tables(db_path) == {"alembic_version"}
