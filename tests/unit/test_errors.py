"""Tests for the core error hierarchy."""

from threadboard.core.errors import (
    ConfigError,
    ConflictError,
    InvalidInputError,
    NotFoundError,
    StorageError,
    ThreadboardError,
)


class TestHierarchy:
    def test_all_errors_are_threadboard_errors(self):
        errors = [
            NotFoundError("Post", "p1"),
            InvalidInputError("bad"),
            ConflictError("dup"),
            StorageError("db down"),
            ConfigError("bad config"),
        ]
        for err in errors:
            assert isinstance(err, ThreadboardError)

    def test_no_shadow_builtin_memory_error(self):
        assert not isinstance(StorageError("db"), MemoryError)


class TestKinds:
    def test_domain_kinds(self):
        assert NotFoundError("Post", "p1").kind == "not_found"
        assert InvalidInputError("x").kind == "invalid_input"
        assert ConflictError("x").kind == "conflict"

    def test_infrastructure_errors_are_internal(self):
        assert StorageError("x").kind == "internal"
        assert ConfigError("x").kind == "internal"


class TestNotFoundError:
    def test_attributes_and_message(self):
        err = NotFoundError("Comment", "c-42")
        assert err.entity == "Comment"
        assert err.entity_id == "c-42"
        assert err.message == "Comment not found: c-42"
        assert str(err) == err.message
