"""Tests for the mapkeeper exception hierarchy."""

from __future__ import annotations

from mapkeeper.contracts.exceptions import (
    ConfigError,
    MapAccessDeniedError,
    MapKeeperError,
    MapNotFoundError,
    StorageError,
    TreeValidationError,
)


class TestExceptionHierarchy:
    def test_all_exceptions_inherit_from_map_keeper_error(self) -> None:
        for exc_type in (ConfigError, StorageError, TreeValidationError, MapNotFoundError, MapAccessDeniedError):
            assert issubclass(exc_type, MapKeeperError)

    def test_tree_validation_error_keeps_and_formats_errors(self) -> None:
        errors = ["duplicate node ids ['a']", "node b parent 'x' not found in batch"]
        exc = TreeValidationError(errors)

        assert exc.errors == errors
        message = str(exc)
        assert "Node batch validation failed" in message
        for error in errors:
            assert error in message

    def test_boundary_errors_name_the_map(self) -> None:
        assert MapNotFoundError("m-1").map_id == "m-1"
        assert "m-1" in str(MapNotFoundError("m-1"))
        assert "m-2" in str(MapAccessDeniedError("m-2"))
