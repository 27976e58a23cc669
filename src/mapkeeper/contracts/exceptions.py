"""Exception hierarchy for mapkeeper.

All mapkeeper exceptions inherit from :class:`MapKeeperError`. Absent maps
and nodes are not exceptions inside the core: stores return ``None`` or a
``NOT_FOUND`` outcome and the boundary decides how to report it.
"""

from __future__ import annotations


class MapKeeperError(Exception):
    """Base exception for all mapkeeper errors."""


class ConfigError(MapKeeperError):
    """Configuration loading or validation failure."""


class StorageError(MapKeeperError):
    """The relational store failed (connectivity, constraint, timeout).

    Raised unmodified to the caller and never retried internally.
    """


class TreeValidationError(MapKeeperError):
    """A submitted node batch does not form a valid map tree.

    Attributes:
        errors: Individual validation error messages.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        joined = "\n".join(f"  - {e}" for e in errors)
        super().__init__(f"Node batch validation failed:\n{joined}")


class MapNotFoundError(MapKeeperError):
    """Raised at the CLI boundary when a map id does not resolve."""

    def __init__(self, map_id: str) -> None:
        super().__init__(f"map not found: {map_id}")
        self.map_id = map_id


class MapAccessDeniedError(MapKeeperError):
    """Raised at the CLI boundary when an admin secret does not match."""

    def __init__(self, map_id: str) -> None:
        super().__init__(f"admin id does not match map: {map_id}")
        self.map_id = map_id
