"""Scheduled-deletion timestamps for inactive maps."""

from __future__ import annotations

from datetime import datetime, timedelta


def calculate_deleted_at(last_modified: datetime, after_days: int) -> datetime:
    """Return *last_modified* plus *after_days* calendar days.

    Adding a ``timedelta`` keeps the wall-clock time, so aware timestamps
    move by calendar days rather than fixed 24h blocks. The input is left
    untouched; a new datetime is returned.
    """
    return last_modified + timedelta(days=after_days)


def resolve_deleted_at(
    map_last_modified: datetime,
    newest_node_modified: datetime | None,
    after_days: int,
) -> datetime:
    """Expiry counts from the newest node change, or from the map itself when it has no nodes."""
    reference = newest_node_modified if newest_node_modified is not None else map_last_modified
    return calculate_deleted_at(reference, after_days)
