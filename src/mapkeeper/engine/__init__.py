"""Map lifecycle engine: replace, expiry, sweep, and client export."""

from mapkeeper.engine.expiry import calculate_deleted_at, resolve_deleted_at
from mapkeeper.engine.exporter import ClientViewExporter
from mapkeeper.engine.sweeper import OutdatedMapSweeper, outdated_map_ids_query
from mapkeeper.engine.synchronizer import MapSynchronizer
from mapkeeper.engine.tree import order_replace_batch, validate_replace_batch

__all__ = [
    "ClientViewExporter",
    "MapSynchronizer",
    "OutdatedMapSweeper",
    "calculate_deleted_at",
    "order_replace_batch",
    "outdated_map_ids_query",
    "resolve_deleted_at",
    "validate_replace_batch",
]
