"""Relational persistence for maps and nodes."""

from mapkeeper.store.database import Database
from mapkeeper.store.maps import MapStore
from mapkeeper.store.nodes import NodeStore
from mapkeeper.store.schema import Base, MapRow, NodeRow, utc_now

__all__ = ["Base", "Database", "MapRow", "MapStore", "NodeRow", "NodeStore", "utc_now"]
