"""Client view assembly: map metadata, ordered nodes, and expiry."""

from __future__ import annotations

import logging

from mapkeeper.contracts.map import ClientMap
from mapkeeper.engine.expiry import resolve_deleted_at
from mapkeeper.store.database import Database
from mapkeeper.store.mapper import map_record_to_client
from mapkeeper.store.maps import MapStore
from mapkeeper.store.nodes import NodeStore

logger = logging.getLogger(__name__)


class ClientViewExporter:
    def __init__(self, database: Database, maps: MapStore, nodes: NodeStore, *, delete_after_days: int) -> None:
        self._db = database
        self._maps = maps
        self._nodes = nodes
        self._delete_after_days = delete_after_days

    async def export_map_to_client(self, map_id: str) -> ClientMap | None:
        """Return the client view of a map, or ``None`` when the map does not exist."""
        async with self._db.session() as session:
            map_record = await self._maps.find(map_id, session=session)
            if map_record is None:
                logger.debug("Export skipped, map %s not found", map_id)
                return None
            nodes = await self._nodes.find_all(map_id, session=session)
            newest = await self._nodes.newest_modification(map_id, session=session)

        deleted_at = resolve_deleted_at(map_record.last_modified, newest, self._delete_after_days)
        return map_record_to_client(map_record, nodes, deleted_at, self._delete_after_days)
