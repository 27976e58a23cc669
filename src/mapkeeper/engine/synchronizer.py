"""Full-tree replace of a map's node set."""

from __future__ import annotations

import asyncio
import logging
import weakref
from collections.abc import Sequence

from mapkeeper.contracts.map import ClientNode, MapSnapshot
from mapkeeper.engine.tree import order_replace_batch
from mapkeeper.store.database import Database
from mapkeeper.store.maps import MapStore
from mapkeeper.store.nodes import NodeStore

logger = logging.getLogger(__name__)


class MapSynchronizer:
    """Replaces a map's nodes with a client-submitted tree (last write wins).

    The delete and the parent-first reinsert run in one transaction, so a
    failure part-way leaves the previous tree in place. Replaces of the same
    map are serialized in-process; the map row is also locked for update on
    backends that support it.
    """

    def __init__(self, database: Database, maps: MapStore, nodes: NodeStore) -> None:
        self._db = database
        self._maps = maps
        self._nodes = nodes
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def _lock_for(self, map_id: str) -> asyncio.Lock:
        lock = self._locks.get(map_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[map_id] = lock
        return lock

    async def replace(self, map_id: str, nodes: Sequence[ClientNode]) -> MapSnapshot | None:
        """Discard the map's nodes and insert *nodes*; ``None`` if the map does not exist.

        Raises:
            TreeValidationError: The batch is not a single-rooted tree.
            StorageError: The store failed; the transaction was rolled back.
        """
        ordered = order_replace_batch(list(nodes))

        lock = self._lock_for(map_id)
        async with lock:
            async with self._db.session() as session:
                if await self._maps.find(map_id, session=session, for_update=True) is None:
                    logger.debug("Replace skipped, map %s not found", map_id)
                    return None
                removed = await self._nodes.delete_all(map_id, session=session)
                await self._nodes.insert_ordered(map_id, ordered, session=session)
            logger.info("Replaced nodes of map %s (%d removed, %d inserted)", map_id, removed, len(ordered))
            return await self.snapshot(map_id)

    async def snapshot(self, map_id: str) -> MapSnapshot | None:
        async with self._db.session() as session:
            map_record = await self._maps.find(map_id, session=session)
            if map_record is None:
                return None
            return MapSnapshot(map=map_record, nodes=await self._nodes.find_all(map_id, session=session))
