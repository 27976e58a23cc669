"""SDK composition root for mapkeeper."""

from __future__ import annotations

import asyncio
import logging
import secrets
from collections.abc import Sequence
from types import TracebackType
from typing import Any

from mapkeeper.contracts.config import MapKeeperConfig
from mapkeeper.contracts.exceptions import MapNotFoundError
from mapkeeper.contracts.map import (
    ClientMap,
    ClientMapOptions,
    ClientNode,
    ClientNodeBasics,
    CreateMapRequest,
    MapRecord,
    PrivateClientMap,
)
from mapkeeper.contracts.outcome import MapDeleteOutcome, MapDeleteStatus, NodeOutcome
from mapkeeper.engine.exporter import ClientViewExporter
from mapkeeper.engine.sweeper import OutdatedMapSweeper
from mapkeeper.engine.synchronizer import MapSynchronizer
from mapkeeper.store.database import Database
from mapkeeper.store.maps import MapStore
from mapkeeper.store.nodes import NodeStore

logger = logging.getLogger(__name__)


class MapKeeper:
    """mapkeeper public API.

    Wires the stores and engine components to one database and exposes the
    map-level operations the transport layer calls.
    """

    def __init__(self, *, database: Database, config: MapKeeperConfig) -> None:
        self._db = database
        self._config = config
        self.maps = MapStore(database)
        self.nodes = NodeStore(database)
        self.synchronizer = MapSynchronizer(database, self.maps, self.nodes)
        self.sweeper = OutdatedMapSweeper(database, delete_after_days=config.delete_after_days)
        self.exporter = ClientViewExporter(
            database, self.maps, self.nodes, delete_after_days=config.delete_after_days
        )

    @classmethod
    def from_config(cls, config: MapKeeperConfig) -> MapKeeper:
        return cls(database=Database.from_config(config), config=config)

    async def __aenter__(self) -> MapKeeper:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        await self._db.close()

    async def init_schema(self) -> None:
        await self._db.create_schema()

    async def create_empty_map(self, root_node: ClientNodeBasics | None = None) -> MapRecord:
        """Create a map and its root node in one transaction."""
        async with self._db.session() as session:
            map_record = await self.maps.create(session=session)
            await self.nodes.create_root(map_record.id, root_node or ClientNodeBasics(), session=session)
        logger.info("Created map %s", map_record.id)
        return map_record

    async def create_map(self, request: CreateMapRequest | ClientNodeBasics | None = None) -> PrivateClientMap:
        """Create a map and return its client view together with both secrets."""
        root_node = request.root_node if isinstance(request, CreateMapRequest) else request
        map_record = await self.create_empty_map(root_node)
        client_map = await self.exporter.export_map_to_client(map_record.id)
        if client_map is None:  # pragma: no cover - deleted between create and export
            raise MapNotFoundError(map_record.id)
        return PrivateClientMap(
            map=client_map,
            admin_id=map_record.admin_id,
            modification_secret=map_record.modification_secret,
        )

    async def get_map(self, map_id: str) -> ClientMap | None:
        return await self.exporter.export_map_to_client(map_id)

    async def delete_map(self, map_id: str, admin_id: str) -> MapDeleteOutcome:
        """Delete the map and its nodes if *admin_id* matches the stored admin secret."""
        async with self._db.session() as session:
            map_record = await self.maps.find(map_id, session=session)
            if map_record is None:
                return MapDeleteOutcome(map_id=map_id, status=MapDeleteStatus.NOT_FOUND)
            if not secrets.compare_digest(map_record.admin_id.encode(), (admin_id or "").encode()):
                logger.warning("Refused to delete map %s: admin id mismatch", map_id)
                return MapDeleteOutcome(map_id=map_id, status=MapDeleteStatus.FORBIDDEN)
            await self.nodes.delete_all(map_id, session=session)
            await self.maps.delete(map_id, session=session)
        return MapDeleteOutcome(map_id=map_id, status=MapDeleteStatus.DELETED)

    async def add_node(self, map_id: str, node: ClientNode) -> NodeOutcome:
        return await self.nodes.add(map_id, node)

    async def update_node(self, map_id: str, node: ClientNode) -> NodeOutcome:
        return await self.nodes.update(map_id, node)

    async def remove_node(self, map_id: str, node_id: str) -> NodeOutcome:
        return await self.nodes.remove(map_id, node_id)

    async def replace_nodes(self, map_id: str, nodes: Sequence[ClientNode]) -> ClientMap | None:
        """Replace the whole node set and return the refreshed client view."""
        if await self.synchronizer.replace(map_id, nodes) is None:
            return None
        return await self.exporter.export_map_to_client(map_id)

    async def update_map_options(
        self,
        map_id: str,
        options: ClientMapOptions | dict[str, Any] | None,
    ) -> MapRecord | None:
        return await self.maps.update_options(map_id, options)

    async def sweep(self, after_days: int | None = None) -> int:
        return await self.sweeper.sweep(after_days)

    async def run_sweeper(self, *, stop: asyncio.Event | None = None, interval_seconds: float | None = None) -> int:
        interval = interval_seconds if interval_seconds is not None else self._config.sweep_interval_seconds
        return await self.sweeper.run_periodically(interval, stop=stop)
