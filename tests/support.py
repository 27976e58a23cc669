"""Helpers shared by the store, engine and SDK tests."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import update

from mapkeeper.contracts.map import ClientNode
from mapkeeper.store.database import Database
from mapkeeper.store.schema import MapRow, NodeRow


def make_node(node_id: str, parent: str | None = "root", **kwargs: Any) -> ClientNode:
    return ClientNode(id=node_id, parent=parent, name=kwargs.pop("name", node_id.upper()), **kwargs)


async def set_map_last_modified(database: Database, map_id: str, value: datetime) -> None:
    async with database.session() as session:
        await session.execute(update(MapRow).where(MapRow.id == map_id).values(last_modified=value))


async def set_nodes_last_modified(database: Database, map_id: str, value: datetime) -> None:
    async with database.session() as session:
        await session.execute(update(NodeRow).where(NodeRow.map_id == map_id).values(last_modified=value))
