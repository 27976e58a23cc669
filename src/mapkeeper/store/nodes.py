"""Node record persistence."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mapkeeper.contracts.map import ClientNode, ClientNodeBasics, NodeRecord
from mapkeeper.contracts.outcome import NodeOutcome, NodeStatus, not_found, rejected
from mapkeeper.store.database import Database
from mapkeeper.store.mapper import client_basics_to_root_columns, client_node_to_columns
from mapkeeper.store.schema import NodeRow, utc_now

logger = logging.getLogger(__name__)


def _detached_with_parent(node: ClientNode) -> bool:
    return node.detached and bool(node.parent)


class NodeStore:
    """Per-map node persistence keyed by ``(map_id, node_id)``.

    Rule violations come back as ``REJECTED`` outcomes and absent nodes as
    ``NOT_FOUND``; only storage failures raise.
    """

    def __init__(self, database: Database) -> None:
        self._db = database

    async def find_all(self, map_id: str, *, session: AsyncSession | None = None) -> list[NodeRecord]:
        query = (
            select(NodeRow)
            .where(NodeRow.map_id == map_id)
            .order_by(NodeRow.order_number.asc(), NodeRow.id.asc())
        )
        async with self._db.session(session) as s:
            rows = (await s.execute(query)).scalars().all()
            return [NodeRecord.model_validate(row) for row in rows]

    async def find_one(self, map_id: str, node_id: str, *, session: AsyncSession | None = None) -> NodeRecord | None:
        async with self._db.session(session) as s:
            row = await self._get_row(s, map_id, node_id)
            return NodeRecord.model_validate(row) if row is not None else None

    async def add(self, map_id: str, node: ClientNode, *, session: AsyncSession | None = None) -> NodeOutcome:
        """Create *node* unless a node with its id already exists in the map."""
        if _detached_with_parent(node):
            logger.warning("Rejected node %s in map %s: detached node with parent", node.id, map_id)
            return rejected("detached nodes cannot have a parent")

        async with self._db.session(session) as s:
            existing = await self._get_row(s, map_id, node.id)
            if existing is not None:
                logger.debug("Node %s already exists in map %s", node.id, map_id)
                return NodeOutcome(status=NodeStatus.EXISTING, node=NodeRecord.model_validate(existing))

            if not node.parent and not node.detached and await self._has_root(s, map_id):
                logger.warning("Rejected node %s in map %s: second root", node.id, map_id)
                return rejected("map already has a root node")

            row = NodeRow(
                **client_node_to_columns(node, map_id),
                order_number=await self._next_order_number(s, map_id),
                last_modified=utc_now(),
            )
            s.add(row)
            await s.flush()
            return NodeOutcome(status=NodeStatus.CREATED, node=NodeRecord.model_validate(row))

    async def create_root(
        self,
        map_id: str,
        basics: ClientNodeBasics,
        *,
        session: AsyncSession | None = None,
    ) -> NodeRecord:
        async with self._db.session(session) as s:
            row = NodeRow(**client_basics_to_root_columns(basics, map_id), order_number=0, last_modified=utc_now())
            s.add(row)
            await s.flush()
            return NodeRecord.model_validate(row)

    async def update(self, map_id: str, node: ClientNode, *, session: AsyncSession | None = None) -> NodeOutcome:
        """Merge *node* into the stored record, keeping its sibling order number."""
        async with self._db.session(session) as s:
            row = await self._get_row(s, map_id, node.id)
            if row is None:
                return not_found(map_id, node.id)

            reason = await self._update_violation(s, row, node)
            if reason is not None:
                logger.warning("Rejected update of node %s in map %s: %s", node.id, map_id, reason)
                return rejected(reason)

            for column, value in client_node_to_columns(node, map_id).items():
                setattr(row, column, value)
            row.last_modified = utc_now()
            await s.flush()
            return NodeOutcome(status=NodeStatus.UPDATED, node=NodeRecord.model_validate(row))

    async def remove(self, map_id: str, node_id: str, *, session: AsyncSession | None = None) -> NodeOutcome:
        """Delete the node and, through the parent cascade, its subtree."""
        async with self._db.session(session) as s:
            row = await self._get_row(s, map_id, node_id)
            if row is None:
                return not_found(map_id, node_id)
            if row.root:
                return rejected("the root node cannot be removed")

            removed = NodeRecord.model_validate(row)
            await s.delete(row)
            await s.flush()
            return NodeOutcome(status=NodeStatus.REMOVED, node=removed)

    async def delete_all(self, map_id: str, *, session: AsyncSession | None = None) -> int:
        """Delete every node of the map and return how many there were."""
        async with self._db.session(session) as s:
            # rowcount leaves out rows removed by the parent cascade, so count first
            count = (
                await s.execute(select(func.count()).select_from(NodeRow).where(NodeRow.map_id == map_id))
            ).scalar_one()
            await s.execute(delete(NodeRow).where(NodeRow.map_id == map_id))
        logger.debug("Deleted %d node(s) of map %s", count, map_id)
        return count

    async def newest_modification(self, map_id: str, *, session: AsyncSession | None = None) -> datetime | None:
        async with self._db.session(session) as s:
            return (
                await s.execute(select(func.max(NodeRow.last_modified)).where(NodeRow.map_id == map_id))
            ).scalar_one_or_none()

    async def insert_ordered(
        self,
        map_id: str,
        nodes: list[ClientNode],
        *,
        session: AsyncSession,
    ) -> None:
        """Insert *nodes* one at a time in the given order inside *session*.

        Each insert is flushed before the next is issued so a child always
        finds its parent already persisted.
        """
        now = utc_now()
        for order_number, node in enumerate(nodes):
            session.add(NodeRow(**client_node_to_columns(node, map_id), order_number=order_number, last_modified=now))
            await session.flush()

    @staticmethod
    async def _get_row(session: AsyncSession, map_id: str, node_id: str) -> NodeRow | None:
        query = select(NodeRow).where(NodeRow.map_id == map_id, NodeRow.id == node_id)
        return (await session.execute(query)).scalar_one_or_none()

    @staticmethod
    async def _has_root(session: AsyncSession, map_id: str) -> bool:
        query = select(NodeRow.id).where(NodeRow.map_id == map_id, NodeRow.root.is_(True)).limit(1)
        return (await session.execute(query)).first() is not None

    @staticmethod
    async def _next_order_number(session: AsyncSession, map_id: str) -> int:
        current = (
            await session.execute(select(func.max(NodeRow.order_number)).where(NodeRow.map_id == map_id))
        ).scalar_one_or_none()
        return 0 if current is None else current + 1

    @staticmethod
    async def _update_violation(session: AsyncSession, row: NodeRow, node: ClientNode) -> str | None:
        if _detached_with_parent(node):
            return "detached nodes cannot have a parent"
        if row.root:
            if node.parent or node.detached:
                return "the root node cannot be given a parent or detached"
            return None
        if not node.parent and not node.detached:
            if await NodeStore._has_root(session, row.map_id):
                return "map already has a root node"
            return None
        if not node.parent:
            return None

        edges = await session.execute(select(NodeRow.id, NodeRow.parent_id).where(NodeRow.map_id == row.map_id))
        parents = dict(edges.tuples().all())
        if node.parent not in parents:
            return f"parent {node.parent} does not exist"
        seen: set[str] = set()
        ancestor: str | None = node.parent
        while ancestor is not None and ancestor not in seen:
            if ancestor == node.id:
                return f"parent {node.parent} is a descendant of node {node.id}"
            seen.add(ancestor)
            ancestor = parents.get(ancestor)
        return None
