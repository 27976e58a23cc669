"""Batch deletion of maps whose retention window has passed."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import datetime, timedelta

from sqlalchemy import ColumnElement, and_, delete, func, or_, select

from mapkeeper.contracts.exceptions import StorageError
from mapkeeper.store.database import Database
from mapkeeper.store.schema import MapRow, NodeRow, utc_now

logger = logging.getLogger(__name__)


def _outdated_condition(newest_node_modified: ColumnElement[datetime], cutoff: datetime) -> ColumnElement[bool]:
    # ts + window < now  <=>  ts < now - window
    return or_(
        newest_node_modified < cutoff,
        and_(newest_node_modified.is_(None), MapRow.last_modified < cutoff),
    )


def outdated_map_ids_query(after_days: int, now: datetime):
    """Map ids whose newest node (or the map itself, when empty) is older than the window.

    The newest node timestamp per map comes from one grouped aggregate
    joined to the maps table.
    """
    newest_node = (
        select(NodeRow.map_id.label("map_id"), func.max(NodeRow.last_modified).label("last_updated_at"))
        .group_by(NodeRow.map_id)
        .subquery("newest_node")
    )
    cutoff = now - timedelta(days=after_days)
    return (
        select(MapRow.id)
        .outerjoin(newest_node, newest_node.c.map_id == MapRow.id)
        .where(_outdated_condition(newest_node.c.last_updated_at, cutoff))
    )


class OutdatedMapSweeper:
    """Finds and deletes expired maps in one batched statement.

    Runs never overlap: a second caller waits for the running sweep and then
    finds nothing left to delete.
    """

    def __init__(self, database: Database, *, delete_after_days: int = 30) -> None:
        self._db = database
        self._delete_after_days = delete_after_days
        self._lock = asyncio.Lock()

    async def sweep(self, after_days: int | None = None, *, now: datetime | None = None) -> int:
        """Delete every outdated map with its nodes and return how many maps were removed."""
        days = self._delete_after_days if after_days is None else after_days
        if days < 0:
            raise ValueError("after_days must be >= 0")

        async with self._lock:
            reference = now if now is not None else utc_now()
            outdated = outdated_map_ids_query(days, reference)
            async with self._db.session() as session:
                map_ids = list((await session.execute(outdated)).scalars().all())
                if not map_ids:
                    logger.debug("Sweep found no maps older than %d day(s)", days)
                    return 0
                result = await session.execute(
                    delete(MapRow)
                    .where(MapRow.id.in_(map_ids), MapRow.id.in_(outdated.correlate(None).scalar_subquery()))
                    .execution_options(synchronize_session=False)
                )
            deleted = result.rowcount
            logger.info("Sweep deleted %d outdated map(s) older than %d day(s)", deleted, days)
            logger.debug("Swept map ids: %s", ", ".join(map_ids))
            return deleted

    async def run_periodically(
        self,
        interval_seconds: float,
        *,
        stop: asyncio.Event | None = None,
        after_days: int | None = None,
    ) -> int:
        """Sweep every *interval_seconds* until *stop* is set; returns the number of runs.

        A failed run is logged and the loop waits for the next tick.
        """
        stop_event = stop or asyncio.Event()
        runs = 0
        while not stop_event.is_set():
            runs += 1
            try:
                await self.sweep(after_days)
            except StorageError:
                logger.exception("Sweep run %d failed", runs)
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(stop_event.wait(), timeout=interval_seconds)
        logger.info("Sweeper stopped after %d run(s)", runs)
        return runs
