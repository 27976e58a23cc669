"""Map record persistence."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from mapkeeper.contracts.map import ClientMapOptions, MapRecord
from mapkeeper.store.database import Database
from mapkeeper.store.mapper import options_to_column
from mapkeeper.store.schema import MapRow, utc_now

logger = logging.getLogger(__name__)


class MapStore:
    """CRUD for map rows.

    Every method opens its own transaction unless a *session* is passed, in
    which case it runs inside the caller's unit of work.
    """

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create(self, *, session: AsyncSession | None = None) -> MapRecord:
        row = MapRow(
            id=str(uuid.uuid4()),
            admin_id=str(uuid.uuid4()),
            modification_secret=str(uuid.uuid4()),
            last_modified=utc_now(),
            options=None,
        )
        async with self._db.session(session) as s:
            s.add(row)
            await s.flush()
            record = MapRecord.model_validate(row)
        logger.debug("Created map %s", record.id)
        return record

    async def find(
        self,
        map_id: str,
        *,
        session: AsyncSession | None = None,
        for_update: bool = False,
    ) -> MapRecord | None:
        query = select(MapRow).where(MapRow.id == map_id)
        if for_update:
            query = query.with_for_update()
        async with self._db.session(session) as s:
            row = (await s.execute(query)).scalar_one_or_none()
            return MapRecord.model_validate(row) if row is not None else None

    async def update_options(
        self,
        map_id: str,
        options: ClientMapOptions | dict[str, Any] | None,
        *,
        session: AsyncSession | None = None,
    ) -> MapRecord | None:
        async with self._db.session(session) as s:
            result = await s.execute(
                update(MapRow)
                .where(MapRow.id == map_id)
                .values(options=options_to_column(options), last_modified=utc_now())
            )
            if result.rowcount == 0:
                return None
            return await self.find(map_id, session=s)

    async def delete(self, map_id: str, *, session: AsyncSession | None = None) -> bool:
        async with self._db.session(session) as s:
            result = await s.execute(delete(MapRow).where(MapRow.id == map_id))
        deleted = result.rowcount > 0
        if deleted:
            logger.info("Deleted map %s", map_id)
        return deleted
