"""Async database handle shared by the stores."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from mapkeeper.contracts.config import MapKeeperConfig
from mapkeeper.contracts.exceptions import StorageError
from mapkeeper.store.schema import Base

logger = logging.getLogger(__name__)


def _engine_options(database_url: str, timeout_seconds: float) -> dict[str, Any]:
    url = make_url(database_url)
    if url.drivername.startswith("sqlite"):
        options: dict[str, Any] = {"connect_args": {"timeout": timeout_seconds}}
        if not url.database or url.database == ":memory:":
            # every session must see the same in-memory database
            options["poolclass"] = StaticPool
        return options
    options = {"pool_timeout": timeout_seconds, "pool_pre_ping": True}
    if url.drivername.endswith("+asyncpg"):
        options["connect_args"] = {"timeout": timeout_seconds, "command_timeout": timeout_seconds}
    return options


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owns the async engine and hands out transactional sessions.

    Store failures surface as :class:`StorageError`; nothing is retried.
    """

    def __init__(self, database_url: str, *, echo: bool = False, timeout_seconds: float = 30.0) -> None:
        self.database_url = database_url
        try:
            self.engine: AsyncEngine = create_async_engine(
                database_url, echo=echo, **_engine_options(database_url, timeout_seconds)
            )
        except (SQLAlchemyError, ImportError) as exc:
            raise StorageError(f"cannot create engine for {database_url}: {exc}") from exc
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        self.async_session = async_sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)

    @classmethod
    def from_config(cls, config: MapKeeperConfig) -> Database:
        return cls(config.database_url, echo=config.echo_sql, timeout_seconds=config.store_timeout_seconds)

    @asynccontextmanager
    async def session(self, session: AsyncSession | None = None) -> AsyncIterator[AsyncSession]:
        """Yield a session that commits on success and rolls back on error.

        Passing an existing *session* joins the caller's unit of work: nothing
        is committed here and the caller owns the transaction.
        """
        if session is not None:
            yield session
            return

        async with self.async_session() as new_session:
            try:
                yield new_session
                await new_session.commit()
            except SQLAlchemyError as exc:
                await new_session.rollback()
                raise StorageError(str(exc)) from exc
            except BaseException:
                await new_session.rollback()
                raise

    async def create_schema(self) -> None:
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as exc:
            raise StorageError(f"failed creating schema: {exc}") from exc
        logger.info("Schema ready on %s", self.engine.url.render_as_string(hide_password=True))

    async def close(self) -> None:
        await self.engine.dispose()
