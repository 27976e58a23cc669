"""Shared test fixtures for mapkeeper tests."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio

from mapkeeper.contracts.config import MapKeeperConfig
from mapkeeper.sdk import MapKeeper
from mapkeeper.store.database import Database
from mapkeeper.store.maps import MapStore
from mapkeeper.store.nodes import NodeStore

IN_MEMORY_URL = "sqlite+aiosqlite://"


@pytest.fixture
def config() -> MapKeeperConfig:
    return MapKeeperConfig(database_url=IN_MEMORY_URL, delete_after_days=30)


@pytest_asyncio.fixture
async def database() -> AsyncIterator[Database]:
    """A fresh in-memory database with the schema created."""
    db = Database(IN_MEMORY_URL)
    await db.create_schema()
    yield db
    await db.close()


@pytest.fixture
def map_store(database: Database) -> MapStore:
    return MapStore(database)


@pytest.fixture
def node_store(database: Database) -> NodeStore:
    return NodeStore(database)


@pytest.fixture
def keeper(database: Database, config: MapKeeperConfig) -> MapKeeper:
    return MapKeeper(database=database, config=config)
