from __future__ import annotations

import asyncio
from datetime import datetime, timedelta

import pytest

from mapkeeper.contracts.exceptions import StorageError
from mapkeeper.contracts.map import ClientNodeBasics
from mapkeeper.engine.sweeper import OutdatedMapSweeper
from mapkeeper.store.database import Database
from mapkeeper.store.maps import MapStore
from mapkeeper.store.nodes import NodeStore
from mapkeeper.store.schema import utc_now
from support import make_node, set_map_last_modified, set_nodes_last_modified


@pytest.fixture
def sweeper(database: Database) -> OutdatedMapSweeper:
    return OutdatedMapSweeper(database, delete_after_days=30)


async def _map_with_nodes(database: Database, map_store: MapStore, node_store: NodeStore, *, age_days: int) -> str:
    map_record = await map_store.create()
    await node_store.create_root(map_record.id, ClientNodeBasics(name="Root"))
    await node_store.add(map_record.id, make_node("a"))
    await set_nodes_last_modified(database, map_record.id, utc_now() - timedelta(days=age_days))
    return map_record.id


@pytest.mark.asyncio
async def test_sweep_deletes_only_maps_past_their_window(
    sweeper: OutdatedMapSweeper, database: Database, map_store: MapStore, node_store: NodeStore
) -> None:
    stale = await _map_with_nodes(database, map_store, node_store, age_days=40)
    fresh = await _map_with_nodes(database, map_store, node_store, age_days=5)

    assert await sweeper.sweep(30) == 1

    assert await map_store.find(stale) is None
    assert await node_store.find_all(stale) == []
    assert await map_store.find(fresh) is not None
    assert len(await node_store.find_all(fresh)) == 2

    assert await sweeper.sweep(30) == 0


@pytest.mark.asyncio
async def test_recent_node_keeps_old_map_alive(
    sweeper: OutdatedMapSweeper, database: Database, map_store: MapStore, node_store: NodeStore
) -> None:
    map_id = await _map_with_nodes(database, map_store, node_store, age_days=1)
    await set_map_last_modified(database, map_id, utc_now() - timedelta(days=400))

    assert await sweeper.sweep(30) == 0
    assert await map_store.find(map_id) is not None


@pytest.mark.asyncio
async def test_empty_maps_use_their_own_last_modified(
    sweeper: OutdatedMapSweeper, database: Database, map_store: MapStore
) -> None:
    old_empty = await map_store.create()
    new_empty = await map_store.create()
    await set_map_last_modified(database, old_empty.id, utc_now() - timedelta(days=31))
    await set_map_last_modified(database, new_empty.id, utc_now() - timedelta(days=29))

    assert await sweeper.sweep() == 1

    assert await map_store.find(old_empty.id) is None
    assert await map_store.find(new_empty.id) is not None


@pytest.mark.asyncio
async def test_boundary_is_strictly_before_now(
    sweeper: OutdatedMapSweeper, database: Database, map_store: MapStore, node_store: NodeStore
) -> None:
    now = datetime(2024, 3, 11, 12, 0)
    map_id = await _map_with_nodes(database, map_store, node_store, age_days=0)
    await set_nodes_last_modified(database, map_id, datetime(2024, 2, 10, 12, 0))

    assert await sweeper.sweep(30, now=now) == 0
    assert await sweeper.sweep(30, now=now + timedelta(seconds=1)) == 1


@pytest.mark.asyncio
async def test_sweep_with_no_maps_returns_zero(sweeper: OutdatedMapSweeper) -> None:
    assert await sweeper.sweep(30) == 0


@pytest.mark.asyncio
async def test_negative_window_is_rejected(sweeper: OutdatedMapSweeper) -> None:
    with pytest.raises(ValueError):
        await sweeper.sweep(-1)


@pytest.mark.asyncio
async def test_overlapping_sweeps_delete_each_map_once(
    sweeper: OutdatedMapSweeper, database: Database, map_store: MapStore, node_store: NodeStore
) -> None:
    for _ in range(3):
        await _map_with_nodes(database, map_store, node_store, age_days=60)

    results = await asyncio.gather(sweeper.sweep(30), sweeper.sweep(30))

    assert sorted(results) == [0, 3]


@pytest.mark.asyncio
async def test_run_periodically_stops_when_event_is_set(
    sweeper: OutdatedMapSweeper, monkeypatch: pytest.MonkeyPatch
) -> None:
    stop = asyncio.Event()
    calls: list[int | None] = []

    async def fake_sweep(after_days: int | None = None) -> int:
        calls.append(after_days)
        if len(calls) == 1:
            raise StorageError("database is locked")
        stop.set()
        return 0

    monkeypatch.setattr(sweeper, "sweep", fake_sweep)

    runs = await sweeper.run_periodically(0.01, stop=stop, after_days=7)

    assert runs == 2
    assert calls == [7, 7]
