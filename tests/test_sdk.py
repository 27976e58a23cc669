from __future__ import annotations

import pytest

from mapkeeper import (
    ClientNodeBasics,
    CreateMapRequest,
    MapDeleteStatus,
    MapKeeper,
    MapKeeperConfig,
    NodeStatus,
    TreeValidationError,
)
from support import make_node


@pytest.mark.asyncio
async def test_create_map_reveals_secrets_and_single_root(keeper: MapKeeper) -> None:
    created = await keeper.create_map(CreateMapRequest.model_validate({"rootNode": {"name": "Ideas"}}))

    assert created.admin_id
    assert created.modification_secret
    assert created.map.delete_after_days == 30
    assert len(created.map.data) == 1
    root = created.map.data[0]
    assert root.name == "Ideas"
    assert root.parent is None
    assert root.detached is False
    assert root.is_root is True

    nodes = await keeper.nodes.find_all(created.map.uuid)
    assert len(nodes) == 1
    assert nodes[0].parent_id is None and nodes[0].detached is False


@pytest.mark.asyncio
async def test_get_map_hides_secrets(keeper: MapKeeper) -> None:
    created = await keeper.create_map(ClientNodeBasics(name="Root"))

    client_map = await keeper.get_map(created.map.uuid)

    assert client_map is not None
    dumped = client_map.model_dump_json(by_alias=True)
    assert created.admin_id not in dumped
    assert created.modification_secret not in dumped


@pytest.mark.asyncio
async def test_get_unknown_map_returns_none(keeper: MapKeeper) -> None:
    assert await keeper.get_map("missing") is None


@pytest.mark.asyncio
async def test_delete_with_correct_admin_id_removes_map_and_nodes(keeper: MapKeeper) -> None:
    created = await keeper.create_map()
    map_id = created.map.uuid
    await keeper.add_node(map_id, make_node("a"))

    outcome = await keeper.delete_map(map_id, created.admin_id)

    assert outcome.status is MapDeleteStatus.DELETED
    assert outcome.ok is True
    assert await keeper.get_map(map_id) is None
    assert await keeper.nodes.find_all(map_id) == []


@pytest.mark.asyncio
async def test_delete_with_wrong_admin_id_is_forbidden_and_changes_nothing(keeper: MapKeeper) -> None:
    created = await keeper.create_map()
    map_id = created.map.uuid
    await keeper.add_node(map_id, make_node("a"))
    before = await keeper.nodes.find_all(map_id)

    outcome = await keeper.delete_map(map_id, "not-the-admin-id")

    assert outcome.status is MapDeleteStatus.FORBIDDEN
    assert outcome.ok is False
    assert await keeper.maps.find(map_id) is not None
    assert await keeper.nodes.find_all(map_id) == before


@pytest.mark.asyncio
async def test_delete_unknown_map_is_not_found(keeper: MapKeeper) -> None:
    outcome = await keeper.delete_map("missing", "whatever")

    assert outcome.status is MapDeleteStatus.NOT_FOUND


@pytest.mark.asyncio
async def test_node_operations_pass_through(keeper: MapKeeper) -> None:
    created = await keeper.create_map()
    map_id = created.map.uuid

    assert (await keeper.add_node(map_id, make_node("a"))).status is NodeStatus.CREATED
    assert (await keeper.update_node(map_id, make_node("a", name="renamed"))).status is NodeStatus.UPDATED
    assert (await keeper.remove_node(map_id, "a")).status is NodeStatus.REMOVED
    assert (await keeper.remove_node(map_id, "a")).status is NodeStatus.NOT_FOUND


@pytest.mark.asyncio
async def test_replace_nodes_returns_refreshed_client_view(keeper: MapKeeper) -> None:
    created = await keeper.create_map()
    map_id = created.map.uuid

    client_map = await keeper.replace_nodes(
        map_id, [make_node("root", parent=None), make_node("x"), make_node("x1", parent="x")]
    )

    assert client_map is not None
    assert [node.id for node in client_map.data] == ["root", "x", "x1"]
    assert await keeper.replace_nodes("missing", [make_node("root", parent=None)]) is None


@pytest.mark.asyncio
async def test_replace_nodes_rejects_forest_with_two_roots(keeper: MapKeeper) -> None:
    created = await keeper.create_map()

    with pytest.raises(TreeValidationError):
        await keeper.replace_nodes(created.map.uuid, [make_node("r1", parent=None), make_node("r2", parent=None)])


@pytest.mark.asyncio
async def test_update_map_options(keeper: MapKeeper) -> None:
    created = await keeper.create_map()

    updated = await keeper.update_map_options(created.map.uuid, {"fontMinSize": 12})

    assert updated is not None
    assert updated.options == {"fontMinSize": 12}
    client_map = await keeper.get_map(created.map.uuid)
    assert client_map is not None and client_map.options is not None
    assert client_map.options.font_min_size == 12


@pytest.mark.asyncio
async def test_from_config_initializes_file_database(tmp_path) -> None:
    config = MapKeeperConfig(database_url=f"sqlite+aiosqlite:///{tmp_path / 'maps.db'}")

    async with MapKeeper.from_config(config) as keeper:
        await keeper.init_schema()
        created = await keeper.create_map()
        assert await keeper.get_map(created.map.uuid) is not None
        assert await keeper.sweep() == 0

    assert (tmp_path / "maps.db").exists()
