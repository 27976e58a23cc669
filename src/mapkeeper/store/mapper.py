"""Conversion between client shapes and stored rows."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from mapkeeper.contracts.map import (
    ClientMap,
    ClientMapOptions,
    ClientNode,
    ClientNodeBasics,
    Coordinates,
    MapRecord,
    NodeColors,
    NodeFont,
    NodeImage,
    NodeLink,
    NodeRecord,
)

ROOT_NODE_ID = "root"


def _content_columns(node: ClientNodeBasics) -> dict[str, Any]:
    return {
        "name": node.name,
        "coordinates_x": node.coordinates.x,
        "coordinates_y": node.coordinates.y,
        "color_name": node.colors.name,
        "color_background": node.colors.background,
        "color_branch": node.colors.branch,
        "font_size": node.font.size,
        "font_style": node.font.style,
        "font_weight": node.font.weight,
        "image_src": node.image.src,
        "image_size": node.image.size,
    }


def client_node_to_columns(node: ClientNode, map_id: str) -> dict[str, Any]:
    """Column values for *node*; the root flag is derived from the tree position."""
    return {
        **_content_columns(node),
        "id": node.id,
        "map_id": map_id,
        "parent_id": node.parent or None,
        "detached": node.detached,
        "root": not node.parent and not node.detached,
        "locked": node.locked,
        "k": node.k,
        "link_href": node.link.href,
    }


def client_basics_to_root_columns(basics: ClientNodeBasics, map_id: str, *, node_id: str = ROOT_NODE_ID) -> dict[str, Any]:
    return {
        **_content_columns(basics),
        "id": node_id,
        "map_id": map_id,
        "parent_id": None,
        "detached": False,
        "root": True,
        "locked": False,
        "k": None,
        "link_href": None,
    }


def node_record_to_client(node: NodeRecord) -> ClientNode:
    return ClientNode(
        id=node.id,
        name=node.name,
        parent=node.parent_id,
        k=node.k,
        locked=node.locked,
        is_root=node.root,
        detached=node.detached,
        colors=NodeColors(name=node.color_name, background=node.color_background, branch=node.color_branch),
        font=NodeFont(size=node.font_size, style=node.font_style, weight=node.font_weight),
        image=NodeImage(src=node.image_src, size=node.image_size),
        link=NodeLink(href=node.link_href),
        coordinates=Coordinates(x=node.coordinates_x, y=node.coordinates_y),
    )


def options_to_column(options: ClientMapOptions | dict[str, Any] | None) -> dict[str, Any] | None:
    if options is None:
        return None
    if isinstance(options, ClientMapOptions):
        return options.model_dump(mode="json", by_alias=True, exclude_none=True)
    return dict(options)


def _as_utc(value: datetime) -> datetime:
    # stored timestamps are naive UTC
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def map_record_to_client(
    map_record: MapRecord,
    nodes: list[NodeRecord],
    deleted_at: datetime,
    delete_after_days: int,
) -> ClientMap:
    return ClientMap(
        uuid=map_record.id,
        last_modified=_as_utc(map_record.last_modified),
        deleted_at=_as_utc(deleted_at),
        delete_after_days=delete_after_days,
        data=[node_record_to_client(node) for node in nodes],
        options=ClientMapOptions.model_validate(map_record.options) if map_record.options is not None else None,
    )
