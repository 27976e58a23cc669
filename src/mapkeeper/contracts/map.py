"""Map and node contracts: stored records and the client-facing shapes."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

_CLIENT_MODEL_CONFIG: Any = {"alias_generator": to_camel, "populate_by_name": True}


class MapRecord(BaseModel):
    """A persisted map row."""

    id: str
    admin_id: str
    modification_secret: str
    last_modified: datetime
    options: dict[str, Any] | None = None

    model_config = {"from_attributes": True}


class NodeRecord(BaseModel):
    """A persisted node row.

    The structural fields (``parent_id``, ``order_number``, ``detached``,
    ``root``, ``last_modified``) are the only ones the core reasons about;
    everything else is client content stored as-is.
    """

    id: str
    map_id: str
    parent_id: str | None = None
    order_number: int
    detached: bool = False
    root: bool = False
    locked: bool = False
    k: float | None = None
    name: str | None = None
    coordinates_x: float | None = None
    coordinates_y: float | None = None
    color_name: str | None = None
    color_background: str | None = None
    color_branch: str | None = None
    font_size: int | None = None
    font_style: str | None = None
    font_weight: str | None = None
    image_src: str | None = None
    image_size: int | None = None
    link_href: str | None = None
    last_modified: datetime

    model_config = {"from_attributes": True}


class MapSnapshot(BaseModel):
    """A map record together with its nodes in sibling order."""

    map: MapRecord
    nodes: list[NodeRecord] = Field(default_factory=list)


class Coordinates(BaseModel):
    x: float | None = None
    y: float | None = None


class NodeColors(BaseModel):
    name: str | None = None
    background: str | None = None
    branch: str | None = None


class NodeFont(BaseModel):
    size: int | None = None
    style: str | None = None
    weight: str | None = None


class NodeImage(BaseModel):
    src: str | None = None
    size: int | None = None


class NodeLink(BaseModel):
    href: str | None = None


class ClientNodeBasics(BaseModel):
    """Content accepted when creating the root node of a new map."""

    name: str | None = None
    colors: NodeColors = Field(default_factory=NodeColors)
    font: NodeFont = Field(default_factory=NodeFont)
    image: NodeImage = Field(default_factory=NodeImage)
    coordinates: Coordinates = Field(default_factory=Coordinates)

    model_config = _CLIENT_MODEL_CONFIG


class ClientNode(ClientNodeBasics):
    """A node as exchanged with clients."""

    id: str = Field(min_length=1)
    parent: str | None = None
    k: float | None = None
    locked: bool = False
    link: NodeLink = Field(default_factory=NodeLink)
    is_root: bool = False
    detached: bool = False


class ClientMapOptions(BaseModel):
    """Display options of a map; unknown keys are kept untouched."""

    font_max_size: int | None = None
    font_min_size: int | None = None
    font_increment: int | None = None

    model_config = {**_CLIENT_MODEL_CONFIG, "extra": "allow"}


class ClientMap(BaseModel):
    """The externally visible representation of a map."""

    uuid: str
    last_modified: datetime
    deleted_at: datetime
    delete_after_days: int
    data: list[ClientNode] = Field(default_factory=list)
    options: ClientMapOptions | None = None

    model_config = _CLIENT_MODEL_CONFIG


class PrivateClientMap(BaseModel):
    """Creation response; the only place the secrets are revealed."""

    map: ClientMap
    admin_id: str
    modification_secret: str

    model_config = _CLIENT_MODEL_CONFIG


class CreateMapRequest(BaseModel):
    root_node: ClientNodeBasics = Field(default_factory=ClientNodeBasics)

    model_config = _CLIENT_MODEL_CONFIG


class DeleteMapRequest(BaseModel):
    admin_id: str

    model_config = _CLIENT_MODEL_CONFIG
