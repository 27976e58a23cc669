"""Relational schema: one ``maps`` table and one ``nodes`` table.

Nodes are keyed by ``(map_id, id)``. Both the owning map and the parent
node are foreign keys with ``ON DELETE CASCADE``, so deleting a map removes
its nodes and deleting a node removes its subtree.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    ForeignKeyConstraint,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utc_now() -> datetime:
    """Naive UTC now; all timestamps are stored naive in UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class MapRow(Base):
    __tablename__ = "maps"

    id = Column(String(36), primary_key=True)
    admin_id = Column(String(36), nullable=False)
    modification_secret = Column(String(36), nullable=False)
    last_modified = Column(DateTime, nullable=False, default=utc_now)
    options = Column(JSON, nullable=True)


class NodeRow(Base):
    __tablename__ = "nodes"
    __table_args__ = (
        ForeignKeyConstraint(
            ["map_id", "parent_id"],
            ["nodes.map_id", "nodes.id"],
            ondelete="CASCADE",
            name="fk_nodes_parent",
        ),
        CheckConstraint("NOT (detached AND parent_id IS NOT NULL)", name="ck_nodes_detached_parentless"),
        Index("ix_nodes_map_order", "map_id", "order_number"),
        Index("ix_nodes_map_last_modified", "map_id", "last_modified"),
    )

    map_id = Column(String(36), ForeignKey("maps.id", ondelete="CASCADE"), primary_key=True)
    id = Column(String(255), primary_key=True)
    parent_id = Column(String(255), nullable=True)
    order_number = Column(Integer, nullable=False)
    detached = Column(Boolean, nullable=False, default=False)
    root = Column(Boolean, nullable=False, default=False)
    locked = Column(Boolean, nullable=False, default=False)
    k = Column(Float, nullable=True)
    name = Column(Text, nullable=True)
    coordinates_x = Column(Float, nullable=True)
    coordinates_y = Column(Float, nullable=True)
    color_name = Column(String(64), nullable=True)
    color_background = Column(String(64), nullable=True)
    color_branch = Column(String(64), nullable=True)
    font_size = Column(Integer, nullable=True)
    font_style = Column(String(32), nullable=True)
    font_weight = Column(String(32), nullable=True)
    image_src = Column(Text, nullable=True)
    image_size = Column(Integer, nullable=True)
    link_href = Column(Text, nullable=True)
    last_modified = Column(DateTime, nullable=False, default=utc_now)
