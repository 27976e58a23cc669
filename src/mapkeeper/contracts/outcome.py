"""Explicit result types for operations that may be rejected without failing."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel

from mapkeeper.contracts.map import NodeRecord


class NodeStatus(StrEnum):
    CREATED = "CREATED"
    EXISTING = "EXISTING"
    UPDATED = "UPDATED"
    REMOVED = "REMOVED"
    REJECTED = "REJECTED"
    NOT_FOUND = "NOT_FOUND"


class NodeOutcome(BaseModel):
    """Outcome of a single-node store call.

    ``node`` is the stored node after the call (or the removed node for
    ``REMOVED``); it is ``None`` for ``REJECTED`` adds and ``NOT_FOUND``.
    """

    status: NodeStatus
    node: NodeRecord | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.status not in {NodeStatus.REJECTED, NodeStatus.NOT_FOUND}


class MapDeleteStatus(StrEnum):
    DELETED = "DELETED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"


class MapDeleteOutcome(BaseModel):
    map_id: str
    status: MapDeleteStatus

    @property
    def ok(self) -> bool:
        return self.status is MapDeleteStatus.DELETED


def rejected(reason: str) -> NodeOutcome:
    return NodeOutcome(status=NodeStatus.REJECTED, reason=reason)


def not_found(map_id: str, node_id: str) -> NodeOutcome:
    return NodeOutcome(status=NodeStatus.NOT_FOUND, reason=f"node {node_id} not found in map {map_id}")
