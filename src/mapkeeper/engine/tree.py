"""Structural validation and parent-first ordering of a full node batch."""

from __future__ import annotations

from collections import Counter

from mapkeeper.contracts.exceptions import TreeValidationError
from mapkeeper.contracts.map import ClientNode


def validate_replace_batch(nodes: list[ClientNode]) -> None:
    """Validate that *nodes* can replace a map's whole node set.

    Raises:
        TreeValidationError: Aggregated list of all problems found.
    """
    errors: list[str] = []

    duplicates = sorted(node_id for node_id, count in Counter(node.id for node in nodes).items() if count > 1)
    if duplicates:
        errors.append(f"batch contains duplicate node ids {duplicates}")

    node_ids = {node.id for node in nodes}
    for node in nodes:
        if node.detached and node.parent:
            errors.append(f"node {node.id} is detached but has parent '{node.parent}'")
        elif node.parent and node.parent not in node_ids:
            errors.append(f"node {node.id} parent '{node.parent}' not found in batch")
        elif node.parent == node.id:
            errors.append(f"node {node.id} is its own parent")

    roots = [node.id for node in nodes if not node.parent and not node.detached]
    if len(roots) != 1:
        errors.append(f"batch must contain exactly one root node, found {len(roots)}: {roots}")

    if errors:
        raise TreeValidationError(errors)


def order_replace_batch(nodes: list[ClientNode]) -> list[ClientNode]:
    """Return *nodes* validated and reordered so every parent precedes its children.

    Nodes keep their submission order except where a child was listed
    before its parent; such a child is moved right after the parent. The
    relative order of siblings never changes.

    Raises:
        TreeValidationError: If the batch is invalid or contains a cycle.
    """
    validate_replace_batch(nodes)

    ordered: list[ClientNode] = []
    emitted: set[str] = set()
    waiting: dict[str, list[ClientNode]] = {}

    def emit(node: ClientNode) -> None:
        stack = [node]
        while stack:
            current = stack.pop()
            ordered.append(current)
            emitted.add(current.id)
            stack.extend(reversed(waiting.pop(current.id, [])))

    for node in nodes:
        if not node.parent or node.parent in emitted:
            emit(node)
        else:
            waiting.setdefault(node.parent, []).append(node)

    if waiting:
        stranded = sorted(child.id for children in waiting.values() for child in children)
        raise TreeValidationError([f"nodes {stranded} form a parent cycle"])

    return ordered
