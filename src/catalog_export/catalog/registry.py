"""Node registry - in-memory index over a flat community/domain listing."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

from .types import Node

logger = logging.getLogger(__name__)


class NodeRegistry:
    """
    Index of nodes by id and by parent id.

    Parent links are plain ids looked up in the index, so a malformed
    listing (cycles, dangling parents, repeated ids) can never loop or
    duplicate results. The first node registered under an id wins.
    """

    def __init__(self, nodes: Iterable[Node] = ()):
        self._nodes: dict[str, Node] = {}
        self._children: dict[str, list[Node]] = {}
        for node in nodes:
            self.register(node)

    def register(self, node: Node) -> bool:
        """Add a node. Returns False if its id was already registered."""
        if node.id in self._nodes:
            logger.debug(f"Ignoring duplicate node id: {node.id}")
            return False
        self._nodes[node.id] = node
        if node.parent_id is not None:
            self._children.setdefault(node.parent_id, []).append(node)
        return True

    def get(self, node_id: str) -> Node | None:
        return self._nodes.get(node_id)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def all_nodes(self) -> Iterator[Node]:
        return iter(self._nodes.values())

    def roots(self) -> list[Node]:
        """Nodes without a parent, plus nodes whose parent is not in the listing."""
        return [n for n in self._nodes.values() if n.parent_id is None or n.parent_id not in self._nodes]

    def children_of(self, node_id: str) -> list[Node]:
        """Direct children, in listing order."""
        return list(self._children.get(node_id, ()))

    def find_by_name(self, name: str) -> Node | None:
        for node in self._nodes.values():
            if node.name == name:
                return node
        return None

    def descendants_of(self, root_id: str) -> list[Node]:
        """
        All transitive children of ``root_id``, depth-first.

        Each node is listed before its own children and siblings keep
        listing order. The root itself is never included, and no node
        appears twice even if the parent links form a cycle.
        """
        visited = {root_id}
        result: list[Node] = []
        stack = list(reversed(self._children.get(root_id, ())))

        while stack:
            node = stack.pop()
            if node.id in visited:
                continue
            visited.add(node.id)
            result.append(node)
            stack.extend(reversed(self._children.get(node.id, ())))

        return result

    def ancestors_of(self, node_id: str) -> list[Node]:
        """Parent chain of a node, nearest first, stopping at a cycle or a missing parent."""
        chain: list[Node] = []
        seen = {node_id}
        node = self._nodes.get(node_id)
        while node is not None and node.parent_id is not None and node.parent_id not in seen:
            seen.add(node.parent_id)
            node = self._nodes.get(node.parent_id)
            if node is not None:
                chain.append(node)
        return chain


def descendants_of(root_id: str, nodes: Iterable[Node]) -> list[Node]:
    """Descendants of ``root_id`` within a flat node collection."""
    return NodeRegistry(nodes).descendants_of(root_id)
