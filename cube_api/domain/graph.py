"""Structural rules for a sketch's node/edge graph."""
from __future__ import annotations

import copy
from typing import Dict, Iterable, List, Optional

from cube_api.domain.entities import (
    BlockTemplate,
    ConfigValue,
    Edge,
    EdgeKind,
    Node,
    Position,
    new_id,
)
from cube_api.domain.errors import DanglingReference, InvalidHandle, ValidationError


def check_handles(
    source: Node,
    target: Node,
    source_handle: Optional[str],
    target_handle: Optional[str],
) -> None:
    """Raise InvalidHandle if a given handle is not declared on its node."""
    if source_handle is not None and source_handle not in source.outputs:
        raise InvalidHandle(
            f"Node {source.id} ({source.label}) has no output '{source_handle}'"
        )
    if target_handle is not None and target_handle not in target.inputs:
        raise InvalidHandle(
            f"Node {target.id} ({target.label}) has no input '{target_handle}'"
        )


def validate_graph(nodes: Iterable[Node], edges: Iterable[Edge]) -> None:
    """Check a complete node/edge payload before it replaces a sketch's graph."""
    by_id: Dict[str, Node] = {}
    for node in nodes:
        if node.id in by_id:
            raise ValidationError(f"Duplicate node id: {node.id}")
        by_id[node.id] = node

    seen_edges = set()
    for edge in edges:
        if edge.id in seen_edges:
            raise ValidationError(f"Duplicate edge id: {edge.id}")
        seen_edges.add(edge.id)
        for endpoint in (edge.source, edge.target):
            if endpoint not in by_id:
                raise DanglingReference(endpoint)
        check_handles(
            by_id[edge.source], by_id[edge.target], edge.source_handle, edge.target_handle
        )


class WorkingGraph:
    """Uncommitted nodes and edges being edited on the canvas.

    Insertion order is kept so the canvas renders nodes in the order they were
    dropped. Nothing here touches a persisted sketch; committing is done by
    the graph store.
    """

    def __init__(self, nodes: Iterable[Node] = (), edges: Iterable[Edge] = ()) -> None:
        self._nodes: Dict[str, Node] = {}
        self._edges: Dict[str, Edge] = {}
        for node in nodes:
            self._nodes[node.id] = copy.deepcopy(node)
        for edge in edges:
            self._edges[edge.id] = copy.deepcopy(edge)

    @property
    def nodes(self) -> List[Node]:
        return list(self._nodes.values())

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges.values())

    def get_node(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def add_node(self, template: BlockTemplate, position: Position) -> Node:
        node = Node.from_template(template, position)
        self._nodes[node.id] = node
        return node

    def connect(
        self,
        source_id: str,
        target_id: str,
        source_handle: Optional[str] = None,
        target_handle: Optional[str] = None,
        kind: EdgeKind = EdgeKind.LOGIC,
    ) -> Edge:
        # No cycle or type-compatibility check; previously accepted graphs stay valid.
        source = self._nodes.get(source_id)
        if source is None:
            raise DanglingReference(source_id)
        target = self._nodes.get(target_id)
        if target is None:
            raise DanglingReference(target_id)
        check_handles(source, target, source_handle, target_handle)

        edge = Edge(
            id=new_id(),
            source=source_id,
            target=target_id,
            source_handle=source_handle,
            target_handle=target_handle,
            kind=kind,
        )
        self._edges[edge.id] = edge
        return edge

    def delete_node(self, node_id: str) -> List[Edge]:
        """Remove a node and every incident edge; returns the removed edges."""
        if self._nodes.pop(node_id, None) is None:
            return []
        incident = [
            edge for edge in self._edges.values()
            if edge.source == node_id or edge.target == node_id
        ]
        for edge in incident:
            del self._edges[edge.id]
        return incident

    def delete_edge(self, edge_id: str) -> bool:
        return self._edges.pop(edge_id, None) is not None

    def update_node_config(self, node_id: str, key: str, value: ConfigValue) -> bool:
        node = self._nodes.get(node_id)
        if node is None:
            return False
        node.config[key] = value
        return True

    def move_node(self, node_id: str, position: Position) -> bool:
        node = self._nodes.get(node_id)
        if node is None:
            return False
        node.position = Position(position.x, position.y)
        return True

    def clear(self) -> None:
        self._nodes.clear()
        self._edges.clear()
