"""Graph store: the sketch collection, the current sketch and its canvas."""
from __future__ import annotations

import copy
import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from cube_api.domain.catalog import BlockCatalog
from cube_api.domain.entities import (
    ConfigValue,
    Edge,
    EdgeKind,
    Node,
    Position,
    Sketch,
    new_id,
)
from cube_api.domain.errors import NoActiveSketch, NotFoundError, ValidationError
from cube_api.domain.events import (
    DomainEventPublisher,
    SketchCreated,
    SketchDeleted,
    SketchSaved,
)
from cube_api.domain.graph import WorkingGraph, validate_graph

logger = logging.getLogger(__name__)

DEFAULT_SKETCH_DESCRIPTION = "A new IoT workflow sketch"


def _check_config_value(key: str, value: ConfigValue) -> None:
    # bool is an int subclass but not a valid config scalar
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValidationError(
            f"Config value for '{key}' must be a number or text, got {type(value).__name__}"
        )


class GraphStore:
    """Owns every sketch and the working graph of the current one.

    Canvas edits go to the working graph and only become part of the
    persisted sketch through ``save`` / ``save_current``.
    """

    def __init__(self, catalog: BlockCatalog, publisher: DomainEventPublisher) -> None:
        self._catalog = catalog
        self._publisher = publisher
        self._sketches: Dict[str, Sketch] = {}
        self._current_id: Optional[str] = None
        self._canvas = WorkingGraph()

    # Sketch collection

    def list_sketches(self) -> List[Sketch]:
        return list(self._sketches.values())

    def get_sketch(self, sketch_id: str) -> Sketch:
        sketch = self._sketches.get(sketch_id)
        if sketch is None:
            raise NotFoundError(f"Sketch not found: {sketch_id}")
        return sketch

    def create_sketch(self, name: str | None = None, description: str | None = None) -> Sketch:
        now = datetime.now()
        sketch = Sketch(
            id=new_id(),
            name=name or f"New Sketch {len(self._sketches) + 1}",
            description=description if description is not None else DEFAULT_SKETCH_DESCRIPTION,
            created_at=now,
            updated_at=now,
        )
        self._sketches[sketch.id] = sketch
        self._publisher.publish(SketchCreated(
            event_id="",
            timestamp=None,
            aggregate_id=sketch.id,
            name=sketch.name,
        ))
        return sketch

    def update_sketch(
        self, sketch_id: str, name: str | None = None, description: str | None = None
    ) -> Sketch:
        sketch = self.get_sketch(sketch_id)
        if name is not None:
            sketch.name = name
        if description is not None:
            sketch.description = description
        sketch.updated_at = datetime.now()
        return sketch

    def delete_sketch(self, sketch_id: str) -> bool:
        sketch = self._sketches.pop(sketch_id, None)
        if sketch is None:
            return False
        if self._current_id == sketch_id:
            self._current_id = None
            self._canvas = WorkingGraph()
        self._publisher.publish(SketchDeleted(
            event_id="",
            timestamp=None,
            aggregate_id=sketch_id,
            name=sketch.name,
        ))
        return True

    # Editing focus

    @property
    def current(self) -> Optional[Sketch]:
        if self._current_id is None:
            return None
        return self._sketches.get(self._current_id)

    def set_current(self, sketch_id: Optional[str]) -> Optional[Sketch]:
        """Switch the editing focus and load the sketch onto the canvas."""
        if sketch_id is None:
            self._current_id = None
            self._canvas = WorkingGraph()
            return None
        sketch = self.get_sketch(sketch_id)
        self._current_id = sketch.id
        self._canvas = WorkingGraph(sketch.nodes, sketch.edges)
        logger.info(f"Current sketch set to {sketch.id} ({sketch.name})")
        return sketch

    # Working graph mutations

    @property
    def canvas(self) -> WorkingGraph:
        return self._canvas

    def add_node(self, template_id: str, position: Position) -> Node:
        template = self._catalog.get(template_id)
        return self._canvas.add_node(template, position)

    def connect(
        self,
        source_id: str,
        target_id: str,
        source_handle: Optional[str] = None,
        target_handle: Optional[str] = None,
        kind: EdgeKind = EdgeKind.LOGIC,
    ) -> Edge:
        return self._canvas.connect(source_id, target_id, source_handle, target_handle, kind)

    def delete_node(self, node_id: str) -> None:
        removed = self._canvas.delete_node(node_id)
        if removed:
            logger.debug(f"Deleted node {node_id} and {len(removed)} incident edge(s)")

    def delete_edge(self, edge_id: str) -> None:
        self._canvas.delete_edge(edge_id)

    def update_node_config(self, node_id: str, key: str, value: ConfigValue) -> None:
        if self._canvas.get_node(node_id) is None:
            return
        _check_config_value(key, value)
        self._canvas.update_node_config(node_id, key, value)

    def move_node(self, node_id: str, position: Position) -> None:
        self._canvas.move_node(node_id, position)

    def clear_canvas(self) -> None:
        self._canvas.clear()

    # Commit

    def save(self, sketch_id: str, nodes: Iterable[Node], edges: Iterable[Edge]) -> Sketch:
        """Replace a sketch's nodes and edges in one step.

        If the sketch is current, the canvas is reloaded from the saved graph
        and any uncommitted canvas edits are dropped.
        """
        sketch = self.get_sketch(sketch_id)
        nodes = [copy.deepcopy(node) for node in nodes]
        edges = [copy.deepcopy(edge) for edge in edges]
        validate_graph(nodes, edges)
        for node in nodes:
            for key, value in node.config.items():
                _check_config_value(key, value)

        sketch.nodes = nodes
        sketch.edges = edges
        sketch.updated_at = datetime.now()
        if sketch.id == self._current_id:
            self._canvas = WorkingGraph(nodes, edges)
        self._publisher.publish(SketchSaved(
            event_id="",
            timestamp=None,
            aggregate_id=sketch.id,
            node_count=len(nodes),
            edge_count=len(edges),
        ))
        return sketch

    def save_current(self) -> Sketch:
        """Commit the canvas into the current sketch."""
        if self._current_id is None:
            raise NoActiveSketch()
        return self.save(self._current_id, self._canvas.nodes, self._canvas.edges)
