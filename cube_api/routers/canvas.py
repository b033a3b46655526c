from fastapi import APIRouter, Depends
from cube_api.schemas.api_schemas import (
    CanvasResponse,
    Edge as EdgeSchema,
    EdgeCreate,
    Node as NodeSchema,
    NodeConfigUpdate,
    NodeCreate,
    OperationResponse,
    PositionSchema,
    SketchResponse,
)
from cube_api.dependencies import get_graph_store
from cube_api.application.graph_store import GraphStore
from cube_api.domain.entities import Position

router = APIRouter()

@router.get("/canvas", response_model=CanvasResponse)
async def get_canvas(store: GraphStore = Depends(get_graph_store)):
    """
    Uncommitted nodes and edges of the current sketch.
    """
    sketch = store.current
    return CanvasResponse(
        sketch_id=sketch.id if sketch else None,
        nodes=[NodeSchema.from_entity(node) for node in store.canvas.nodes],
        edges=[EdgeSchema.from_entity(edge) for edge in store.canvas.edges],
    )

@router.post("/canvas/nodes", response_model=NodeSchema, status_code=201)
async def add_node(node_data: NodeCreate, store: GraphStore = Depends(get_graph_store)):
    """
    Drop a block from the library onto the canvas.
    """
    position = Position(node_data.position.x, node_data.position.y)
    return NodeSchema.from_entity(store.add_node(node_data.template_id, position))

@router.delete("/canvas/nodes/{node_id}", response_model=OperationResponse)
async def delete_node(node_id: str, store: GraphStore = Depends(get_graph_store)):
    """
    Remove a node and every edge attached to it. Unknown ids are ignored.
    """
    store.delete_node(node_id)
    return OperationResponse(success=True)

@router.put("/canvas/nodes/{node_id}/config", response_model=OperationResponse)
async def update_node_config(
    node_id: str,
    update: NodeConfigUpdate,
    store: GraphStore = Depends(get_graph_store),
):
    """
    Set one configuration entry on a node. Unknown ids are ignored.
    """
    store.update_node_config(node_id, update.key, update.value)
    return OperationResponse(success=True)

@router.put("/canvas/nodes/{node_id}/position", response_model=OperationResponse)
async def move_node(
    node_id: str,
    position: PositionSchema,
    store: GraphStore = Depends(get_graph_store),
):
    """
    Move a node on the canvas. Unknown ids are ignored.
    """
    store.move_node(node_id, Position(position.x, position.y))
    return OperationResponse(success=True)

@router.post("/canvas/edges", response_model=EdgeSchema, status_code=201)
async def connect_nodes(edge_data: EdgeCreate, store: GraphStore = Depends(get_graph_store)):
    """
    Connect two nodes on the canvas.
    """
    edge = store.connect(
        edge_data.source,
        edge_data.target,
        source_handle=edge_data.source_handle,
        target_handle=edge_data.target_handle,
        kind=edge_data.type,
    )
    return EdgeSchema.from_entity(edge)

@router.delete("/canvas/edges/{edge_id}", response_model=OperationResponse)
async def delete_edge(edge_id: str, store: GraphStore = Depends(get_graph_store)):
    """
    Remove a single edge. Unknown ids are ignored.
    """
    store.delete_edge(edge_id)
    return OperationResponse(success=True)

@router.delete("/canvas", response_model=OperationResponse)
async def clear_canvas(store: GraphStore = Depends(get_graph_store)):
    """
    Remove all blocks and connections from the canvas.
    """
    store.clear_canvas()
    return OperationResponse(success=True)

@router.post("/canvas/save", response_model=SketchResponse)
async def save_canvas(store: GraphStore = Depends(get_graph_store)):
    """
    Commit the canvas into the current sketch.
    """
    return SketchResponse.from_entity(store.save_current())
