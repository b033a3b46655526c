from fastapi import APIRouter, Depends
from cube_api.schemas.api_schemas import (
    CurrentSketchUpdate,
    GraphStructure,
    SketchCreate,
    SketchDeleteResponse,
    SketchResponse,
    SketchUpdate,
)
from cube_api.dependencies import get_catalog, get_graph_store
from cube_api.application.graph_store import GraphStore
from cube_api.domain.catalog import BlockCatalog
from cube_api.domain.errors import NotFoundError
from typing import List, Optional

router = APIRouter()

@router.post("/sketches", response_model=SketchResponse, status_code=201)
async def create_sketch(
    sketch_data: SketchCreate,
    store: GraphStore = Depends(get_graph_store),
):
    """
    Create an empty sketch. It does not become the current sketch.
    """
    name = sketch_data.name.strip() if sketch_data.name else None
    sketch = store.create_sketch(name=name, description=sketch_data.description)
    return SketchResponse.from_entity(sketch)

@router.get("/sketches", response_model=List[SketchResponse])
async def list_sketches(store: GraphStore = Depends(get_graph_store)):
    """
    Retrieve all sketches.
    """
    return [SketchResponse.from_entity(sketch) for sketch in store.list_sketches()]

@router.get("/sketches/current", response_model=Optional[SketchResponse])
async def get_current_sketch(store: GraphStore = Depends(get_graph_store)):
    """
    The sketch currently open for editing, or null.
    """
    sketch = store.current
    return SketchResponse.from_entity(sketch) if sketch else None

@router.put("/sketches/current", response_model=Optional[SketchResponse])
async def set_current_sketch(
    update: CurrentSketchUpdate,
    store: GraphStore = Depends(get_graph_store),
):
    """
    Switch the editing focus; loads the sketch's graph onto the canvas.
    """
    sketch = store.set_current(update.sketch_id)
    return SketchResponse.from_entity(sketch) if sketch else None

@router.get("/sketches/{sketch_id}", response_model=SketchResponse)
async def get_sketch(sketch_id: str, store: GraphStore = Depends(get_graph_store)):
    """
    Get a specific sketch with its committed graph.
    """
    return SketchResponse.from_entity(store.get_sketch(sketch_id))

@router.patch("/sketches/{sketch_id}", response_model=SketchResponse)
async def update_sketch(
    sketch_id: str,
    sketch_data: SketchUpdate,
    store: GraphStore = Depends(get_graph_store),
):
    """
    Rename a sketch or change its description.
    """
    name = sketch_data.name.strip() if sketch_data.name else None
    sketch = store.update_sketch(sketch_id, name=name, description=sketch_data.description)
    return SketchResponse.from_entity(sketch)

@router.put("/sketches/{sketch_id}/graph", response_model=SketchResponse)
async def save_sketch_graph(
    sketch_id: str,
    graph: GraphStructure,
    store: GraphStore = Depends(get_graph_store),
    catalog: BlockCatalog = Depends(get_catalog),
):
    """
    Replace a sketch's nodes and edges in one step.
    """
    store.get_sketch(sketch_id)
    nodes = [node.to_entity(catalog) for node in graph.nodes]
    edges = [edge.to_entity() for edge in graph.edges]
    return SketchResponse.from_entity(store.save(sketch_id, nodes, edges))

@router.delete("/sketches/{sketch_id}", response_model=SketchDeleteResponse)
async def delete_sketch(sketch_id: str, store: GraphStore = Depends(get_graph_store)):
    """
    Delete a sketch; clears the editing focus if it was current.
    """
    if not store.delete_sketch(sketch_id):
        raise NotFoundError(f"Sketch not found: {sketch_id}")
    return SketchDeleteResponse(success=True, sketch_id=sketch_id)
