"""
API Request/Response Schemas using Pydantic.

Structure of HTTP requests and responses for Cube API. Fields are exposed
under camelCase names (``sourceHandle``, ``createdAt``, ...) so canvas and
monitoring clients see the same field names as the sketch data model; either
spelling is accepted on input.
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr
from pydantic.alias_generators import to_camel

from cube_api.domain.catalog import BlockCatalog
from cube_api.domain.entities import (
    BlockKind,
    BlockTemplate,
    DeploymentLogEntry,
    DeploymentRun,
    DeploymentStatus,
    Device,
    DeviceStatus,
    Edge as EdgeEntity,
    EdgeKind,
    LogEntry,
    LogLevel,
    Node as NodeEntity,
    Position,
    SimulationState,
    Sketch,
)

# Numeric or text only; strict types keep 1 / 1.0 / "1" / true distinct.
ConfigScalar = Union[StrictInt, StrictFloat, StrictStr]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Block schemas
class BlockTemplateResponse(CamelModel):
    id: str = Field(..., description="Unique template identifier")
    type: BlockKind = Field(..., description="Block kind: sensor, actuator, logic or ai")
    category: str = Field(..., description="Grouping label in the block library")
    label: str
    description: str
    icon: str
    default_config: Dict[str, ConfigScalar] = Field(default_factory=dict)
    inputs: List[str] = Field(default_factory=list, description="Input handle names")
    outputs: List[str] = Field(default_factory=list, description="Output handle names")

    @classmethod
    def from_entity(cls, template: BlockTemplate) -> BlockTemplateResponse:
        return cls(
            id=template.id,
            type=template.kind,
            category=template.category,
            label=template.label,
            description=template.description,
            icon=template.icon,
            default_config=dict(template.default_config),
            inputs=list(template.inputs),
            outputs=list(template.outputs),
        )


# Graph schemas
class PositionSchema(CamelModel):
    x: float = 0.0
    y: float = 0.0


class Node(CamelModel):
    id: str = Field(..., description="Node id, unique within its sketch")
    template_id: str = Field(..., description="Catalog template the node was created from")
    type: Optional[BlockKind] = Field(None, description="Block kind; taken from the template if omitted")
    label: Optional[str] = None
    category: Optional[str] = None
    inputs: Optional[List[str]] = None
    outputs: Optional[List[str]] = None
    config: Dict[str, ConfigScalar] = Field(default_factory=dict)
    position: PositionSchema = Field(default_factory=PositionSchema)

    @classmethod
    def from_entity(cls, node: NodeEntity) -> Node:
        return cls(
            id=node.id,
            template_id=node.template_id,
            type=node.kind,
            label=node.label,
            category=node.category,
            inputs=list(node.inputs),
            outputs=list(node.outputs),
            config=dict(node.config),
            position=PositionSchema(x=node.position.x, y=node.position.y),
        )

    def to_entity(self, catalog: BlockCatalog) -> NodeEntity:
        """Build a node, filling anything omitted from its template."""
        template = catalog.get(self.template_id)
        return NodeEntity(
            id=self.id,
            template_id=template.id,
            kind=self.type or template.kind,
            label=self.label if self.label is not None else template.label,
            category=self.category if self.category is not None else template.category,
            inputs=tuple(self.inputs if self.inputs is not None else template.inputs),
            outputs=tuple(self.outputs if self.outputs is not None else template.outputs),
            config=dict(self.config),
            position=Position(self.position.x, self.position.y),
        )


class Edge(CamelModel):
    id: str = Field(..., description="Edge id, unique within its sketch")
    source: str = Field(..., description="ID of the source node")
    target: str = Field(..., description="ID of the target node")
    source_handle: Optional[str] = Field(None, description="Output handle on the source node")
    target_handle: Optional[str] = Field(None, description="Input handle on the target node")
    type: EdgeKind = Field(EdgeKind.LOGIC, description="Rendering hint only")

    @classmethod
    def from_entity(cls, edge: EdgeEntity) -> Edge:
        return cls(
            id=edge.id,
            source=edge.source,
            target=edge.target,
            source_handle=edge.source_handle,
            target_handle=edge.target_handle,
            type=edge.kind,
        )

    def to_entity(self) -> EdgeEntity:
        return EdgeEntity(
            id=self.id,
            source=self.source,
            target=self.target,
            source_handle=self.source_handle,
            target_handle=self.target_handle,
            kind=self.type,
        )


class GraphStructure(CamelModel):
    nodes: List[Node] = Field(default_factory=list, description="Nodes in the graph")
    edges: List[Edge] = Field(default_factory=list, description="Edges connecting nodes")


# Sketch schemas
class SketchCreate(CamelModel):
    name: Optional[str] = Field(None, description="Name of the sketch", min_length=1, max_length=255)
    description: Optional[str] = Field(None, description="Optional description", max_length=1000)


class SketchUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)


class SketchResponse(CamelModel):
    id: str
    name: str
    description: str
    nodes: List[Node] = Field(default_factory=list)
    edges: List[Edge] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, sketch: Sketch) -> SketchResponse:
        return cls(
            id=sketch.id,
            name=sketch.name,
            description=sketch.description,
            nodes=[Node.from_entity(node) for node in sketch.nodes],
            edges=[Edge.from_entity(edge) for edge in sketch.edges],
            created_at=sketch.created_at,
            updated_at=sketch.updated_at,
        )


class CurrentSketchUpdate(CamelModel):
    sketch_id: Optional[str] = Field(None, description="Sketch to edit, or null to clear the focus")


class SketchDeleteResponse(CamelModel):
    success: bool = Field(default=True, description="Whether the deletion was successful")
    sketch_id: str


# Canvas schemas
class CanvasResponse(CamelModel):
    sketch_id: Optional[str] = Field(None, description="Current sketch the canvas belongs to")
    nodes: List[Node] = Field(default_factory=list)
    edges: List[Edge] = Field(default_factory=list)


class NodeCreate(CamelModel):
    template_id: str = Field(..., description="Catalog id of the block to instantiate")
    position: PositionSchema = Field(default_factory=PositionSchema)


class EdgeCreate(CamelModel):
    source: str
    target: str
    source_handle: Optional[str] = None
    target_handle: Optional[str] = None
    type: EdgeKind = EdgeKind.LOGIC


class NodeConfigUpdate(CamelModel):
    key: str = Field(..., min_length=1)
    value: ConfigScalar


class OperationResponse(CamelModel):
    success: bool = Field(default=True, description="Whether the operation was successful")


# Device schemas
class SensorSchema(CamelModel):
    id: str
    type: str
    value: float
    unit: str
    timestamp: datetime


class ActuatorSchema(CamelModel):
    id: str
    type: str
    state: str
    timestamp: datetime


class DeviceResponse(CamelModel):
    id: str
    name: str
    type: str
    status: DeviceStatus
    last_seen: datetime
    sensors: List[SensorSchema] = Field(default_factory=list)
    actuators: List[ActuatorSchema] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, device: Device) -> DeviceResponse:
        return cls(
            id=device.id,
            name=device.name,
            type=device.type,
            status=device.status,
            last_seen=device.last_seen,
            sensors=[
                SensorSchema(id=s.id, type=s.type, value=s.value, unit=s.unit, timestamp=s.timestamp)
                for s in device.sensors
            ],
            actuators=[
                ActuatorSchema(id=a.id, type=a.type, state=a.state, timestamp=a.timestamp)
                for a in device.actuators
            ],
        )


class DeviceStatusUpdate(CamelModel):
    status: DeviceStatus


# Simulation schemas
class LogEntrySchema(CamelModel):
    id: str
    timestamp: datetime
    level: LogLevel
    message: str
    source: str

    @classmethod
    def from_entity(cls, entry: LogEntry) -> LogEntrySchema:
        return cls(
            id=entry.id,
            timestamp=entry.timestamp,
            level=entry.level,
            message=entry.message,
            source=entry.source,
        )


class SimulationResponse(CamelModel):
    is_running: bool
    state: SimulationState
    sensor_values: Dict[str, float] = Field(default_factory=dict)
    actuator_states: Dict[str, str] = Field(default_factory=dict)
    logs: List[LogEntrySchema] = Field(default_factory=list)


class SimulationTransition(CamelModel):
    changed: bool = Field(..., description="False when the request was a no-op")
    state: SimulationState


class SensorValueUpdate(CamelModel):
    value: float


class SensorValueResponse(CamelModel):
    name: str
    value: float


class ActuatorStateResponse(CamelModel):
    name: str
    state: str


# Deployment schemas
class DeploymentRequest(CamelModel):
    device_id: Optional[str] = Field(None, description="Target device; the first registered device if omitted")


class DeploymentLogSchema(CamelModel):
    timestamp: datetime
    level: str = "INFO"
    message: str

    @classmethod
    def from_entity(cls, entry: DeploymentLogEntry) -> DeploymentLogSchema:
        return cls(timestamp=entry.timestamp, level=entry.level, message=entry.message)


class DeploymentRunResponse(CamelModel):
    id: str
    sketch_id: str
    device_id: str
    status: DeploymentStatus
    started_at: datetime
    finished_at: Optional[datetime] = None
    error: Optional[str] = None
    logs: List[DeploymentLogSchema] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, run: DeploymentRun) -> DeploymentRunResponse:
        return cls(
            id=run.id,
            sketch_id=run.sketch_id,
            device_id=run.device_id,
            status=run.status,
            started_at=run.started_at,
            finished_at=run.finished_at,
            error=run.error,
            logs=[DeploymentLogSchema.from_entity(entry) for entry in run.logs],
        )


class DeploymentStatusResponse(CamelModel):
    status: DeploymentStatus
    run: Optional[DeploymentRunResponse] = None


class DeploymentCancelResponse(CamelModel):
    cancelled: bool
    status: DeploymentStatus


# Assistant schemas
class AssistantRequest(CamelModel):
    message: str = Field(..., min_length=1, description="User text")


class AssistantResponse(CamelModel):
    reply: str
