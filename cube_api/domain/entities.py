"""Internal domain entities for sketches, devices and runtime state."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple, Union
from uuid import uuid4

# Numeric or text; the Python type is the tag.
ConfigValue = Union[int, float, str]


def new_id() -> str:
    return str(uuid4())


class BlockKind(str, Enum):
    SENSOR = "sensor"
    ACTUATOR = "actuator"
    LOGIC = "logic"
    AI = "ai"


class EdgeKind(str, Enum):
    INPUT = "input"
    OUTPUT = "output"
    LOGIC = "logic"


class DeviceStatus(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"


class LogLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class SimulationState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


class DeploymentStatus(str, Enum):
    IDLE = "idle"
    DEPLOYING = "deploying"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class BlockTemplate:
    """Catalog entry a node is instantiated from."""
    id: str
    kind: BlockKind
    category: str
    label: str
    description: str
    icon: str
    default_config: Mapping[str, ConfigValue]
    inputs: Tuple[str, ...] = ()
    outputs: Tuple[str, ...] = ()


@dataclass
class Position:
    x: float = 0.0
    y: float = 0.0


@dataclass
class Node:
    id: str
    template_id: str
    kind: BlockKind
    label: str
    category: str
    inputs: Tuple[str, ...]
    outputs: Tuple[str, ...]
    config: Dict[str, ConfigValue]
    position: Position

    @classmethod
    def from_template(cls, template: BlockTemplate, position: Position) -> Node:
        return cls(
            id=new_id(),
            template_id=template.id,
            kind=template.kind,
            label=template.label,
            category=template.category,
            inputs=tuple(template.inputs),
            outputs=tuple(template.outputs),
            config=dict(template.default_config),
            position=Position(position.x, position.y),
        )


@dataclass
class Edge:
    id: str
    source: str
    target: str
    source_handle: Optional[str] = None
    target_handle: Optional[str] = None
    kind: EdgeKind = EdgeKind.LOGIC


@dataclass
class Sketch:
    id: str
    name: str
    description: str
    created_at: datetime
    updated_at: datetime
    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)


@dataclass
class Sensor:
    id: str
    type: str
    value: float
    unit: str
    timestamp: datetime


@dataclass
class Actuator:
    id: str
    type: str
    state: str
    timestamp: datetime


@dataclass
class Device:
    id: str
    name: str
    type: str
    status: DeviceStatus
    last_seen: datetime
    sensors: List[Sensor] = field(default_factory=list)
    actuators: List[Actuator] = field(default_factory=list)


@dataclass(frozen=True)
class LogEntry:
    id: str
    timestamp: datetime
    level: LogLevel
    message: str
    source: str


@dataclass
class SimulationData:
    is_running: bool = False
    sensor_values: Dict[str, float] = field(default_factory=dict)
    actuator_states: Dict[str, str] = field(default_factory=dict)
    logs: List[LogEntry] = field(default_factory=list)


@dataclass(frozen=True)
class DeploymentLogEntry:
    timestamp: datetime
    message: str
    level: str = "INFO"


@dataclass
class DeploymentRun:
    """One deployment attempt of a sketch to a device."""
    id: str
    sketch_id: str
    device_id: str
    started_at: datetime
    status: DeploymentStatus = DeploymentStatus.DEPLOYING
    finished_at: Optional[datetime] = None
    error: Optional[str] = None
    logs: List[DeploymentLogEntry] = field(default_factory=list)
