"""Domain events for decoupled side effects such as audit logging."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional
from uuid import uuid4

logger = logging.getLogger(__name__)


@dataclass
class DomainEvent:
    """Base class for all domain events."""
    event_id: str
    timestamp: Optional[datetime]
    aggregate_id: str

    def __post_init__(self):
        if not self.event_id:
            self.event_id = str(uuid4())
        if not self.timestamp:
            self.timestamp = datetime.now()


@dataclass
class SketchCreated(DomainEvent):
    """Raised when a new sketch is created."""
    name: str


@dataclass
class SketchSaved(DomainEvent):
    """Raised when a sketch's graph is committed."""
    node_count: int
    edge_count: int


@dataclass
class SketchDeleted(DomainEvent):
    """Raised when a sketch is deleted."""
    name: str


@dataclass
class SimulationStarted(DomainEvent):
    """Raised when the simulation enters the running state."""


@dataclass
class SimulationStopped(DomainEvent):
    """Raised when the simulation returns to idle."""


@dataclass
class DeploymentStarted(DomainEvent):
    """Raised when a deployment run begins."""
    sketch_id: str
    device_id: str


@dataclass
class DeploymentFinished(DomainEvent):
    """Raised when a deployment run reaches success or error."""
    sketch_id: str
    device_id: str
    status: str
    error: Optional[str] = None


Handler = Callable[[DomainEvent], None]


class DomainEventPublisher:
    """Dispatches events to handlers subscribed by event type."""

    def __init__(self) -> None:
        self._subscribers: Dict[type, List[Handler]] = {}

    def subscribe(self, event_type: type[DomainEvent], handler: Handler) -> None:
        """Subscribe a handler to an event type."""
        self._subscribers.setdefault(event_type, []).append(handler)

    def publish(self, event: DomainEvent) -> None:
        """Publish an event to all subscribers."""
        for handler in self._subscribers.get(type(event), []):
            try:
                handler(event)
            except Exception:
                # Handler failures must not fail the main operation
                logger.exception(f"Event handler error for {type(event).__name__}")

    def clear_subscribers(self) -> None:
        """Clear all subscribers (useful for testing)."""
        self._subscribers = {}
