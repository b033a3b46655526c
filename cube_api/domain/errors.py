"""Domain error hierarchy for clean exception handling."""
from __future__ import annotations


class DomainError(Exception):
    """Base for all domain errors."""


class NotFoundError(DomainError):
    """Resource not found."""


class ValidationError(DomainError):
    """Invalid input or state."""


class ConflictError(DomainError):
    """Operation conflicts with the current state."""


class UnknownTemplate(NotFoundError):
    """Block instantiation references a template id that is not catalogued."""

    def __init__(self, template_id: str) -> None:
        super().__init__(f"Block template not found: {template_id}")
        self.template_id = template_id


class UnknownActuator(NotFoundError):
    """Actuator name has no known on/off token pair."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Actuator not found: {name}")
        self.name = name


class DanglingReference(ValidationError):
    """Edge references a node that is not in the graph."""

    def __init__(self, node_id: str) -> None:
        super().__init__(f"Edge endpoint references missing node: {node_id}")
        self.node_id = node_id


class InvalidHandle(ValidationError):
    """Edge handle is not declared by the node it is attached to."""


class NoActiveSketch(ConflictError):
    """Operation needs a current sketch but none is selected."""

    def __init__(self) -> None:
        super().__init__("No sketch is currently selected")


class AlreadyRunning(ConflictError):
    """Simulation start requested while it is already running."""


class AlreadyDeploying(ConflictError):
    """Deployment requested while another run is in flight."""
