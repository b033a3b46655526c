"""Event handlers for domain events."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cube_api.domain.events import (
    DeploymentFinished,
    DeploymentStarted,
    SimulationStarted,
    SimulationStopped,
    SketchCreated,
    SketchDeleted,
    SketchSaved,
)

if TYPE_CHECKING:
    from cube_api.domain.events import DomainEventPublisher

logger = logging.getLogger(__name__)


class AuditLogHandler:
    """Logs domain events for an audit trail."""

    def handle_sketch_created(self, event: SketchCreated) -> None:
        logger.info(f"[AUDIT] Sketch created: {event.aggregate_id} - {event.name}")

    def handle_sketch_saved(self, event: SketchSaved) -> None:
        logger.info(
            f"[AUDIT] Sketch saved: {event.aggregate_id} "
            f"({event.node_count} nodes, {event.edge_count} edges)"
        )

    def handle_sketch_deleted(self, event: SketchDeleted) -> None:
        logger.info(f"[AUDIT] Sketch deleted: {event.aggregate_id} - {event.name}")

    def handle_simulation_started(self, event: SimulationStarted) -> None:
        logger.info("[AUDIT] Simulation started")

    def handle_simulation_stopped(self, event: SimulationStopped) -> None:
        logger.info("[AUDIT] Simulation stopped")

    def handle_deployment_started(self, event: DeploymentStarted) -> None:
        logger.info(
            f"[AUDIT] Deployment {event.aggregate_id} started: "
            f"sketch {event.sketch_id} -> device {event.device_id}"
        )

    def handle_deployment_finished(self, event: DeploymentFinished) -> None:
        if event.error:
            logger.warning(f"[AUDIT] Deployment {event.aggregate_id} {event.status}: {event.error}")
        else:
            logger.info(f"[AUDIT] Deployment {event.aggregate_id} {event.status}")


def register_event_handlers(publisher: DomainEventPublisher) -> None:
    """Register all event handlers with the publisher."""
    audit = AuditLogHandler()

    publisher.subscribe(SketchCreated, audit.handle_sketch_created)
    publisher.subscribe(SketchSaved, audit.handle_sketch_saved)
    publisher.subscribe(SketchDeleted, audit.handle_sketch_deleted)
    publisher.subscribe(SimulationStarted, audit.handle_simulation_started)
    publisher.subscribe(SimulationStopped, audit.handle_simulation_stopped)
    publisher.subscribe(DeploymentStarted, audit.handle_deployment_started)
    publisher.subscribe(DeploymentFinished, audit.handle_deployment_finished)
