from __future__ import annotations

import logging
import random

from fastapi import Depends, Request

from cube_api.config import Settings
from cube_api.domain.catalog import BlockCatalog
from cube_api.domain.events import DomainEventPublisher
from cube_api.application.graph_store import GraphStore
from cube_api.application.device_registry import DeviceRegistry
from cube_api.application.simulation import SimulationEngine
from cube_api.application.deployment import DeploymentPipeline

logger = logging.getLogger(__name__)


class Runtime:
    """The state objects one application instance owns.

    Route handlers reach them through the providers below; nothing else
    holds a reference to them.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.publisher = DomainEventPublisher()
        self.catalog = BlockCatalog()
        self.graph_store = GraphStore(self.catalog, self.publisher)
        self.devices = DeviceRegistry()
        self.simulation = SimulationEngine(
            registry=self.devices,
            publisher=self.publisher,
            tick_seconds=settings.SIMULATION_TICK_SECONDS,
            log_probability=settings.SIMULATION_LOG_PROBABILITY,
            rng=random.Random(settings.SIMULATION_SEED),
        )
        self.deployment = DeploymentPipeline(
            graph_store=self.graph_store,
            registry=self.devices,
            publisher=self.publisher,
            step_seconds=settings.DEPLOY_STEP_SECONDS,
            timeout_grace=settings.DEPLOY_TIMEOUT_GRACE_SECONDS,
        )

    def shutdown(self) -> None:
        """Stop background steps so no task outlives the event loop."""
        self.simulation.stop()
        if self.deployment.cancel("Deployment cancelled: service shutting down"):
            logger.warning("In-flight deployment cancelled on shutdown")


def get_runtime(request: Request) -> Runtime:
    return request.app.state.runtime


def get_catalog(runtime: Runtime = Depends(get_runtime)) -> BlockCatalog:
    return runtime.catalog


def get_graph_store(runtime: Runtime = Depends(get_runtime)) -> GraphStore:
    return runtime.graph_store


def get_device_registry(runtime: Runtime = Depends(get_runtime)) -> DeviceRegistry:
    return runtime.devices


def get_simulation(runtime: Runtime = Depends(get_runtime)) -> SimulationEngine:
    return runtime.simulation


def get_deployment(runtime: Runtime = Depends(get_runtime)) -> DeploymentPipeline:
    return runtime.deployment
