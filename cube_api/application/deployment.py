"""Staged deployment of the current sketch to a device."""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import List, Optional

from cube_api.application.device_registry import DeviceRegistry
from cube_api.application.graph_store import GraphStore
from cube_api.application.scheduling import ScheduledTask
from cube_api.domain.entities import (
    DeploymentLogEntry,
    DeploymentRun,
    DeploymentStatus,
    DeviceStatus,
    new_id,
)
from cube_api.domain.errors import AlreadyDeploying, NoActiveSketch
from cube_api.domain.events import (
    DeploymentFinished,
    DeploymentStarted,
    DomainEventPublisher,
)

logger = logging.getLogger(__name__)

CONNECT_STEP = "Connecting to device..."

DEPLOYMENT_STEPS = (
    "Initializing deployment...",
    "Validating sketch configuration...",
    CONNECT_STEP,
    "Uploading workflow to device...",
    "Configuring sensor inputs...",
    "Setting up actuator outputs...",
    "Testing connections...",
    "Deployment completed successfully!",
)


class DeploymentPipeline:
    """Linear idle -> deploying -> success/error state machine.

    Each run emits the fixed step messages one ``step_seconds`` apart into its
    own append-only log. A run that is cancelled, exceeds the sum of its step
    delays plus ``timeout_grace``, fails inside a step, or finds its device
    offline when connecting ends in ``ERROR`` with its earlier log lines kept.
    """

    def __init__(
        self,
        graph_store: GraphStore,
        registry: DeviceRegistry,
        publisher: DomainEventPublisher,
        step_seconds: float = 1.0,
        timeout_grace: float = 5.0,
    ) -> None:
        self._graph_store = graph_store
        self._registry = registry
        self._publisher = publisher
        self._step_seconds = step_seconds
        self._timeout_grace = timeout_grace
        self._runs: List[DeploymentRun] = []
        self._task: Optional[ScheduledTask] = None

    @property
    def current_run(self) -> Optional[DeploymentRun]:
        return self._runs[-1] if self._runs else None

    @property
    def status(self) -> DeploymentStatus:
        run = self.current_run
        return run.status if run else DeploymentStatus.IDLE

    @property
    def logs(self) -> List[DeploymentLogEntry]:
        run = self.current_run
        return run.logs if run else []

    @property
    def runs(self) -> List[DeploymentRun]:
        return list(self._runs)

    @property
    def timeout(self) -> float:
        return self._step_seconds * len(DEPLOYMENT_STEPS) + self._timeout_grace

    def deploy(self, device_id: Optional[str] = None) -> DeploymentRun:
        """Start deploying the current sketch.

        While a run is in flight the call is ignored and that run is returned,
        even if its sketch has since been closed. Otherwise raises
        NoActiveSketch, leaving everything untouched, when no sketch is
        selected.
        """
        try:
            self._require_not_deploying()
        except AlreadyDeploying as exc:
            logger.info(f"Ignoring deploy: {exc}")
            return self.current_run
        sketch = self._graph_store.current
        if sketch is None:
            raise NoActiveSketch()

        device = self._registry.get(device_id) if device_id else self._registry.default()
        run = DeploymentRun(
            id=new_id(),
            sketch_id=sketch.id,
            device_id=device.id,
            started_at=datetime.now(),
        )
        self._task = ScheduledTask(self._execute(run), name=f"deployment-{run.id}")
        self._runs.append(run)
        self._publisher.publish(DeploymentStarted(
            event_id="",
            timestamp=None,
            aggregate_id=run.id,
            sketch_id=sketch.id,
            device_id=device.id,
        ))
        logger.info(f"Deploying sketch {sketch.id} to {device.id} (run {run.id})")
        return run

    def cancel(self, reason: str = "Deployment cancelled") -> bool:
        """Halt the in-flight run and move it to ERROR."""
        run = self.current_run
        if run is None or run.status != DeploymentStatus.DEPLOYING:
            return False
        self._fail(run, reason)
        if self._task is not None:
            self._task.cancel()
            self._task = None
        return True

    async def wait(self) -> None:
        """Wait for the in-flight run, if any, to reach a terminal state."""
        if self._task is not None:
            await self._task.wait()

    def _require_not_deploying(self) -> None:
        if self.status == DeploymentStatus.DEPLOYING:
            raise AlreadyDeploying("A deployment is already in progress")

    def _emit(self, run: DeploymentRun, message: str, level: str = "INFO") -> None:
        run.logs.append(DeploymentLogEntry(timestamp=datetime.now(), message=message, level=level))

    def _finish(self, run: DeploymentRun, status: DeploymentStatus, error: Optional[str] = None) -> None:
        run.status = status
        run.error = error
        run.finished_at = datetime.now()
        self._publisher.publish(DeploymentFinished(
            event_id="",
            timestamp=None,
            aggregate_id=run.id,
            sketch_id=run.sketch_id,
            device_id=run.device_id,
            status=status.value,
            error=error,
        ))

    def _fail(self, run: DeploymentRun, reason: str) -> None:
        if run.status != DeploymentStatus.DEPLOYING:
            return
        self._emit(run, reason, level="ERROR")
        self._finish(run, DeploymentStatus.ERROR, error=reason)
        logger.warning(f"Deployment run {run.id} failed: {reason}")

    async def _execute(self, run: DeploymentRun) -> None:
        try:
            await asyncio.wait_for(self._run_steps(run), timeout=self.timeout)
        except asyncio.TimeoutError:
            self._fail(run, "Deployment timed out")
        except asyncio.CancelledError:
            self._fail(run, "Deployment cancelled")
            raise
        except Exception as exc:
            logger.exception(f"Deployment run {run.id} raised")
            self._fail(run, f"Deployment failed: {exc}")

    async def _run_steps(self, run: DeploymentRun) -> None:
        for message in DEPLOYMENT_STEPS:
            await asyncio.sleep(self._step_seconds)
            if run.status != DeploymentStatus.DEPLOYING:
                return
            self._emit(run, message)
            if message == CONNECT_STEP:
                device = self._registry.get(run.device_id)
                if device.status == DeviceStatus.OFFLINE:
                    self._fail(run, f"Device {device.name} is offline")
                    return
                self._registry.touch(device.id)

        self._registry.touch(run.device_id)
        self._finish(run, DeploymentStatus.SUCCESS)
        logger.info(f"Deployment run {run.id} completed")
