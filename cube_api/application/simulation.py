"""Time-stepped simulation of sensor readings and actuator states."""
from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from cube_api.application.device_registry import DeviceRegistry
from cube_api.application.scheduling import ScheduledTask
from cube_api.domain.entities import (
    LogEntry,
    LogLevel,
    SimulationData,
    SimulationState,
    new_id,
)
from cube_api.domain.errors import AlreadyRunning, NotFoundError, UnknownActuator
from cube_api.domain.events import (
    DomainEventPublisher,
    SimulationStarted,
    SimulationStopped,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SensorProfile:
    """Range and drift of one simulated sensor type.

    Sensors with ``event_probability`` set are redrawn each tick as a 0/1
    event instead of drifting.
    """
    minimum: float
    maximum: float
    step: float = 0.0
    unit: str = ""
    event_probability: Optional[float] = None

    def clamp(self, value: float) -> float:
        return min(max(value, self.minimum), self.maximum)


SENSOR_PROFILES: Dict[str, SensorProfile] = {
    "moisture": SensorProfile(0, 100, step=10, unit="%"),
    "temperature": SensorProfile(15, 35, step=2, unit="°C"),
    "humidity": SensorProfile(20, 80, step=5, unit="%"),
    "light": SensorProfile(0, 1000, step=100, unit="lux"),
    "motion": SensorProfile(0, 1, event_probability=0.2),
}

BASELINE_SENSOR_VALUES: Dict[str, float] = {
    "moisture": 65,
    "temperature": 24.5,
    "humidity": 45,
    "light": 350,
    "motion": 0,
}

# (off-like, on-like) token per actuator
ACTUATOR_STATES: Dict[str, Tuple[str, str]] = {
    "pump": ("off", "on"),
    "led": ("off", "on"),
    "motor": ("stopped", "running"),
    "fan": ("off", "on"),
}

BASELINE_ACTUATOR_STATES: Dict[str, str] = {
    name: off for name, (off, _) in ACTUATOR_STATES.items()
}

RANDOM_LOG_MESSAGES = (
    "Moisture level updated",
    "Temperature reading taken",
    "Motion detected",
    "Light level changed",
    "System status check",
)


class SimulationEngine:
    """Idle/running state machine driving synthetic sensor data.

    While running, ``tick`` is invoked every ``tick_seconds`` by a scheduled
    task on the event loop. Each tick is one synchronous step, so its writes
    to the device registry are never interleaved with another step.
    """

    def __init__(
        self,
        registry: DeviceRegistry,
        publisher: DomainEventPublisher,
        tick_seconds: float = 2.0,
        log_probability: float = 0.3,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._registry = registry
        self._publisher = publisher
        self._tick_seconds = tick_seconds
        self._log_probability = log_probability
        self._rng = rng or random.Random()
        self._task: Optional[ScheduledTask] = None
        self._data = SimulationData(
            sensor_values=dict(BASELINE_SENSOR_VALUES),
            actuator_states=dict(BASELINE_ACTUATOR_STATES),
        )

    @property
    def data(self) -> SimulationData:
        return self._data

    @property
    def state(self) -> SimulationState:
        return SimulationState.RUNNING if self._data.is_running else SimulationState.IDLE

    @property
    def tick_seconds(self) -> float:
        return self._tick_seconds

    def start(self) -> bool:
        """Enter the running state; a no-op returning False if already running."""
        try:
            self._require_idle()
        except AlreadyRunning as exc:
            logger.info(f"Ignoring start: {exc}")
            return False

        self._task = ScheduledTask(self._run(), name="simulation-tick")
        self._data.is_running = True
        self._append_log("Simulation started", source="System")
        self._publisher.publish(SimulationStarted(
            event_id="", timestamp=None, aggregate_id="simulation"
        ))
        logger.info(f"Simulation started (tick every {self._tick_seconds}s)")
        return True

    def stop(self) -> bool:
        """Return to idle; no scheduled tick runs after this returns."""
        if not self._data.is_running:
            logger.debug("Ignoring stop: simulation is not running")
            return False
        self._cancel_task()
        self._data.is_running = False
        self._append_log("Simulation stopped", source="System")
        self._publisher.publish(SimulationStopped(
            event_id="", timestamp=None, aggregate_id="simulation"
        ))
        logger.info("Simulation stopped")
        return True

    def tick(self) -> bool:
        """Advance every sensor by one step; returns False while idle."""
        if not self._data.is_running:
            return False

        now = datetime.now()
        values = self._data.sensor_values
        for name, profile in SENSOR_PROFILES.items():
            current = values.get(name, BASELINE_SENSOR_VALUES[name])
            values[name] = self._next_value(profile, current)
            self._registry.record_sensor_value(name, values[name], now)

        if self._rng.random() < self._log_probability:
            self._append_log(self._rng.choice(RANDOM_LOG_MESSAGES), source="Simulation")
        return True

    def reset(self) -> None:
        """Restore baseline sensor values and actuator states.

        Running state and log history are left as they are.
        """
        now = datetime.now()
        self._data.sensor_values = dict(BASELINE_SENSOR_VALUES)
        self._data.actuator_states = dict(BASELINE_ACTUATOR_STATES)
        for name, value in BASELINE_SENSOR_VALUES.items():
            self._registry.record_sensor_value(name, value, now)
        for name, state in BASELINE_ACTUATOR_STATES.items():
            self._registry.record_actuator_state(name, state, now)

    def toggle_actuator(self, name: str) -> str:
        """Flip an actuator between its off-like and on-like token."""
        if name not in ACTUATOR_STATES:
            raise UnknownActuator(name)
        off, on = ACTUATOR_STATES[name]
        current = self._data.actuator_states.get(name, off)
        new_state = on if current == off else off

        self._data.actuator_states[name] = new_state
        self._registry.record_actuator_state(name, new_state)
        self._append_log(f"{name} turned {new_state}", source="Simulation")
        return new_state

    def set_sensor_value(self, name: str, value: float) -> float:
        """Override a sensor reading by hand, clamped to its range."""
        profile = SENSOR_PROFILES.get(name)
        if profile is None:
            raise NotFoundError(f"Sensor not found: {name}")
        clamped = profile.clamp(value)
        self._data.sensor_values[name] = clamped
        self._registry.record_sensor_value(name, clamped)
        return clamped

    def recent_logs(self, limit: Optional[int] = None) -> List[LogEntry]:
        logs = self._data.logs
        if limit is None:
            return list(logs)
        if limit <= 0:
            return []
        return logs[-limit:]

    def _require_idle(self) -> None:
        if self._data.is_running:
            raise AlreadyRunning("Simulation is already running")

    def _next_value(self, profile: SensorProfile, current: float) -> float:
        if profile.event_probability is not None:
            return 1 if self._rng.random() < profile.event_probability else 0
        drift = self._rng.uniform(-profile.step, profile.step) / 2
        return profile.clamp(current + drift)

    def _append_log(self, message: str, source: str, level: LogLevel = LogLevel.INFO) -> LogEntry:
        entry = LogEntry(
            id=new_id(),
            timestamp=datetime.now(),
            level=level,
            message=message,
            source=source,
        )
        self._data.logs.append(entry)
        return entry

    def _cancel_task(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._tick_seconds)
            if not self._data.is_running:
                return
            try:
                self.tick()
            except Exception:
                logger.exception("Simulation tick failed; stopping simulation")
                self._task = None
                self._data.is_running = False
                self._append_log("Simulation tick failed", source="System", level=LogLevel.ERROR)
                self._publisher.publish(SimulationStopped(
                    event_id="", timestamp=None, aggregate_id="simulation"
                ))
                return
