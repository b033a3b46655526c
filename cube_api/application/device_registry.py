"""Registry of the devices the simulation and deployment flows act on."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from cube_api.domain.entities import Actuator, Device, DeviceStatus, Sensor
from cube_api.domain.errors import NotFoundError

logger = logging.getLogger(__name__)


def default_devices() -> List[Device]:
    """The cube every fresh process starts with."""
    now = datetime.now()
    return [
        Device(
            id="cube-001",
            name="RuBEk Cube #001",
            type="cube",
            status=DeviceStatus.ONLINE,
            last_seen=now,
            sensors=[
                Sensor(id="temp-001", type="temperature", value=24.5, unit="°C", timestamp=now),
                Sensor(id="moisture-001", type="moisture", value=65, unit="%", timestamp=now),
            ],
            actuators=[
                Actuator(id="pump-001", type="pump", state="off", timestamp=now),
                Actuator(id="led-001", type="led", state="off", timestamp=now),
            ],
        )
    ]


class DeviceRegistry:
    """Owns device records; every mutation is a single synchronous step."""

    def __init__(self, devices: Optional[Iterable[Device]] = None) -> None:
        seed = default_devices() if devices is None else devices
        self._devices: Dict[str, Device] = {device.id: device for device in seed}

    def list(self) -> List[Device]:
        return list(self._devices.values())

    def get(self, device_id: str) -> Device:
        device = self._devices.get(device_id)
        if device is None:
            raise NotFoundError(f"Device not found: {device_id}")
        return device

    def default(self) -> Device:
        if not self._devices:
            raise NotFoundError("No devices registered")
        return next(iter(self._devices.values()))

    def record_sensor_value(self, sensor_type: str, value: float, at: datetime | None = None) -> int:
        """Write a reading onto every sensor of that type; returns how many matched."""
        at = at or datetime.now()
        updated = 0
        for device in self._devices.values():
            for sensor in device.sensors:
                if sensor.type == sensor_type:
                    sensor.value = value
                    sensor.timestamp = at
                    updated += 1
        return updated

    def record_actuator_state(self, actuator_type: str, state: str, at: datetime | None = None) -> int:
        """Write a state onto every actuator of that type; returns how many matched."""
        at = at or datetime.now()
        updated = 0
        for device in self._devices.values():
            for actuator in device.actuators:
                if actuator.type == actuator_type:
                    actuator.state = state
                    actuator.timestamp = at
                    updated += 1
        return updated

    def set_status(self, device_id: str, status: DeviceStatus) -> Device:
        device = self.get(device_id)
        if device.status != status:
            logger.info(f"Device {device_id} is now {status.value}")
        device.status = status
        if status == DeviceStatus.ONLINE:
            device.last_seen = datetime.now()
        return device

    def touch(self, device_id: str) -> Device:
        device = self.get(device_id)
        device.last_seen = datetime.now()
        return device
