from fastapi import APIRouter, Depends
from cube_api.schemas.api_schemas import DeviceResponse, DeviceStatusUpdate
from cube_api.dependencies import get_device_registry
from cube_api.application.device_registry import DeviceRegistry
from typing import List

router = APIRouter()

@router.get("/devices", response_model=List[DeviceResponse])
async def list_devices(registry: DeviceRegistry = Depends(get_device_registry)):
    """
    All registered devices with their latest sensor and actuator readings.
    """
    return [DeviceResponse.from_entity(device) for device in registry.list()]

@router.get("/devices/{device_id}", response_model=DeviceResponse)
async def get_device(device_id: str, registry: DeviceRegistry = Depends(get_device_registry)):
    """
    Get a specific device.
    """
    return DeviceResponse.from_entity(registry.get(device_id))

@router.put("/devices/{device_id}/status", response_model=DeviceResponse)
async def set_device_status(
    device_id: str,
    update: DeviceStatusUpdate,
    registry: DeviceRegistry = Depends(get_device_registry),
):
    """
    Mark a device online or offline.
    """
    return DeviceResponse.from_entity(registry.set_status(device_id, update.status))
