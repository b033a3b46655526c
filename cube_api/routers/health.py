"""
Health check endpoints for the API.
"""
from fastapi import APIRouter, Depends, Request
from typing import Dict, Any
from datetime import datetime

from cube_api.dependencies import Runtime, get_runtime
from cube_api.domain.entities import DeviceStatus

router = APIRouter()

@router.get("/health")
async def health_check(request: Request) -> Dict[str, Any]:
    """
    Basic health check endpoint.
    Returns API status and version information.
    """
    settings = request.app.state.settings
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT
    }

@router.get("/health/runtime")
async def runtime_health(runtime: Runtime = Depends(get_runtime)) -> Dict[str, Any]:
    """
    State of the in-process runtime: sketches, devices, simulation and deployment.
    """
    devices = runtime.devices.list()
    current = runtime.graph_store.current
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "sketches": len(runtime.graph_store.list_sketches()),
        "current_sketch": current.id if current else None,
        "devices": {
            "total": len(devices),
            "online": sum(1 for device in devices if device.status == DeviceStatus.ONLINE),
        },
        "simulation": {
            "state": runtime.simulation.state.value,
            "log_entries": len(runtime.simulation.data.logs),
        },
        "deployment": {
            "status": runtime.deployment.status.value,
            "runs": len(runtime.deployment.runs),
        },
    }
