from fastapi import APIRouter, Depends, Query
from cube_api.schemas.api_schemas import (
    ActuatorStateResponse,
    LogEntrySchema,
    SensorValueResponse,
    SensorValueUpdate,
    SimulationResponse,
    SimulationTransition,
)
from cube_api.dependencies import get_simulation
from cube_api.application.simulation import SimulationEngine
from typing import List, Optional

router = APIRouter()

@router.get("/simulation", response_model=SimulationResponse)
async def get_simulation_state(
    log_limit: Optional[int] = Query(None, ge=0, alias="logLimit"),
    engine: SimulationEngine = Depends(get_simulation),
):
    """
    Current sensor values, actuator states and log history.
    """
    data = engine.data
    return SimulationResponse(
        is_running=data.is_running,
        state=engine.state,
        sensor_values=dict(data.sensor_values),
        actuator_states=dict(data.actuator_states),
        logs=[LogEntrySchema.from_entity(entry) for entry in engine.recent_logs(log_limit)],
    )

@router.post("/simulation/start", response_model=SimulationTransition)
async def start_simulation(engine: SimulationEngine = Depends(get_simulation)):
    """
    Start ticking simulated sensors. Starting twice is a no-op.
    """
    changed = engine.start()
    return SimulationTransition(changed=changed, state=engine.state)

@router.post("/simulation/stop", response_model=SimulationTransition)
async def stop_simulation(engine: SimulationEngine = Depends(get_simulation)):
    """
    Stop the simulation; no further tick runs.
    """
    changed = engine.stop()
    return SimulationTransition(changed=changed, state=engine.state)

@router.post("/simulation/reset", response_model=SimulationResponse)
async def reset_simulation(engine: SimulationEngine = Depends(get_simulation)):
    """
    Restore baseline sensor values and actuator states.
    """
    engine.reset()
    return await get_simulation_state(log_limit=None, engine=engine)

@router.post("/simulation/actuators/{name}/toggle", response_model=ActuatorStateResponse)
async def toggle_actuator(name: str, engine: SimulationEngine = Depends(get_simulation)):
    """
    Flip an actuator between its off and on state.
    """
    return ActuatorStateResponse(name=name, state=engine.toggle_actuator(name))

@router.put("/simulation/sensors/{name}", response_model=SensorValueResponse)
async def set_sensor_value(
    name: str,
    update: SensorValueUpdate,
    engine: SimulationEngine = Depends(get_simulation),
):
    """
    Override a simulated sensor value; clamped to the sensor's range.
    """
    return SensorValueResponse(name=name, value=engine.set_sensor_value(name, update.value))

@router.get("/simulation/logs", response_model=List[LogEntrySchema])
async def get_simulation_logs(
    limit: Optional[int] = Query(None, ge=0, description="Only the most recent N entries"),
    engine: SimulationEngine = Depends(get_simulation),
):
    """
    Simulation log, oldest first.
    """
    return [LogEntrySchema.from_entity(entry) for entry in engine.recent_logs(limit)]
