from fastapi import APIRouter, Depends, Query
from cube_api.schemas.api_schemas import (
    DeploymentCancelResponse,
    DeploymentLogSchema,
    DeploymentRequest,
    DeploymentRunResponse,
    DeploymentStatusResponse,
)
from cube_api.dependencies import get_deployment
from cube_api.application.deployment import DeploymentPipeline
from typing import List, Optional

router = APIRouter()

@router.post("/deployment", response_model=DeploymentRunResponse, status_code=202)
async def deploy_current_sketch(
    deployment_request: Optional[DeploymentRequest] = None,
    pipeline: DeploymentPipeline = Depends(get_deployment),
):
    """
    Deploy the current sketch. While a run is in flight, that run is returned
    instead of starting another.
    """
    device_id = deployment_request.device_id if deployment_request else None
    run = pipeline.deploy(device_id)
    return DeploymentRunResponse.from_entity(run)

@router.get("/deployment", response_model=DeploymentStatusResponse)
async def get_deployment_status(pipeline: DeploymentPipeline = Depends(get_deployment)):
    """
    Status of the latest deployment run.
    """
    run = pipeline.current_run
    return DeploymentStatusResponse(
        status=pipeline.status,
        run=DeploymentRunResponse.from_entity(run) if run else None,
    )

@router.post("/deployment/cancel", response_model=DeploymentCancelResponse)
async def cancel_deployment(pipeline: DeploymentPipeline = Depends(get_deployment)):
    """
    Cancel the in-flight run; it ends in the error state.
    """
    cancelled = pipeline.cancel()
    return DeploymentCancelResponse(cancelled=cancelled, status=pipeline.status)

@router.get("/deployment/logs", response_model=List[DeploymentLogSchema])
async def get_deployment_logs(
    limit: Optional[int] = Query(None, ge=0, description="Only the most recent N entries"),
    pipeline: DeploymentPipeline = Depends(get_deployment),
):
    """
    Log of the latest deployment run, oldest first.
    """
    logs = pipeline.logs
    if limit is not None:
        logs = logs[-limit:] if limit else []
    return [DeploymentLogSchema.from_entity(entry) for entry in logs]

@router.get("/deployment/runs", response_model=List[DeploymentRunResponse])
async def list_deployment_runs(pipeline: DeploymentPipeline = Depends(get_deployment)):
    """
    Every deployment run of this process, oldest first.
    """
    return [DeploymentRunResponse.from_entity(run) for run in pipeline.runs]
