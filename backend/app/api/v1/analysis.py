from fastapi import APIRouter, HTTPException, Query, status
from app.api.v1.deps import CoordinatorDep, PersistenceDep, StoreDep, commit, require_project
from app.core.exceptions import AnalysisPreconditionError
from app.schemas import (
    AnalysisLog,
    GetResultsResponse,
    MonitoringResponse,
    StartAnalysisBody,
    StartAnalysisRequest,
    StartAnalysisResponse,
    StopAnalysisResponse,
)
from app.services.request_converter import convert_project_to_api_request

router = APIRouter()


@router.post("/{project_id}/start", response_model=StartAnalysisResponse)
async def start_analysis(
    project_id: str,
    body: StartAnalysisBody,
    store: StoreDep,
    persistence: PersistenceDep,
    coordinator: CoordinatorDep,
):
    require_project(store, project_id)
    try:
        response = await coordinator.start(
            project_id, body.data, body.start_date, body.end_date, body.auto_update
        )
    except AnalysisPreconditionError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if response.success:
        await commit(store, persistence)
    return response


@router.post("/{project_id}/stop", response_model=StopAnalysisResponse)
async def stop_analysis(
    project_id: str,
    store: StoreDep,
    persistence: PersistenceDep,
    coordinator: CoordinatorDep,
):
    require_project(store, project_id)
    try:
        response = await coordinator.stop(project_id)
    except AnalysisPreconditionError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if response.success:
        await commit(store, persistence)
    return response


@router.get("/{project_id}/monitoring", response_model=MonitoringResponse)
async def get_monitoring(
    project_id: str,
    store: StoreDep,
    persistence: PersistenceDep,
    coordinator: CoordinatorDep,
):
    require_project(store, project_id)
    response = await coordinator.refresh(project_id)
    if response.success:
        await commit(store, persistence)
    return response


@router.get("/{project_id}/results", response_model=GetResultsResponse)
async def get_results(project_id: str, store: StoreDep, coordinator: CoordinatorDep):
    require_project(store, project_id)
    return await coordinator.results(project_id)


@router.get("/{project_id}/request", response_model=StartAnalysisRequest)
async def preview_request(project_id: str, store: StoreDep):
    """The wire request that ``start`` would send with the project's current scope."""
    project = require_project(store, project_id)
    return await convert_project_to_api_request(project)


@router.get("/logs", response_model=list[AnalysisLog])
async def list_logs(store: StoreDep, project_id: str | None = Query(default=None)):
    return store.list_logs(project_id)
