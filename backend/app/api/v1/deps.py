from typing import Annotated
from fastapi import Depends, HTTPException, Request, status
from app.schemas.analysis import AnalysisProject
from app.services.analysis_client import AnalysisClient
from app.services.analysis_service import AnalysisCoordinator
from app.services.analysis_store import AnalysisStore
from app.services.storage import StatePersistence


def get_store(request: Request) -> AnalysisStore:
    return request.app.state.store


def get_persistence(request: Request) -> StatePersistence:
    return request.app.state.persistence


def get_client(request: Request) -> AnalysisClient:
    return request.app.state.analysis_client


def get_coordinator(
    store: Annotated[AnalysisStore, Depends(get_store)],
    client: Annotated[AnalysisClient, Depends(get_client)],
) -> AnalysisCoordinator:
    return AnalysisCoordinator(store, client)


StoreDep = Annotated[AnalysisStore, Depends(get_store)]
PersistenceDep = Annotated[StatePersistence, Depends(get_persistence)]
CoordinatorDep = Annotated[AnalysisCoordinator, Depends(get_coordinator)]


def require_project(store: AnalysisStore, project_id: str) -> AnalysisProject:
    project = store.get_project(project_id)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project


def require_found(entity, detail: str):
    if entity is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
    return entity


async def commit(store: AnalysisStore, persistence: StatePersistence) -> None:
    await persistence.save(store.snapshot())
