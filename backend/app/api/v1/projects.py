from fastapi import APIRouter, HTTPException, status
from app.api.v1.deps import PersistenceDep, StoreDep, commit, require_project
from app.core.exceptions import AnalysisPreconditionError
from app.schemas import AnalysisProject, ProjectCreate, ProjectDetail, ProjectUpdate, SaveResult
from app.services.project_editor import reset_project, save_project, update_project as edit_project

router = APIRouter()


@router.post("", response_model=AnalysisProject, status_code=status.HTTP_201_CREATED)
async def create_project(project_data: ProjectCreate, store: StoreDep, persistence: PersistenceDep):
    project_id = store.create_project(project_data.name)
    await commit(store, persistence)
    return store.get_project(project_id)


@router.get("", response_model=list[AnalysisProject])
async def list_projects(store: StoreDep):
    return sorted(store.list_projects(), key=lambda p: p.updated_at, reverse=True)


@router.get("/{project_id}", response_model=ProjectDetail)
async def get_project(project_id: str, store: StoreDep):
    project = require_project(store, project_id)
    return ProjectDetail(project=project, logs=store.list_logs(project_id))


@router.patch("/{project_id}", response_model=AnalysisProject)
async def update_project(
    project_id: str,
    project_data: ProjectUpdate,
    store: StoreDep,
    persistence: PersistenceDep,
):
    require_project(store, project_id)
    try:
        edit_project(store, project_id, project_data)
    except AnalysisPreconditionError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    await commit(store, persistence)
    return store.get_project(project_id)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(project_id: str, store: StoreDep, persistence: PersistenceDep):
    require_project(store, project_id)
    store.delete_project(project_id)
    await commit(store, persistence)


@router.post("/{project_id}/save", response_model=SaveResult)
async def save(project_id: str, store: StoreDep, persistence: PersistenceDep):
    require_project(store, project_id)
    try:
        result = save_project(store, project_id)
    except AnalysisPreconditionError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    await commit(store, persistence)
    return result


@router.post("/{project_id}/reset", response_model=AnalysisProject)
async def reset(project_id: str, store: StoreDep, persistence: PersistenceDep):
    require_project(store, project_id)
    try:
        reset_project(store, project_id)
    except AnalysisPreconditionError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    await commit(store, persistence)
    return store.get_project(project_id)


@router.post("/{project_id}/select", status_code=status.HTTP_204_NO_CONTENT)
async def select_project(project_id: str, store: StoreDep, persistence: PersistenceDep):
    require_project(store, project_id)
    store.set_selected_project(project_id)
    await commit(store, persistence)
