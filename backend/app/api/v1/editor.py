"""Routes for editing the subject → relation → expression tree of a project."""
from fastapi import APIRouter, status
from app.api.v1.deps import PersistenceDep, StoreDep, commit, require_found, require_project
from app.schemas import (
    AnalysisExpression,
    CreatedResponse,
    ExpressionUpdate,
    Keyword,
    KeywordUpdate,
    Relation,
    RelationUpdate,
    Subject,
    SubjectUpdate,
)

router = APIRouter()

SUBJECT_PATH = "/{project_id}/subjects/{subject_id}"
RELATION_PATH = SUBJECT_PATH + "/relations/{relation_id}"


# Subjects

@router.post("/{project_id}/subjects", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
async def add_subject(project_id: str, store: StoreDep, persistence: PersistenceDep):
    require_project(store, project_id)
    subject_id = store.add_subject(project_id)
    await commit(store, persistence)
    return CreatedResponse(id=subject_id)


@router.patch(SUBJECT_PATH, response_model=Subject)
async def update_subject(
    project_id: str, subject_id: str, updates: SubjectUpdate, store: StoreDep, persistence: PersistenceDep
):
    require_project(store, project_id)
    require_found(store.get_subject(project_id, subject_id), "Subject not found")
    store.update_subject(project_id, subject_id, updates)
    await commit(store, persistence)
    return store.get_subject(project_id, subject_id)


@router.delete(SUBJECT_PATH, status_code=status.HTTP_204_NO_CONTENT)
async def delete_subject(project_id: str, subject_id: str, store: StoreDep, persistence: PersistenceDep):
    require_project(store, project_id)
    require_found(store.get_subject(project_id, subject_id), "Subject not found")
    store.delete_subject(project_id, subject_id)
    await commit(store, persistence)


# Relations

@router.post(SUBJECT_PATH + "/relations", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
async def add_relation(project_id: str, subject_id: str, store: StoreDep, persistence: PersistenceDep):
    require_project(store, project_id)
    require_found(store.get_subject(project_id, subject_id), "Subject not found")
    relation_id = store.add_relation(project_id, subject_id)
    await commit(store, persistence)
    return CreatedResponse(id=relation_id)


@router.patch(RELATION_PATH, response_model=Relation)
async def update_relation(
    project_id: str,
    subject_id: str,
    relation_id: str,
    updates: RelationUpdate,
    store: StoreDep,
    persistence: PersistenceDep,
):
    require_project(store, project_id)
    require_found(store.get_relation(project_id, subject_id, relation_id), "Relation not found")
    store.update_relation(project_id, subject_id, relation_id, updates)
    await commit(store, persistence)
    return store.get_relation(project_id, subject_id, relation_id)


@router.delete(RELATION_PATH, status_code=status.HTTP_204_NO_CONTENT)
async def delete_relation(
    project_id: str, subject_id: str, relation_id: str, store: StoreDep, persistence: PersistenceDep
):
    require_project(store, project_id)
    require_found(store.get_relation(project_id, subject_id, relation_id), "Relation not found")
    store.delete_relation(project_id, subject_id, relation_id)
    await commit(store, persistence)


# Expressions attached to a subject

@router.post(SUBJECT_PATH + "/analyses", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
async def add_subject_analysis(project_id: str, subject_id: str, store: StoreDep, persistence: PersistenceDep):
    require_project(store, project_id)
    require_found(store.get_subject(project_id, subject_id), "Subject not found")
    analysis_id = store.add_subject_analysis(project_id, subject_id)
    await commit(store, persistence)
    return CreatedResponse(id=analysis_id)


@router.patch(SUBJECT_PATH + "/analyses/{analysis_id}", response_model=AnalysisExpression)
async def update_subject_analysis(
    project_id: str,
    subject_id: str,
    analysis_id: str,
    updates: ExpressionUpdate,
    store: StoreDep,
    persistence: PersistenceDep,
):
    require_project(store, project_id)
    require_found(store.get_subject_analysis(project_id, subject_id, analysis_id), "Expression not found")
    store.update_subject_analysis(project_id, subject_id, analysis_id, updates)
    await commit(store, persistence)
    return store.get_subject_analysis(project_id, subject_id, analysis_id)


@router.delete(SUBJECT_PATH + "/analyses/{analysis_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_subject_analysis(
    project_id: str, subject_id: str, analysis_id: str, store: StoreDep, persistence: PersistenceDep
):
    require_project(store, project_id)
    require_found(store.get_subject_analysis(project_id, subject_id, analysis_id), "Expression not found")
    store.delete_subject_analysis(project_id, subject_id, analysis_id)
    await commit(store, persistence)


# Expressions under a relation

@router.post(RELATION_PATH + "/analyses", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
async def add_relation_analysis(
    project_id: str, subject_id: str, relation_id: str, store: StoreDep, persistence: PersistenceDep
):
    require_project(store, project_id)
    require_found(store.get_relation(project_id, subject_id, relation_id), "Relation not found")
    analysis_id = store.add_relation_analysis(project_id, subject_id, relation_id)
    await commit(store, persistence)
    return CreatedResponse(id=analysis_id)


@router.patch(RELATION_PATH + "/analyses/{analysis_id}", response_model=AnalysisExpression)
async def update_relation_analysis(
    project_id: str,
    subject_id: str,
    relation_id: str,
    analysis_id: str,
    updates: ExpressionUpdate,
    store: StoreDep,
    persistence: PersistenceDep,
):
    require_project(store, project_id)
    require_found(
        store.get_relation_analysis(project_id, subject_id, relation_id, analysis_id), "Expression not found"
    )
    store.update_relation_analysis(project_id, subject_id, relation_id, analysis_id, updates)
    await commit(store, persistence)
    return store.get_relation_analysis(project_id, subject_id, relation_id, analysis_id)


@router.delete(RELATION_PATH + "/analyses/{analysis_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_relation_analysis(
    project_id: str,
    subject_id: str,
    relation_id: str,
    analysis_id: str,
    store: StoreDep,
    persistence: PersistenceDep,
):
    require_project(store, project_id)
    require_found(
        store.get_relation_analysis(project_id, subject_id, relation_id, analysis_id), "Expression not found"
    )
    store.delete_relation_analysis(project_id, subject_id, relation_id, analysis_id)
    await commit(store, persistence)


# Keywords of a subject

@router.post(SUBJECT_PATH + "/keywords", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
async def add_subject_keyword(project_id: str, subject_id: str, store: StoreDep, persistence: PersistenceDep):
    require_project(store, project_id)
    require_found(store.get_subject(project_id, subject_id), "Subject not found")
    keyword_id = store.add_keyword(project_id, subject_id)
    await commit(store, persistence)
    return CreatedResponse(id=keyword_id)


@router.patch(SUBJECT_PATH + "/keywords/{keyword_id}", response_model=Keyword)
async def update_subject_keyword(
    project_id: str,
    subject_id: str,
    keyword_id: str,
    updates: KeywordUpdate,
    store: StoreDep,
    persistence: PersistenceDep,
):
    require_project(store, project_id)
    require_found(store.get_keyword(project_id, subject_id, keyword_id), "Keyword not found")
    store.update_keyword(project_id, subject_id, keyword_id, updates)
    await commit(store, persistence)
    return store.get_keyword(project_id, subject_id, keyword_id)


@router.delete(SUBJECT_PATH + "/keywords/{keyword_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_subject_keyword(
    project_id: str, subject_id: str, keyword_id: str, store: StoreDep, persistence: PersistenceDep
):
    require_project(store, project_id)
    require_found(store.get_keyword(project_id, subject_id, keyword_id), "Keyword not found")
    store.delete_keyword(project_id, subject_id, keyword_id)
    await commit(store, persistence)


# Keywords of a relation

@router.post(RELATION_PATH + "/keywords", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
async def add_relation_keyword(
    project_id: str, subject_id: str, relation_id: str, store: StoreDep, persistence: PersistenceDep
):
    require_project(store, project_id)
    require_found(store.get_relation(project_id, subject_id, relation_id), "Relation not found")
    keyword_id = store.add_keyword(project_id, subject_id, relation_id)
    await commit(store, persistence)
    return CreatedResponse(id=keyword_id)


@router.patch(RELATION_PATH + "/keywords/{keyword_id}", response_model=Keyword)
async def update_relation_keyword(
    project_id: str,
    subject_id: str,
    relation_id: str,
    keyword_id: str,
    updates: KeywordUpdate,
    store: StoreDep,
    persistence: PersistenceDep,
):
    require_project(store, project_id)
    require_found(store.get_keyword(project_id, subject_id, keyword_id, relation_id), "Keyword not found")
    store.update_keyword(project_id, subject_id, keyword_id, updates, relation_id)
    await commit(store, persistence)
    return store.get_keyword(project_id, subject_id, keyword_id, relation_id)


@router.delete(RELATION_PATH + "/keywords/{keyword_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_relation_keyword(
    project_id: str,
    subject_id: str,
    relation_id: str,
    keyword_id: str,
    store: StoreDep,
    persistence: PersistenceDep,
):
    require_project(store, project_id)
    require_found(store.get_keyword(project_id, subject_id, keyword_id, relation_id), "Keyword not found")
    store.delete_keyword(project_id, subject_id, keyword_id, relation_id)
    await commit(store, persistence)
