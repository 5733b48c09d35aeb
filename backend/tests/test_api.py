import random

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.services.analysis_client import MockAnalysisClient
from app.services.analysis_store import AnalysisStore
from app.services.storage import FileStatePersistence

from conftest import FakeClock

PREFIX = "/api/v1"
SCOPE = {
    "data": [{"domain": "blog", "type": "text"}, {"domain": "news", "type": "image"}],
    "start_date": "2024-01-01",
    "end_date": "2024-01-31",
    "autoUpdate": False,
}


@pytest.fixture
def persistence(tmp_path):
    return FileStatePersistence(str(tmp_path), "api-store")


@pytest.fixture
def client(persistence):
    with TestClient(app) as test_client:
        app.state.store = AnalysisStore(user_id="tester", clock=FakeClock())
        app.state.persistence = persistence
        app.state.analysis_client = MockAnalysisClient(rng=random.Random(1))
        yield test_client


def _create_project(client, name="Beer brands") -> str:
    response = client.post(f"{PREFIX}/projects", json={"name": name})
    assert response.status_code == 201
    return response.json()["id"]


def _fill_project(client, project_id: str) -> None:
    base = f"{PREFIX}/projects/{project_id}/subjects"
    subject_id = client.post(base).json()["id"]
    subject = f"{base}/{subject_id}"
    assert client.patch(subject, json={"group_name": "Domestic beer", "filter_guide": "drinks it"}).status_code == 200

    keyword_id = client.post(f"{subject}/keywords").json()["id"]
    client.patch(f"{subject}/keywords/{keyword_id}", json={"name": "OB", "query": "OB&&beer"})

    relation_id = client.post(f"{subject}/relations").json()["id"]
    relation = f"{subject}/relations/{relation_id}"
    client.patch(relation, json={"group_name": "Mood", "edge_name": "mood", "relation_guide": "in that mood"})
    rel_keyword_id = client.post(f"{relation}/keywords").json()["id"]
    client.patch(f"{relation}/keywords/{rel_keyword_id}", json={"name": "sad", "query": "sad"})

    analysis_id = client.post(f"{relation}/analyses").json()["id"]
    response = client.patch(
        f"{relation}/analyses/{analysis_id}",
        json={"group_name": "Taste", "analysis_guide": "extract taste", "text_type": "short"},
    )
    assert response.json()["text_type"] == "short"


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_create_and_list_projects(client):
    first = _create_project(client, "First")
    second = _create_project(client, "Second")

    response = client.get(f"{PREFIX}/projects")

    assert response.status_code == 200
    body = response.json()
    assert [p["id"] for p in body] == [second, first]
    assert body[0]["status"] == "unavailable"
    assert "createdAt" in body[0] and "updatedAt" in body[0]


def test_create_project_requires_name(client):
    response = client.post(f"{PREFIX}/projects", json={"name": ""})

    assert response.status_code == 422


def test_get_unknown_project(client):
    response = client.get(f"{PREFIX}/projects/missing")

    assert response.status_code == 404
    assert response.json()["detail"] == "Project not found"


def test_rename_project(client):
    project_id = _create_project(client)

    response = client.patch(f"{PREFIX}/projects/{project_id}", json={"name": "Renamed"})

    assert response.status_code == 200
    assert response.json()["id"] == project_id
    assert response.json()["name"] == "Renamed"


def test_save_reports_validation_errors(client):
    project_id = _create_project(client)

    response = client.post(f"{PREFIX}/projects/{project_id}/save")

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is False
    assert body["errors"] == ["At least one subject is required"]


def test_editor_404_for_unknown_subject(client):
    project_id = _create_project(client)

    response = client.patch(f"{PREFIX}/projects/{project_id}/subjects/nope", json={"group_name": "x"})

    assert response.status_code == 404
    assert response.json()["detail"] == "Subject not found"


def test_start_before_save_is_rejected(client):
    project_id = _create_project(client)
    _fill_project(client, project_id)

    response = client.post(f"{PREFIX}/analysis/{project_id}/start", json=SCOPE)

    assert response.status_code == 400


def test_full_analysis_flow(client, persistence):
    project_id = _create_project(client)
    _fill_project(client, project_id)
    assert client.post(f"{PREFIX}/projects/{project_id}/save").json()["ok"] is True

    preview = client.get(f"{PREFIX}/analysis/{project_id}/request")
    assert preview.status_code == 200
    assert preview.json()["subjects"][0]["relations"][0]["analyses"][0]["text_type"] == "단답형"

    started = client.post(f"{PREFIX}/analysis/{project_id}/start", json=SCOPE)
    assert started.status_code == 200
    assert started.json()["success"] is True

    logs = client.get(f"{PREFIX}/analysis/logs", params={"project_id": project_id}).json()
    assert [(log["domain"], log["analysisType"]) for log in logs] == [("블로그", "텍스트"), ("뉴스", "이미지")]
    assert {log["status"] for log in logs} == {"analyzing"}

    monitoring = client.get(f"{PREFIX}/analysis/{project_id}/monitoring")
    assert monitoring.json()["status"] in ("processing", "completed")

    detail = client.get(f"{PREFIX}/projects/{project_id}").json()
    assert detail["project"]["status"] in ("analyzing", "available")
    assert len(detail["logs"]) == 2

    stopped = client.post(f"{PREFIX}/analysis/{project_id}/stop")
    assert stopped.json()["success"] is True
    assert client.get(f"{PREFIX}/projects/{project_id}").json()["project"]["status"] == "available"

    assert persistence.file_path.exists()


def test_results_not_completed(client):
    project_id = _create_project(client)

    response = client.get(f"{PREFIX}/analysis/{project_id}/results")

    assert response.json()["error_code"] == "NOT_COMPLETED"


def test_delete_project(client):
    project_id = _create_project(client)

    assert client.delete(f"{PREFIX}/projects/{project_id}").status_code == 204
    assert client.get(f"{PREFIX}/projects/{project_id}").status_code == 404
    assert client.delete(f"{PREFIX}/projects/{project_id}").status_code == 404


def test_reset_and_select(client):
    project_id = _create_project(client)
    _fill_project(client, project_id)

    reset = client.post(f"{PREFIX}/projects/{project_id}/reset")
    assert reset.json()["subjects"] == []

    assert client.post(f"{PREFIX}/projects/{project_id}/select").status_code == 204
    assert app.state.store.selected_project_id == project_id


def test_status_cannot_be_patched(client):
    project_id = _create_project(client)

    response = client.patch(f"{PREFIX}/projects/{project_id}", json={"status": "analyzing"})

    assert response.status_code == 422
    project = client.get(f"{PREFIX}/projects/{project_id}").json()["project"]
    assert project["status"] == "unavailable"


def test_scope_is_frozen_while_running(client):
    project_id = _create_project(client)
    _fill_project(client, project_id)
    client.post(f"{PREFIX}/projects/{project_id}/save")
    assert client.post(f"{PREFIX}/analysis/{project_id}/start", json=SCOPE).json()["success"] is True

    cleared = client.patch(f"{PREFIX}/projects/{project_id}", json={"data": [], "start_date": ""})
    saved = client.post(f"{PREFIX}/projects/{project_id}/save")
    renamed = client.patch(f"{PREFIX}/projects/{project_id}", json={"name": "Still running"})

    assert cleared.status_code == 400
    assert saved.status_code == 400
    assert renamed.status_code == 200
    project = renamed.json()
    assert project["status"] == "analyzing"
    assert project["start_date"] == "2024-01-01"
    assert len(project["data"]) == 2


def test_stop_without_running_analysis(client):
    project_id = _create_project(client)

    response = client.post(f"{PREFIX}/analysis/{project_id}/stop")

    assert response.status_code == 400
    project = client.get(f"{PREFIX}/projects/{project_id}").json()["project"]
    assert project["status"] == "unavailable"
