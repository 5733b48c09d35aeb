import pytest

from app.core.exceptions import AnalysisPreconditionError, ProjectNotFoundError
from app.schemas import (
    AnalysisStatus,
    DataDomain,
    ExpressionUpdate,
    MediaType,
    ProjectUpdate,
    SourceDomain,
    SubjectUpdate,
)
from app.services.project_editor import (
    format_validation_errors,
    reset_project,
    save_project,
    update_project,
    validate_project,
)

from conftest import build_valid_project

DATA = [DataDomain(domain=SourceDomain.BLOG, type=MediaType.TEXT)]


def test_empty_project_needs_a_subject(store):
    project_id = store.create_project("Empty")

    errors = validate_project(store.get_project(project_id))

    assert errors == ["At least one subject is required"]


def test_valid_project_becomes_available(store):
    project_id = build_valid_project(store)

    result = save_project(store, project_id)

    assert result.ok
    assert result.errors == []
    assert store.get_project(project_id).status == AnalysisStatus.AVAILABLE


def test_missing_filter_guide_blocks_save(store):
    project_id = build_valid_project(store)
    assert save_project(store, project_id).ok
    subject = store.get_project(project_id).subjects[0]

    store.update_subject(project_id, subject.id, SubjectUpdate(filter_guide="   "))
    result = save_project(store, project_id)

    assert not result.ok
    assert result.status == "unavailable"
    assert store.get_project(project_id).status == AnalysisStatus.UNAVAILABLE
    assert any("Domestic beer" in err and "filter guide" in err for err in result.errors)


def test_errors_cover_relations_and_expressions(store):
    project_id = store.create_project("Partial")
    subject_id = store.add_subject(project_id)
    relation_id = store.add_relation(project_id, subject_id)
    analysis_id = store.add_relation_analysis(project_id, subject_id, relation_id)
    store.update_relation_analysis(
        project_id, subject_id, relation_id, analysis_id,
        ExpressionUpdate(group_name="Taste", analysis_methods=[]),
    )

    errors = validate_project(store.get_project(project_id))

    assert "Subject name is required" in errors
    assert "Subject [(unnamed)]: enter a keyword with both name and query" in errors
    assert "Relation name is required" in errors
    assert "Relation [(unnamed)]: edge name is required" in errors
    assert "Expression [Taste]: select at least one analysis method" in errors
    assert "Expression [Taste]: generation guide is required" in errors


def test_incomplete_keyword_does_not_count(store):
    project_id = build_valid_project(store)
    subject = store.get_project(project_id).subjects[0]
    store.update_subject(
        project_id, subject.id,
        SubjectUpdate(keywords=[kw.model_copy(update={"query": ""}) for kw in subject.keywords]),
    )

    errors = validate_project(store.get_project(project_id))

    assert errors == ["Subject [Domestic beer]: enter a keyword with both name and query"]


def test_format_caps_displayed_errors():
    errors = [f"error {i}" for i in range(7)]

    message = format_validation_errors(errors, limit=5)

    assert message.splitlines() == [f"error {i}" for i in range(5)] + ["... +2 more"]


def test_format_without_overflow():
    assert format_validation_errors(["a", "b"], limit=5) == "a\nb"


def test_save_message_lists_errors(store):
    project_id = store.create_project("Empty")

    result = save_project(store, project_id)

    assert "At least one subject is required" in result.message


def test_save_unknown_project_raises(store):
    with pytest.raises(ProjectNotFoundError):
        save_project(store, "missing")


def test_reset_clears_subjects(store):
    project_id = build_valid_project(store)

    reset_project(store, project_id)

    assert store.get_project(project_id).subjects == []


class TestRunningProjectIsLocked:
    @pytest.fixture
    def running(self, store):
        project_id = build_valid_project(store)
        assert save_project(store, project_id).ok
        store.start_analysis(project_id, DATA, "2024-01-01", "2024-01-31", False)
        return project_id

    @pytest.mark.parametrize(
        "updates",
        [
            ProjectUpdate(data=[]),
            ProjectUpdate(start_date=""),
            ProjectUpdate(end_date="2024-12-31"),
        ],
    )
    def test_scope_cannot_change(self, store, running, updates):
        with pytest.raises(AnalysisPreconditionError):
            update_project(store, running, updates)

        project = store.get_project(running)
        assert project.data == DATA
        assert (project.start_date, project.end_date) == ("2024-01-01", "2024-01-31")

    def test_rename_is_allowed(self, store, running):
        update_project(store, running, ProjectUpdate(name="Renamed"))

        assert store.get_project(running).name == "Renamed"
        assert store.get_project(running).status == AnalysisStatus.ANALYZING

    def test_save_and_reset_are_refused(self, store, running):
        with pytest.raises(AnalysisPreconditionError):
            save_project(store, running)
        with pytest.raises(AnalysisPreconditionError):
            reset_project(store, running)

        assert store.get_project(running).status == AnalysisStatus.ANALYZING
        assert store.get_project(running).subjects != []


def test_scope_edit_allowed_when_idle(store):
    project_id = store.create_project("Idle")

    update_project(store, project_id, ProjectUpdate(data=DATA, start_date="2024-01-01"))

    assert store.get_project(project_id).data == DATA


def test_update_unknown_project_raises(store):
    with pytest.raises(ProjectNotFoundError):
        update_project(store, "missing", ProjectUpdate(name="x"))
