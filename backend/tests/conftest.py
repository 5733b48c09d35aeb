import os
import tempfile
from datetime import datetime, timedelta, timezone

_tmp_root = tempfile.mkdtemp(prefix="profilenet-tests-")
os.environ.setdefault("STORE_BACKEND", "file")
os.environ.setdefault("DATA_DIR", os.path.join(_tmp_root, "data"))
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{os.path.join(_tmp_root, 'test.db')}")
os.environ.setdefault("USE_MOCK_API", "true")

import pytest  # noqa: E402

from app.schemas import (  # noqa: E402
    AnalysisExpression,
    AnalysisMethod,
    Keyword,
    KeywordUpdate,
    Relation,
    RelationUpdate,
    Subject,
    SubjectUpdate,
    ExpressionUpdate,
)
from app.services.analysis_store import AnalysisStore  # noqa: E402


class FakeClock:
    """Deterministic clock that advances one second per call."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2025, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock) -> AnalysisStore:
    return AnalysisStore(user_id="tester", clock=clock)


def make_subject(**overrides) -> Subject:
    fields = dict(
        group_name="Domestic beer",
        keywords=[
            Keyword(name="A", query="a", info=""),
            Keyword(name="B", query="b", info=""),
        ],
        filter_guide="mentions drinking {@current}",
        relations=[
            Relation(
                group_name="Mood",
                edge_name="mood while drinking",
                keywords=[Keyword(name="gloomy", query="gloomy||sad", info="")],
                relation_guide="{@subject} while {@current}",
                analyses=[
                    AnalysisExpression(
                        group_name="Taste",
                        analysis_guide="extract taste expressions",
                        analysis_methods=[AnalysisMethod.POSITIVE, AnalysisMethod.NEGATIVE],
                    )
                ],
            )
        ],
        analyses=[AnalysisExpression(group_name="Aroma", analysis_guide="extract aroma expressions")],
    )
    fields.update(overrides)
    return Subject(**fields)


def build_valid_project(store: AnalysisStore, name: str = "Beer brands") -> str:
    """Create a project through store operations that passes save-time validation."""
    project_id = store.create_project(name)
    subject_id = store.add_subject(project_id)
    store.update_subject(project_id, subject_id, SubjectUpdate(group_name="Domestic beer", filter_guide="drinks it"))
    keyword_id = store.add_keyword(project_id, subject_id)
    store.update_keyword(project_id, subject_id, keyword_id, KeywordUpdate(name="OB", query="OB&&beer"))

    relation_id = store.add_relation(project_id, subject_id)
    store.update_relation(
        project_id, subject_id, relation_id,
        RelationUpdate(group_name="Mood", edge_name="mood while drinking", relation_guide="in that mood"),
    )
    rel_keyword_id = store.add_keyword(project_id, subject_id, relation_id)
    store.update_keyword(
        project_id, subject_id, rel_keyword_id, KeywordUpdate(name="gloomy", query="gloomy"), relation_id
    )
    analysis_id = store.add_relation_analysis(project_id, subject_id, relation_id)
    store.update_relation_analysis(
        project_id, subject_id, relation_id, analysis_id,
        ExpressionUpdate(group_name="Taste", analysis_guide="extract taste"),
    )
    return project_id
