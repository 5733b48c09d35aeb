from datetime import datetime, timezone

from app.schemas import (
    AnalysisMethod,
    AnalysisProject,
    DataDomain,
    Keyword,
    MediaType,
    SourceDomain,
    TextType,
)
from app.services.request_converter import convert_project_to_api_request
from app.utils.id_generator import generate_keyword_id, subject_content_id

from conftest import make_subject


def _project(**overrides) -> AnalysisProject:
    now = datetime(2025, 1, 1, tzinfo=timezone.utc)
    fields = dict(
        id="proj-1",
        name="Beer brands",
        created_at=now,
        updated_at=now,
        data=[
            DataDomain(domain=SourceDomain.BLOG, type=MediaType.TEXT),
            DataDomain(domain=SourceDomain.NEWS, type=MediaType.IMAGE),
        ],
        start_date="2024-01-01",
        end_date="2024-01-31",
        subjects=[make_subject()],
    )
    fields.update(overrides)
    return AnalysisProject(**fields)


async def test_conversion_is_deterministic():
    project = _project()

    first = await convert_project_to_api_request(project)
    second = await convert_project_to_api_request(project)

    assert first == second


async def test_conversion_does_not_mutate_project():
    project = _project()
    before = project.model_dump()

    await convert_project_to_api_request(project)

    assert project.model_dump() == before


async def test_vocabulary_is_relabelled():
    request = await convert_project_to_api_request(_project())

    assert [(d.domain, d.type) for d in request.data] == [("ko.naver_blog", "text"), ("ko.news", "image")]
    analysis = request.subjects[0].relations[0].analyses[0]
    assert analysis.text_type == "서술형"
    assert analysis.analysis_methods == ["긍정", "부정"]


async def test_short_text_and_all_methods():
    subject = make_subject()
    expression = subject.analyses[0].model_copy(update={
        "text_type": TextType.SHORT,
        "analysis_methods": [AnalysisMethod.NEUTRAL, AnalysisMethod.COMPREHENSIVE],
    })
    project = _project(subjects=[subject.model_copy(update={"analyses": [expression]})])

    request = await convert_project_to_api_request(project)

    converted = request.subjects[0].analyses[0]
    assert converted.text_type == "단답형"
    assert converted.analysis_methods == ["중립", "종합"]


async def test_structural_ids_become_content_ids():
    project = _project()
    subject = project.subjects[0]

    request = await convert_project_to_api_request(project)

    api_subject = request.subjects[0]
    assert api_subject.id == subject_content_id(subject)
    assert api_subject.id != subject.id
    assert [kw.id for kw in api_subject.keywords] == [generate_keyword_id("A", "a", ""), generate_keyword_id("B", "b", "")]


async def test_keyword_order_kept_but_id_stable():
    subject = make_subject()
    reordered = subject.model_copy(update={"keywords": list(reversed(subject.keywords))})

    first = await convert_project_to_api_request(_project(subjects=[subject]))
    second = await convert_project_to_api_request(_project(subjects=[reordered]))

    assert first.subjects[0].id == second.subjects[0].id
    assert [kw.name for kw in second.subjects[0].keywords] == ["B", "A"]


async def test_request_carries_project_fields():
    request = await convert_project_to_api_request(_project())

    assert request.id == "proj-1"
    assert request.name == "Beer brands"
    assert request.start_date == "2024-01-01"
    assert request.end_date == "2024-01-31"
    relation = request.subjects[0].relations[0]
    assert relation.edge_name == "mood while drinking"
    assert relation.keywords[0].query == "gloomy||sad"


async def test_empty_project_converts():
    request = await convert_project_to_api_request(_project(subjects=[], data=[]))

    assert request.subjects == []
    assert request.data == []


def test_keyword_helper_in_fixture():
    assert Keyword(name="A", query="a").is_complete()
    assert not Keyword(name="A", query=" ").is_complete()
