import asyncio
from app.schemas.analysis import AnalysisExpression, AnalysisProject, Keyword, Relation, Subject
from app.schemas.api import (
    ANALYSIS_METHOD_LABELS,
    DOMAIN_CODES,
    TEXT_TYPE_LABELS,
    ApiAnalysisExpression,
    ApiDataDomain,
    ApiKeyword,
    ApiRelation,
    ApiSubject,
    StartAnalysisRequest,
)
from app.utils.id_generator import (
    expression_content_id,
    keyword_content_id,
    relation_content_id,
    subject_content_id,
)


def _relabel(table: dict[str, str], token) -> str:
    value = getattr(token, "value", token)
    return table.get(value, value)


async def _convert_keyword(keyword: Keyword) -> ApiKeyword:
    return ApiKeyword(
        id=keyword_content_id(keyword),
        name=keyword.name,
        query=keyword.query,
        info=keyword.info,
    )


async def _convert_expression(expression: AnalysisExpression) -> ApiAnalysisExpression:
    return ApiAnalysisExpression(
        id=expression_content_id(expression),
        group_name=expression.group_name,
        text_type=_relabel(TEXT_TYPE_LABELS, expression.text_type),
        pool_size=expression.pool_size,
        analysis_methods=[_relabel(ANALYSIS_METHOD_LABELS, m) for m in expression.analysis_methods],
        analysis_guide=expression.analysis_guide,
    )


async def _convert_relation(relation: Relation) -> ApiRelation:
    keywords, analyses = await asyncio.gather(
        asyncio.gather(*(_convert_keyword(kw) for kw in relation.keywords)),
        asyncio.gather(*(_convert_expression(ana) for ana in relation.analyses)),
    )
    return ApiRelation(
        id=relation_content_id(relation),
        group_name=relation.group_name,
        edge_name=relation.edge_name,
        keywords=list(keywords),
        relation_guide=relation.relation_guide,
        analyses=list(analyses),
    )


async def _convert_subject(subject: Subject) -> ApiSubject:
    keywords, relations, analyses = await asyncio.gather(
        asyncio.gather(*(_convert_keyword(kw) for kw in subject.keywords)),
        asyncio.gather(*(_convert_relation(rel) for rel in subject.relations)),
        asyncio.gather(*(_convert_expression(ana) for ana in subject.analyses)),
    )
    return ApiSubject(
        id=subject_content_id(subject),
        group_name=subject.group_name,
        keywords=list(keywords),
        filter_guide=subject.filter_guide,
        relations=list(relations),
        analyses=list(analyses),
    )


async def convert_project_to_api_request(project: AnalysisProject) -> StartAnalysisRequest:
    """Build the backend start request for ``project``.

    Structural ids are replaced by content-addressed ids and controlled
    vocabulary (domains, methods, text types) is relabelled for the backend.
    The project itself is left untouched.
    """
    subjects = await asyncio.gather(*(_convert_subject(subject) for subject in project.subjects))
    data = [
        ApiDataDomain(domain=_relabel(DOMAIN_CODES, d.domain), type=getattr(d.type, "value", d.type))
        for d in project.data
    ]
    return StartAnalysisRequest(
        id=project.id,
        name=project.name,
        data=data,
        start_date=project.start_date,
        end_date=project.end_date,
        subjects=list(subjects),
    )
