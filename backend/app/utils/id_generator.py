"""Content-addressed identifiers for analysis configuration entities.

An entity's id is derived purely from its semantic fields, so resubmitting an
unchanged configuration yields the same ids and the analysis backend can
recognise subjects, relations and keywords it has already processed.

Ids are the first 16 hex characters of a SHA-256 digest (64 bits). When the
runtime refuses SHA-256 (e.g. a restricted FIPS build), a 32-bit rolling hash
is used instead. Fallback ids carry a type prefix (``subj_``, ``rel_``, ...)
so they can never be mistaken for digest ids; they are NOT collision
resistant.
"""
import hashlib
import logging
from typing import Iterable, Protocol

from app.schemas.analysis import AnalysisExpression, Keyword, Relation, Subject

logger = logging.getLogger(__name__)

ID_LENGTH = 16
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


class KeywordLike(Protocol):
    name: str
    query: str
    info: str


def hash_string(value: str) -> str:
    """SHA-256 of the UTF-8 encoded value, truncated to ``ID_LENGTH`` hex chars."""
    digest = hashlib.new("sha256", value.encode("utf-8")).hexdigest()
    return digest[:ID_LENGTH]


def simple_hash(value: str) -> str:
    """32-bit ``h * 31 + c`` hash over UTF-16 code units, base36 encoded."""
    h = 0
    data = value.encode("utf-16-le")
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return _to_base36(abs(h))


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    chars = []
    while number:
        number, rem = divmod(number, 36)
        chars.append(_BASE36[rem])
    return "".join(reversed(chars))


def _content_id(content: str, fallback_prefix: str) -> str:
    try:
        return hash_string(content)
    except ValueError:
        logger.warning("sha256 unavailable, using weak fallback hash for %s id", fallback_prefix.rstrip("_"))
        return fallback_prefix + simple_hash(content)


def keywords_fingerprint(keywords: Iterable[KeywordLike]) -> str:
    # Sorted so that reordering keywords never changes the owning entity's id
    return "::".join(sorted(f"{kw.name}|{kw.query}|{kw.info}" for kw in keywords))


def generate_subject_id(group_name: str, keywords: Iterable[KeywordLike], filter_guide: str) -> str:
    content = f"subject:{group_name}|{keywords_fingerprint(keywords)}|{filter_guide}"
    return _content_id(content, "subj_")


def generate_relation_id(
    group_name: str,
    edge_name: str,
    keywords: Iterable[KeywordLike],
    relation_guide: str,
) -> str:
    content = f"relation:{group_name}|{edge_name}|{keywords_fingerprint(keywords)}|{relation_guide}"
    return _content_id(content, "rel_")


def generate_analysis_id(
    group_name: str,
    text_type: str,
    analysis_methods: Iterable[str],
    pool_size: int,
    analysis_guide: str,
) -> str:
    methods = ",".join(sorted(_token(m) for m in analysis_methods))
    content = f"analysis:{group_name}|{_token(text_type)}|{methods}|{pool_size}|{analysis_guide}"
    return _content_id(content, "ana_")


def generate_keyword_id(name: str, query: str, info: str) -> str:
    return _content_id(f"keyword:{name}|{query}|{info}", "kw_")


def generate_project_id(user_id: str, created_at: str) -> str:
    """Project ids depend on owner and creation instant only, never on the name."""
    return _content_id(f"project:{user_id}|{created_at}", "proj_")


def _token(value) -> str:
    # Enum members hash by their wire value, not their repr
    return getattr(value, "value", value)


def keyword_content_id(keyword: Keyword) -> str:
    return generate_keyword_id(keyword.name, keyword.query, keyword.info)


def expression_content_id(expression: AnalysisExpression) -> str:
    return generate_analysis_id(
        expression.group_name,
        expression.text_type,
        expression.analysis_methods,
        expression.pool_size,
        expression.analysis_guide,
    )


def relation_content_id(relation: Relation) -> str:
    return generate_relation_id(
        relation.group_name, relation.edge_name, relation.keywords, relation.relation_guide
    )


def subject_content_id(subject: Subject) -> str:
    return generate_subject_id(subject.group_name, subject.keywords, subject.filter_guide)


def regenerate_subject_ids(subject: Subject) -> Subject:
    """Return a copy of ``subject`` with every nested id replaced by its content id."""
    relations = [
        relation.model_copy(update={
            "id": relation_content_id(relation),
            "keywords": [kw.model_copy(update={"id": keyword_content_id(kw)}) for kw in relation.keywords],
            "analyses": [ana.model_copy(update={"id": expression_content_id(ana)}) for ana in relation.analyses],
        })
        for relation in subject.relations
    ]
    return subject.model_copy(update={
        "id": subject_content_id(subject),
        "keywords": [kw.model_copy(update={"id": keyword_content_id(kw)}) for kw in subject.keywords],
        "relations": relations,
        "analyses": [ana.model_copy(update={"id": expression_content_id(ana)}) for ana in subject.analyses],
    })
