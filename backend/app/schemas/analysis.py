import uuid
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


STATE_VERSION = 1


class AnalysisStatus(str, Enum):
    UNAVAILABLE = "unavailable"
    AVAILABLE = "available"
    ANALYZING = "analyzing"


class LogStatus(str, Enum):
    PENDING = "pending"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    FAILED = "failed"


class SourceDomain(str, Enum):
    BLOG = "blog"
    INSTAGRAM = "instagram"
    NEWS = "news"


class MediaType(str, Enum):
    TEXT = "text"
    IMAGE = "image"


class TextType(str, Enum):
    NARRATIVE = "narrative"
    SHORT = "short"


class AnalysisMethod(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"
    COMPREHENSIVE = "comprehensive"


DEFAULT_ANALYSIS_METHODS = [
    AnalysisMethod.POSITIVE,
    AnalysisMethod.NEGATIVE,
    AnalysisMethod.COMPREHENSIVE,
]


def _new_id() -> str:
    return str(uuid.uuid4())


class _Entity(BaseModel):
    model_config = ConfigDict(populate_by_name=True, use_enum_values=False)


class Keyword(_Entity):
    id: str = Field(default_factory=_new_id)
    name: str = ""
    query: str = ""
    info: str = ""

    def is_complete(self) -> bool:
        return bool(self.name.strip() and self.query.strip())


class AnalysisExpression(_Entity):
    id: str = Field(default_factory=_new_id)
    group_name: str = ""
    edge_name: str = ""
    text_type: TextType = TextType.NARRATIVE
    pool_size: int = Field(default=0, ge=0)
    analysis_methods: list[AnalysisMethod] = Field(default_factory=lambda: list(DEFAULT_ANALYSIS_METHODS))
    analysis_guide: str = ""


class Relation(_Entity):
    id: str = Field(default_factory=_new_id)
    group_name: str = ""
    edge_name: str = ""
    keywords: list[Keyword] = Field(default_factory=list)
    relation_guide: str = ""
    analyses: list[AnalysisExpression] = Field(default_factory=list)


class Subject(_Entity):
    id: str = Field(default_factory=_new_id)
    group_name: str = ""
    keywords: list[Keyword] = Field(default_factory=list)
    filter_guide: str = ""
    relations: list[Relation] = Field(default_factory=list)
    analyses: list[AnalysisExpression] = Field(default_factory=list)


class DataDomain(_Entity):
    domain: SourceDomain
    type: MediaType


class AnalysisProject(_Entity):
    id: str
    name: str
    status: AnalysisStatus = AnalysisStatus.UNAVAILABLE
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")
    data: list[DataDomain] = Field(default_factory=list)
    start_date: str = ""
    end_date: str = ""
    auto_update: bool = Field(default=False, alias="autoUpdate")
    subjects: list[Subject] = Field(default_factory=list)


class AnalysisLog(_Entity):
    id: str = Field(default_factory=_new_id)
    project_id: str = Field(alias="projectId")
    period: str
    domain: str
    analysis_type: str = Field(alias="analysisType")
    progress: int = Field(default=0, ge=0, le=100)
    status: LogStatus = LogStatus.PENDING
    requested_at: datetime = Field(alias="requestedAt")
    completed_at: datetime | None = Field(default=None, alias="completedAt")


class StoreState(_Entity):
    """Everything the store persists under its namespace key."""

    version: int = STATE_VERSION
    projects: list[AnalysisProject] = Field(default_factory=list)
    logs: list[AnalysisLog] = Field(default_factory=list)
    selected_project_id: str | None = Field(default=None, alias="selectedProjectId")


# Patch types: every field optional, only explicitly set fields are applied.

class ProjectUpdate(_Entity):
    # Status only changes through save, start and stop
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=255)
    data: list[DataDomain] | None = None
    start_date: str | None = None
    end_date: str | None = None
    auto_update: bool | None = Field(default=None, alias="autoUpdate")
    subjects: list[Subject] | None = None


class SubjectUpdate(_Entity):
    group_name: str | None = None
    filter_guide: str | None = None
    keywords: list[Keyword] | None = None


class RelationUpdate(_Entity):
    group_name: str | None = None
    edge_name: str | None = None
    relation_guide: str | None = None
    keywords: list[Keyword] | None = None


class ExpressionUpdate(_Entity):
    group_name: str | None = None
    edge_name: str | None = None
    text_type: TextType | None = None
    pool_size: int | None = Field(default=None, ge=0)
    analysis_methods: list[AnalysisMethod] | None = None
    analysis_guide: str | None = None


class KeywordUpdate(_Entity):
    name: str | None = None
    query: str | None = None
    info: str | None = None


class LogCreate(_Entity):
    project_id: str = Field(alias="projectId")
    period: str
    domain: str
    analysis_type: str = Field(alias="analysisType")
    progress: int = Field(default=0, ge=0, le=100)
    status: LogStatus = LogStatus.PENDING
    requested_at: datetime = Field(alias="requestedAt")
    completed_at: datetime | None = Field(default=None, alias="completedAt")
