from datetime import datetime
from typing import Literal
from pydantic import BaseModel, ConfigDict, Field
from app.schemas.analysis import AnalysisLog, AnalysisProject, DataDomain


# Backend vocabulary for controlled fields.
DOMAIN_CODES: dict[str, str] = {
    "blog": "ko.naver_blog",
    "instagram": "instagram",
    "news": "ko.news",
}

ANALYSIS_METHOD_LABELS: dict[str, str] = {
    "positive": "긍정",
    "negative": "부정",
    "neutral": "중립",
    "comprehensive": "종합",
}

TEXT_TYPE_LABELS: dict[str, str] = {
    "narrative": "서술형",
    "short": "단답형",
}

# Display labels written into the analysis log ledger.
LOG_DOMAIN_LABELS: dict[str, str] = {
    "blog": "블로그",
    "instagram": "인스타그램",
    "news": "뉴스",
}

LOG_TYPE_LABELS: dict[str, str] = {
    "text": "텍스트",
    "image": "이미지",
}

RemoteStatus = Literal["pending", "processing", "completed", "failed", "stopped"]


class ApiKeyword(BaseModel):
    id: str
    name: str
    query: str
    info: str


class ApiAnalysisExpression(BaseModel):
    id: str
    group_name: str
    text_type: str
    pool_size: int
    analysis_methods: list[str]
    analysis_guide: str


class ApiRelation(BaseModel):
    id: str
    group_name: str
    edge_name: str
    keywords: list[ApiKeyword]
    relation_guide: str
    analyses: list[ApiAnalysisExpression]


class ApiSubject(BaseModel):
    id: str
    group_name: str
    keywords: list[ApiKeyword]
    filter_guide: str
    relations: list[ApiRelation]
    analyses: list[ApiAnalysisExpression]


class ApiDataDomain(BaseModel):
    domain: str
    type: str


class StartAnalysisRequest(BaseModel):
    id: str
    name: str
    data: list[ApiDataDomain]
    start_date: str
    end_date: str
    subjects: list[ApiSubject]


class StartAnalysisResponse(BaseModel):
    success: bool
    message: str
    request_id: str | None = None
    error_code: str | None = None
    error_details: str | None = None


class AnalysisProgress(BaseModel):
    subject_name: str
    keyword_name: str
    domain: str
    type: str
    status: Literal["pending", "processing", "completed", "failed"]
    progress: float
    processed_count: int
    total_count: int
    error_message: str | None = None


class MonitoringResponse(BaseModel):
    success: bool
    id: str
    name: str = ""
    status: RemoteStatus
    overall_progress: int = 0
    started_at: datetime | None = None
    estimated_completion: datetime | None = None
    analyses: list[AnalysisProgress] = Field(default_factory=list)
    message: str | None = None
    error_code: str | None = None


class StopAnalysisResponse(BaseModel):
    success: bool
    message: str
    error_code: str | None = None


class GetResultsResponse(BaseModel):
    success: bool
    id: str
    results_url: str | None = None
    message: str | None = None
    error_code: str | None = None


class AnalysisLogItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    project_id: str = Field(alias="projectId")
    project_name: str = Field(alias="projectName")
    period: str
    domain: str
    analysis_type: str = Field(alias="analysisType")
    progress: int
    status: Literal["analyzing", "completed", "failed"]
    requested_at: datetime = Field(alias="requestedAt")
    completed_at: datetime | None = Field(default=None, alias="completedAt")


class GetAnalysisLogsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    user_id: str = Field(alias="userId")
    logs: list[AnalysisLogItem] = Field(default_factory=list)
    message: str | None = None
    error_code: str | None = None


# Request/response bodies of the service's own REST API

class ProjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)


class StartAnalysisBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: list[DataDomain]
    start_date: str
    end_date: str
    auto_update: bool = Field(default=False, alias="autoUpdate")


class SaveResult(BaseModel):
    ok: bool
    status: str
    errors: list[str] = Field(default_factory=list)
    message: str


class CreatedResponse(BaseModel):
    id: str


class ProjectDetail(BaseModel):
    project: AnalysisProject
    logs: list[AnalysisLog]
