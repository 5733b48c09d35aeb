from app.schemas.analysis import (
    STATE_VERSION, DEFAULT_ANALYSIS_METHODS,
    AnalysisStatus, LogStatus, SourceDomain, MediaType, TextType, AnalysisMethod,
    Keyword, AnalysisExpression, Relation, Subject, DataDomain,
    AnalysisProject, AnalysisLog, StoreState,
    ProjectUpdate, SubjectUpdate, RelationUpdate, ExpressionUpdate, KeywordUpdate, LogCreate
)
from app.schemas.api import (
    DOMAIN_CODES, ANALYSIS_METHOD_LABELS, TEXT_TYPE_LABELS, LOG_DOMAIN_LABELS, LOG_TYPE_LABELS,
    ApiKeyword, ApiAnalysisExpression, ApiRelation, ApiSubject, ApiDataDomain,
    StartAnalysisRequest, StartAnalysisResponse,
    AnalysisProgress, MonitoringResponse, StopAnalysisResponse, GetResultsResponse,
    AnalysisLogItem, GetAnalysisLogsResponse,
    ProjectCreate, StartAnalysisBody, SaveResult, CreatedResponse, ProjectDetail
)

__all__ = [
    "STATE_VERSION", "DEFAULT_ANALYSIS_METHODS",
    "AnalysisStatus", "LogStatus", "SourceDomain", "MediaType", "TextType", "AnalysisMethod",
    "Keyword", "AnalysisExpression", "Relation", "Subject", "DataDomain",
    "AnalysisProject", "AnalysisLog", "StoreState",
    "ProjectUpdate", "SubjectUpdate", "RelationUpdate", "ExpressionUpdate", "KeywordUpdate", "LogCreate",
    "DOMAIN_CODES", "ANALYSIS_METHOD_LABELS", "TEXT_TYPE_LABELS", "LOG_DOMAIN_LABELS", "LOG_TYPE_LABELS",
    "ApiKeyword", "ApiAnalysisExpression", "ApiRelation", "ApiSubject", "ApiDataDomain",
    "StartAnalysisRequest", "StartAnalysisResponse",
    "AnalysisProgress", "MonitoringResponse", "StopAnalysisResponse", "GetResultsResponse",
    "AnalysisLogItem", "GetAnalysisLogsResponse",
    "ProjectCreate", "StartAnalysisBody", "SaveResult", "CreatedResponse", "ProjectDetail"
]
