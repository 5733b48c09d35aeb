from app.services.analysis_store import AnalysisStore
from app.services.analysis_client import HttpAnalysisClient, MockAnalysisClient, get_analysis_client
from app.services.analysis_service import AnalysisCoordinator
from app.services.storage import FileStatePersistence, SqlStatePersistence, get_persistence

__all__ = [
    "AnalysisStore",
    "HttpAnalysisClient",
    "MockAnalysisClient",
    "get_analysis_client",
    "AnalysisCoordinator",
    "FileStatePersistence",
    "SqlStatePersistence",
    "get_persistence",
]
