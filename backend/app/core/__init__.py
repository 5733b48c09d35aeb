from app.core.config import Settings, get_settings
from app.core.database import Base, async_session_maker, engine
from app.core.exceptions import (
    ProjectNotFoundError,
    AnalysisPreconditionError,
    StateLoadError,
    StateVersionError,
)

__all__ = [
    "Settings",
    "get_settings",
    "Base",
    "async_session_maker",
    "engine",
    "ProjectNotFoundError",
    "AnalysisPreconditionError",
    "StateLoadError",
    "StateVersionError",
]
