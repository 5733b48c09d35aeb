from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from functools import lru_cache
from typing import Literal


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    app_name: str = "ProfileNet"
    debug: bool = False
    api_v1_prefix: str = "/api/v1"

    # State persistence
    store_backend: Literal["sql", "file"] = "sql"
    database_url: str = "sqlite+aiosqlite:///./profilenet.db"
    data_dir: str = "./data"
    store_namespace: str = "profilenet-analysis-store"

    # Analysis backend
    analysis_api_base_url: str = "http://localhost:8000/api"
    use_mock_api: bool = True
    analysis_api_timeout_seconds: float = 30.0

    # Owner of projects created through this instance (auth is handled upstream)
    user_id: str = "anonymous"

    # Editor
    validation_error_display_limit: int = 5

    # CORS - supports comma-separated string from env
    allowed_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_allowed_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("analysis_api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    return Settings()
