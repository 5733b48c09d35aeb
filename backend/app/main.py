import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.core.config import get_settings
from app.api.v1 import router as api_router
from app.services.analysis_client import get_analysis_client
from app.services.analysis_store import AnalysisStore
from app.services.storage import get_persistence

settings = get_settings()

_log_level = os.getenv("LOG_LEVEL", "DEBUG" if settings.debug else "INFO").upper()
logging.basicConfig(
    level=_log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    persistence = get_persistence(settings)
    await persistence.init()
    state = await persistence.load()
    store = AnalysisStore(user_id=settings.user_id, state=state)
    logger.info(
        "Loaded %d projects and %d logs from %s store",
        len(store.projects), len(store.logs), settings.store_backend,
    )

    client = get_analysis_client(settings)
    app.state.store = store
    app.state.persistence = persistence
    app.state.analysis_client = client
    try:
        yield
    finally:
        await persistence.save(store.snapshot())
        await client.aclose()


app = FastAPI(
    title=settings.app_name,
    version="1.0.0",
    description="Configuration and monitoring service for social-media sentiment analyses",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "Origin", "X-Requested-With"],
)

app.include_router(api_router, prefix=settings.api_v1_prefix)


@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": "1.0.0"}
