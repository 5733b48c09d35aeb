import logging
import random
import string
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Protocol, TypeVar
import httpx
from pydantic import BaseModel
from app.core.config import Settings, get_settings
from app.schemas.api import (
    AnalysisProgress,
    GetAnalysisLogsResponse,
    GetResultsResponse,
    MonitoringResponse,
    RemoteStatus,
    StartAnalysisRequest,
    StartAnalysisResponse,
    StopAnalysisResponse,
)

logger = logging.getLogger(__name__)


class AnalysisClient(Protocol):
    async def start_analysis(self, request: StartAnalysisRequest) -> StartAnalysisResponse: ...

    async def get_monitoring(self, project_id: str) -> MonitoringResponse: ...

    async def stop_analysis(self, project_id: str) -> StopAnalysisResponse: ...

    async def get_results(self, project_id: str) -> GetResultsResponse: ...

    async def get_analysis_logs(self, user_id: str, project_id: str | None = None) -> GetAnalysisLogsResponse: ...

    async def aclose(self) -> None: ...


INVALID_RESPONSE = "INVALID_RESPONSE"

T = TypeVar("T", bound=BaseModel)


def _error_message(response: httpx.Response, error_code: str) -> str:
    if error_code == INVALID_RESPONSE:
        return "The analysis backend returned a response in an unexpected format."
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason_phrase


def _decode(response: httpx.Response, model: type[T]) -> tuple[T | None, str]:
    """Parse a backend reply, or return ``(None, error_code)`` when it cannot be used."""
    if response.is_error:
        return None, f"HTTP_{response.status_code}"
    try:
        return model.model_validate(response.json()), ""
    except ValueError as e:
        # Undecodable JSON and pydantic ValidationError both land here
        logger.warning("Unexpected body from %s: %s", response.request.url.path, e)
        return None, INVALID_RESPONSE


class HttpAnalysisClient:
    """Client for the external analysis backend.

    Non-2xx responses are turned into ``success=False`` payloads carrying
    ``HTTP_<status>``, and 2xx bodies that do not match the expected schema
    into ``INVALID_RESPONSE``; nothing is retried. Connection errors propagate.
    """

    def __init__(self, base_url: str, timeout: float = 30.0, transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def start_analysis(self, request: StartAnalysisRequest) -> StartAnalysisResponse:
        logger.info("Submitting analysis request for project %s (%d subjects)", request.id, len(request.subjects))
        response = await self._client.post("/analysis/start", json=request.model_dump(mode="json"))
        parsed, error_code = _decode(response, StartAnalysisResponse)
        if parsed is not None:
            return parsed
        logger.warning("Start analysis failed for %s: %s", request.id, error_code)
        return StartAnalysisResponse(
            success=False,
            message="Failed to start the analysis.",
            error_code=error_code,
            error_details=_error_message(response, error_code),
        )

    async def get_monitoring(self, project_id: str) -> MonitoringResponse:
        response = await self._client.get("/analysis/monitoring", params={"id": project_id})
        parsed, error_code = _decode(response, MonitoringResponse)
        if parsed is not None:
            return parsed
        return MonitoringResponse(
            success=False,
            id=project_id,
            status="failed",
            error_code=error_code,
            message=_error_message(response, error_code),
        )

    async def stop_analysis(self, project_id: str) -> StopAnalysisResponse:
        response = await self._client.post("/analysis/stop", json={"id": project_id})
        parsed, error_code = _decode(response, StopAnalysisResponse)
        if parsed is not None:
            return parsed
        return StopAnalysisResponse(
            success=False,
            message="Failed to stop the analysis.",
            error_code=error_code,
        )

    async def get_results(self, project_id: str) -> GetResultsResponse:
        response = await self._client.get("/analysis/results", params={"id": project_id})
        parsed, error_code = _decode(response, GetResultsResponse)
        if parsed is not None:
            return parsed
        return GetResultsResponse(
            success=False,
            id=project_id,
            message="Failed to fetch the analysis results.",
            error_code=error_code,
        )

    async def get_analysis_logs(self, user_id: str, project_id: str | None = None) -> GetAnalysisLogsResponse:
        params = {"userId": user_id}
        if project_id:
            params["projectId"] = project_id
        response = await self._client.get("/analysis/logs", params=params)
        parsed, error_code = _decode(response, GetAnalysisLogsResponse)
        if parsed is not None:
            return parsed
        return GetAnalysisLogsResponse(
            success=False,
            user_id=user_id,
            message="Failed to fetch the analysis logs.",
            error_code=error_code,
        )


@dataclass
class _MockRun:
    progress: float = 0.0
    status: RemoteStatus = "processing"
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class MockAnalysisClient:
    """In-process stand-in for the analysis backend.

    Each monitoring poll advances a processing run by 5-20 points until it
    completes. ``set_state``/``reset_state`` let tests pin a run's state.
    """

    def __init__(self, rng: random.Random | None = None):
        self._rng = rng or random.Random()
        self._runs: dict[str, _MockRun] = {}
        self._names: dict[str, str] = {}

    async def aclose(self) -> None:
        return None

    def set_state(self, project_id: str, status: RemoteStatus, progress: float = 0.0) -> None:
        self._runs[project_id] = _MockRun(progress=progress, status=status)

    def reset_state(self, project_id: str) -> None:
        self._runs.pop(project_id, None)

    def _request_id(self) -> str:
        suffix = "".join(self._rng.choices(string.ascii_lowercase + string.digits, k=7))
        return f"REQ_{int(time.time() * 1000)}_{suffix}"

    async def start_analysis(self, request: StartAnalysisRequest) -> StartAnalysisResponse:
        logger.debug("Mock start analysis: %s", request.model_dump_json())
        if not request.id:
            return StartAnalysisResponse(
                success=False,
                message="A project id is required.",
                error_code="INVALID_REQUEST",
                error_details="Missing project ID",
            )
        if not request.subjects:
            return StartAnalysisResponse(
                success=False,
                message="At least one subject is required.",
                error_code="INVALID_REQUEST",
                error_details="No subjects defined",
            )
        if not request.data:
            return StartAnalysisResponse(
                success=False,
                message="At least one data source is required.",
                error_code="INVALID_REQUEST",
                error_details="No data sources selected",
            )

        self._runs[request.id] = _MockRun()
        self._names[request.id] = request.name
        return StartAnalysisResponse(
            success=True,
            message="The analysis has started.",
            request_id=self._request_id(),
        )

    async def get_monitoring(self, project_id: str) -> MonitoringResponse:
        run = self._runs.setdefault(project_id, _MockRun())
        if run.status == "processing":
            run.progress = min(100.0, run.progress + self._rng.uniform(5, 20))
            if run.progress >= 100:
                run.status = "completed"

        now = datetime.now(timezone.utc)
        analyses = [
            AnalysisProgress(
                subject_name=self._names.get(project_id, ""),
                keyword_name="",
                domain="ko.naver_blog",
                type="text",
                status=(
                    "completed" if run.status == "completed"
                    else "failed" if run.status == "failed"
                    else "processing" if run.status == "processing"
                    else "pending"
                ),
                progress=run.progress,
                processed_count=int(run.progress * 10),
                total_count=1000,
            )
        ]
        completed = run.status == "completed"
        return MonitoringResponse(
            success=True,
            id=project_id,
            name=self._names.get(project_id, ""),
            status=run.status,
            overall_progress=round(run.progress),
            started_at=run.started_at,
            estimated_completion=now if completed else now + timedelta(seconds=100 - run.progress),
            analyses=analyses,
            message="The analysis is complete." if completed else f"Analysis in progress... ({round(run.progress)}%)",
        )

    async def stop_analysis(self, project_id: str) -> StopAnalysisResponse:
        run = self._runs.get(project_id)
        if run:
            run.status = "stopped"
        return StopAnalysisResponse(success=True, message="The analysis has been stopped.")

    async def get_results(self, project_id: str) -> GetResultsResponse:
        run = self._runs.get(project_id)
        if not run or run.status != "completed":
            return GetResultsResponse(
                success=False,
                id=project_id,
                message="The analysis has not completed.",
                error_code="NOT_COMPLETED",
            )
        return GetResultsResponse(
            success=True,
            id=project_id,
            results_url=f"/results/{project_id}",
            message="Results are ready.",
        )

    async def get_analysis_logs(self, user_id: str, project_id: str | None = None) -> GetAnalysisLogsResponse:
        return GetAnalysisLogsResponse(success=True, user_id=user_id, logs=[], message="No remote logs.")


def get_analysis_client(settings: Settings | None = None) -> AnalysisClient:
    settings = settings or get_settings()
    if settings.use_mock_api:
        logger.info("Using mock analysis backend")
        return MockAnalysisClient()
    return HttpAnalysisClient(settings.analysis_api_base_url, timeout=settings.analysis_api_timeout_seconds)
