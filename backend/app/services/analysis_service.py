import logging
from app.core.exceptions import AnalysisPreconditionError, ProjectNotFoundError
from app.schemas.analysis import AnalysisProject, AnalysisStatus, DataDomain, LogStatus
from app.schemas.api import (
    GetResultsResponse,
    MonitoringResponse,
    StartAnalysisResponse,
    StopAnalysisResponse,
)
from app.services.analysis_client import AnalysisClient
from app.services.analysis_store import AnalysisStore
from app.services.request_converter import convert_project_to_api_request

logger = logging.getLogger(__name__)


class AnalysisCoordinator:
    """Couples backend calls with store mutations.

    The backend is always called first; the store is only mutated after a
    successful response. A failed response is returned verbatim and leaves
    the store untouched.
    """

    def __init__(self, store: AnalysisStore, client: AnalysisClient):
        self.store = store
        self.client = client

    def _require_project(self, project_id: str) -> AnalysisProject:
        project = self.store.get_project(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    async def start(
        self,
        project_id: str,
        data: list[DataDomain],
        start_date: str,
        end_date: str,
        auto_update: bool = False,
    ) -> StartAnalysisResponse:
        project = self._require_project(project_id)
        if project.status != AnalysisStatus.AVAILABLE:
            raise AnalysisPreconditionError(
                f"Project must be saved and available before starting (status: {project.status.value})"
            )
        if not data:
            raise AnalysisPreconditionError("Select at least one data source")
        if not start_date or not end_date:
            raise AnalysisPreconditionError("Set the analysis period")

        scoped = project.model_copy(update={"data": list(data), "start_date": start_date, "end_date": end_date})
        request = await convert_project_to_api_request(scoped)
        response = await self.client.start_analysis(request)

        if response.success:
            self.store.start_analysis(project_id, data, start_date, end_date, auto_update)
            logger.info("Analysis started for %s, request id %s", project_id, response.request_id)
        else:
            logger.warning(
                "Backend rejected analysis for %s: %s (%s)", project_id, response.message, response.error_code
            )
        return response

    async def stop(self, project_id: str) -> StopAnalysisResponse:
        project = self._require_project(project_id)
        if project.status != AnalysisStatus.ANALYZING:
            raise AnalysisPreconditionError(
                f"Only a running analysis can be stopped (status: {project.status.value})"
            )
        response = await self.client.stop_analysis(project_id)
        if response.success:
            self.store.stop_analysis(project_id)
        else:
            logger.warning("Backend refused to stop %s: %s", project_id, response.message)
        return response

    async def refresh(self, project_id: str) -> MonitoringResponse:
        """Poll the backend and mirror its progress into the open logs."""
        self._require_project(project_id)
        response = await self.client.get_monitoring(project_id)
        if not response.success:
            return response

        # The project may have been deleted while the backend was polled
        project = self.store.get_project(project_id)
        if project is None:
            logger.info("Project %s disappeared during monitoring, dropping update", project_id)
            return response

        if response.status == "completed":
            status = LogStatus.COMPLETED
        elif response.status == "failed":
            status = LogStatus.FAILED
        else:
            status = None

        for log in self.store.list_logs(project_id):
            if log.status == LogStatus.ANALYZING:
                self.store.update_log_progress(log.id, response.overall_progress, status)

        if status is not None and project.status == AnalysisStatus.ANALYZING:
            self.store.set_project_status(project_id, AnalysisStatus.AVAILABLE)
        return response

    async def results(self, project_id: str) -> GetResultsResponse:
        self._require_project(project_id)
        return await self.client.get_results(project_id)
