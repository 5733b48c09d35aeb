import logging
from app.core.config import get_settings
from app.core.exceptions import AnalysisPreconditionError, ProjectNotFoundError
from app.schemas.analysis import (
    AnalysisExpression,
    AnalysisProject,
    AnalysisStatus,
    Keyword,
    ProjectUpdate,
)
from app.schemas.api import SaveResult
from app.services.analysis_store import AnalysisStore

logger = logging.getLogger(__name__)

UNNAMED = "(unnamed)"

# Fields a running analysis was started with
SCOPE_FIELDS = frozenset({"data", "start_date", "end_date"})


def _has_complete_keyword(keywords: list[Keyword]) -> bool:
    return any(kw.is_complete() for kw in keywords)


def _expression_errors(expression: AnalysisExpression) -> list[str]:
    errors = []
    name = expression.group_name or UNNAMED
    if not expression.group_name.strip():
        errors.append("Expression name is required")
    if not expression.analysis_methods:
        errors.append(f"Expression [{name}]: select at least one analysis method")
    if not expression.analysis_guide.strip():
        errors.append(f"Expression [{name}]: generation guide is required")
    return errors


def validate_project(project: AnalysisProject) -> list[str]:
    """Collect every save-blocking problem in the project tree."""
    errors: list[str] = []

    if not project.subjects:
        errors.append("At least one subject is required")

    for subject in project.subjects:
        s_name = subject.group_name or UNNAMED
        if not subject.group_name.strip():
            errors.append("Subject name is required")
        if not _has_complete_keyword(subject.keywords):
            errors.append(f"Subject [{s_name}]: enter a keyword with both name and query")
        if not subject.filter_guide.strip():
            errors.append(f"Subject [{s_name}]: filter guide is required")

        for relation in subject.relations:
            r_name = relation.group_name or UNNAMED
            if not relation.group_name.strip():
                errors.append("Relation name is required")
            if not relation.edge_name.strip():
                errors.append(f"Relation [{r_name}]: edge name is required")
            if not _has_complete_keyword(relation.keywords):
                errors.append(f"Relation [{r_name}]: enter a keyword with both name and query")
            if not relation.relation_guide.strip():
                errors.append(f"Relation [{r_name}]: relation guide is required")

            for analysis in relation.analyses:
                errors.extend(_expression_errors(analysis))

        for analysis in subject.analyses:
            errors.extend(_expression_errors(analysis))

    return errors


def format_validation_errors(errors: list[str], limit: int | None = None) -> str:
    if limit is None:
        limit = get_settings().validation_error_display_limit
    message = "\n".join(errors[:limit])
    if len(errors) > limit:
        message += f"\n... +{len(errors) - limit} more"
    return message


def _require_editable(store: AnalysisStore, project_id: str) -> AnalysisProject:
    project = store.get_project(project_id)
    if project is None:
        raise ProjectNotFoundError(project_id)
    if project.status == AnalysisStatus.ANALYZING:
        raise AnalysisPreconditionError("Stop the running analysis before changing this project")
    return project


def update_project(store: AnalysisStore, project_id: str, updates: ProjectUpdate) -> None:
    """Apply a user edit. The analysis scope is frozen while a run is in progress."""
    project = store.get_project(project_id)
    if project is None:
        raise ProjectNotFoundError(project_id)
    if project.status == AnalysisStatus.ANALYZING and updates.model_fields_set & SCOPE_FIELDS:
        raise AnalysisPreconditionError("The analysis scope cannot change while the analysis is running")
    store.update_project(project_id, updates)


def save_project(store: AnalysisStore, project_id: str) -> SaveResult:
    """Validate the project and move it to ``available`` or back to ``unavailable``."""
    project = _require_editable(store, project_id)

    errors = validate_project(project)
    if errors:
        store.set_project_status(project_id, AnalysisStatus.UNAVAILABLE)
        logger.info("Project %s failed validation with %d errors", project_id, len(errors))
        return SaveResult(
            ok=False,
            status=AnalysisStatus.UNAVAILABLE.value,
            errors=errors,
            message="Please fill in all required fields:\n\n" + format_validation_errors(errors),
        )

    store.set_project_status(project_id, AnalysisStatus.AVAILABLE)
    return SaveResult(
        ok=True,
        status=AnalysisStatus.AVAILABLE.value,
        message="Saved. The analysis can now be started.",
    )


def reset_project(store: AnalysisStore, project_id: str) -> None:
    _require_editable(store, project_id)
    store.update_project(project_id, ProjectUpdate(subjects=[]))
