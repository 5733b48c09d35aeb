import logging
from datetime import datetime, timezone
from typing import Callable, TypeVar
from pydantic import BaseModel
from app.schemas.analysis import (
    AnalysisExpression,
    AnalysisLog,
    AnalysisProject,
    AnalysisStatus,
    DataDomain,
    ExpressionUpdate,
    Keyword,
    KeywordUpdate,
    LogCreate,
    LogStatus,
    ProjectUpdate,
    Relation,
    RelationUpdate,
    StoreState,
    Subject,
    SubjectUpdate,
)
from app.schemas.api import LOG_DOMAIN_LABELS, LOG_TYPE_LABELS
from app.utils.id_generator import generate_project_id

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _patch(entity: T, update: BaseModel) -> T:
    # Explicitly set, non-null fields only; nested entities are kept as models
    changes = {
        name: getattr(update, name)
        for name in update.model_fields_set
        if getattr(update, name) is not None
    }
    return entity.model_copy(update=changes)


def _replace(items: list[T], item_id: str, fn: Callable[[T], T]) -> list[T]:
    return [fn(item) if item.id == item_id else item for item in items]


def _remove(items: list[T], item_id: str) -> list[T]:
    return [item for item in items if item.id != item_id]


def _find(items: list[T], item_id: str) -> T | None:
    return next((item for item in items if item.id == item_id), None)


class AnalysisStore:
    """In-memory collection of analysis projects and the analysis log ledger.

    Mutations are synchronous copy-on-write replacements: the affected project
    (and the path down to the edited entity) is rebuilt, everything else is
    shared. Unknown ids make a mutation a no-op. The store does not enforce
    business rules; an incomplete tree is a normal mid-edit state.

    Persistence is not a side effect of mutation. Owners call ``snapshot()``
    and hand the result to a persistence backend.
    """

    def __init__(
        self,
        user_id: str = "anonymous",
        state: StoreState | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.user_id = user_id
        self._clock = clock
        self._projects: list[AnalysisProject] = []
        self._logs: list[AnalysisLog] = []
        self.selected_project_id: str | None = None
        if state is not None:
            self.load(state)

    # State boundary

    def load(self, state: StoreState) -> None:
        self._projects = list(state.projects)
        self._logs = list(state.logs)
        self.selected_project_id = state.selected_project_id

    def snapshot(self) -> StoreState:
        return StoreState(
            projects=[p.model_copy(deep=True) for p in self._projects],
            logs=[log.model_copy(deep=True) for log in self._logs],
            selected_project_id=self.selected_project_id,
        )

    @property
    def projects(self) -> list[AnalysisProject]:
        return list(self._projects)

    @property
    def logs(self) -> list[AnalysisLog]:
        return list(self._logs)

    # Projects

    def create_project(self, name: str) -> str:
        now = self._clock()
        seed = now.isoformat()
        project_id = generate_project_id(self.user_id, seed)
        attempt = 0
        # Two creates within one clock tick would otherwise share an id
        while self.get_project(project_id) is not None:
            attempt += 1
            project_id = generate_project_id(self.user_id, f"{seed}#{attempt}")
        project = AnalysisProject(
            id=project_id,
            name=name,
            status=AnalysisStatus.UNAVAILABLE,
            created_at=now,
            updated_at=now,
        )
        self._projects = [*self._projects, project]
        logger.info("Created project %s (%s)", project_id, name)
        return project_id

    def get_project(self, project_id: str) -> AnalysisProject | None:
        return _find(self._projects, project_id)

    def list_projects(self) -> list[AnalysisProject]:
        return self.projects

    def update_project(self, project_id: str, updates: ProjectUpdate) -> None:
        self._update_project(project_id, lambda p: _patch(p, updates))

    def delete_project(self, project_id: str) -> None:
        self._projects = _remove(self._projects, project_id)
        self._logs = [log for log in self._logs if log.project_id != project_id]
        if self.selected_project_id == project_id:
            self.selected_project_id = None
        logger.info("Deleted project %s", project_id)

    def set_project_status(self, project_id: str, status: AnalysisStatus) -> None:
        self._update_project(project_id, lambda p: p.model_copy(update={"status": status}))

    def start_analysis(
        self,
        project_id: str,
        data: list[DataDomain],
        start_date: str,
        end_date: str,
        auto_update: bool,
    ) -> None:
        """Mark the project as analyzing and open one log per data domain.

        Callers must have checked that ``data`` is non-empty and both dates
        are set, and should only call this after the backend accepted the run.
        """
        if self.get_project(project_id) is None:
            return
        self._update_project(project_id, lambda p: p.model_copy(update={
            "status": AnalysisStatus.ANALYZING,
            "data": list(data),
            "start_date": start_date,
            "end_date": end_date,
            "auto_update": auto_update,
        }))
        for domain in data:
            self.add_log(LogCreate(
                project_id=project_id,
                period=f"{start_date}~{end_date}",
                domain=LOG_DOMAIN_LABELS.get(domain.domain.value, domain.domain.value),
                analysis_type=LOG_TYPE_LABELS.get(domain.type.value, domain.type.value),
                progress=0,
                status=LogStatus.ANALYZING,
                requested_at=self._clock(),
                completed_at=None,
            ))
        logger.info("Started analysis for project %s (%d domains)", project_id, len(data))

    def stop_analysis(self, project_id: str) -> None:
        if self.get_project(project_id) is None:
            return
        self.set_project_status(project_id, AnalysisStatus.AVAILABLE)
        self._logs = [
            log.model_copy(update={"status": LogStatus.FAILED})
            if log.project_id == project_id and log.status == LogStatus.ANALYZING
            else log
            for log in self._logs
        ]
        logger.info("Stopped analysis for project %s", project_id)

    def set_selected_project(self, project_id: str | None) -> None:
        self.selected_project_id = project_id

    # Subjects

    def add_subject(self, project_id: str) -> str:
        subject = Subject()
        self._update_project(project_id, lambda p: p.model_copy(update={"subjects": [*p.subjects, subject]}))
        return subject.id

    def get_subject(self, project_id: str, subject_id: str) -> Subject | None:
        project = self.get_project(project_id)
        return _find(project.subjects, subject_id) if project else None

    def update_subject(self, project_id: str, subject_id: str, updates: SubjectUpdate) -> None:
        self._update_subject(project_id, subject_id, lambda s: _patch(s, updates))

    def delete_subject(self, project_id: str, subject_id: str) -> None:
        self._update_project(
            project_id, lambda p: p.model_copy(update={"subjects": _remove(p.subjects, subject_id)})
        )

    # Relations

    def add_relation(self, project_id: str, subject_id: str) -> str:
        relation = Relation()
        self._update_subject(
            project_id, subject_id, lambda s: s.model_copy(update={"relations": [*s.relations, relation]})
        )
        return relation.id

    def get_relation(self, project_id: str, subject_id: str, relation_id: str) -> Relation | None:
        subject = self.get_subject(project_id, subject_id)
        return _find(subject.relations, relation_id) if subject else None

    def update_relation(
        self, project_id: str, subject_id: str, relation_id: str, updates: RelationUpdate
    ) -> None:
        self._update_relation(project_id, subject_id, relation_id, lambda r: _patch(r, updates))

    def delete_relation(self, project_id: str, subject_id: str, relation_id: str) -> None:
        self._update_subject(
            project_id, subject_id,
            lambda s: s.model_copy(update={"relations": _remove(s.relations, relation_id)}),
        )

    # Expressions attached directly to a subject

    def add_subject_analysis(self, project_id: str, subject_id: str) -> str:
        analysis = AnalysisExpression()
        self._update_subject(
            project_id, subject_id, lambda s: s.model_copy(update={"analyses": [*s.analyses, analysis]})
        )
        return analysis.id

    def get_subject_analysis(
        self, project_id: str, subject_id: str, analysis_id: str
    ) -> AnalysisExpression | None:
        subject = self.get_subject(project_id, subject_id)
        return _find(subject.analyses, analysis_id) if subject else None

    def update_subject_analysis(
        self, project_id: str, subject_id: str, analysis_id: str, updates: ExpressionUpdate
    ) -> None:
        self._update_subject(
            project_id, subject_id,
            lambda s: s.model_copy(update={"analyses": _replace(s.analyses, analysis_id, lambda a: _patch(a, updates))}),
        )

    def delete_subject_analysis(self, project_id: str, subject_id: str, analysis_id: str) -> None:
        self._update_subject(
            project_id, subject_id,
            lambda s: s.model_copy(update={"analyses": _remove(s.analyses, analysis_id)}),
        )

    # Expressions under a relation

    def add_relation_analysis(self, project_id: str, subject_id: str, relation_id: str) -> str:
        analysis = AnalysisExpression()
        self._update_relation(
            project_id, subject_id, relation_id,
            lambda r: r.model_copy(update={"analyses": [*r.analyses, analysis]}),
        )
        return analysis.id

    def get_relation_analysis(
        self, project_id: str, subject_id: str, relation_id: str, analysis_id: str
    ) -> AnalysisExpression | None:
        relation = self.get_relation(project_id, subject_id, relation_id)
        return _find(relation.analyses, analysis_id) if relation else None

    def update_relation_analysis(
        self,
        project_id: str,
        subject_id: str,
        relation_id: str,
        analysis_id: str,
        updates: ExpressionUpdate,
    ) -> None:
        self._update_relation(
            project_id, subject_id, relation_id,
            lambda r: r.model_copy(update={"analyses": _replace(r.analyses, analysis_id, lambda a: _patch(a, updates))}),
        )

    def delete_relation_analysis(
        self, project_id: str, subject_id: str, relation_id: str, analysis_id: str
    ) -> None:
        self._update_relation(
            project_id, subject_id, relation_id,
            lambda r: r.model_copy(update={"analyses": _remove(r.analyses, analysis_id)}),
        )

    # Keywords, owned by a subject or, when relation_id is given, by a relation

    def add_keyword(self, project_id: str, subject_id: str, relation_id: str | None = None) -> str:
        keyword = Keyword()
        self._update_keywords(project_id, subject_id, relation_id, lambda kws: [*kws, keyword])
        return keyword.id

    def get_keyword(
        self, project_id: str, subject_id: str, keyword_id: str, relation_id: str | None = None
    ) -> Keyword | None:
        owner = (
            self.get_relation(project_id, subject_id, relation_id)
            if relation_id
            else self.get_subject(project_id, subject_id)
        )
        return _find(owner.keywords, keyword_id) if owner else None

    def update_keyword(
        self,
        project_id: str,
        subject_id: str,
        keyword_id: str,
        updates: KeywordUpdate,
        relation_id: str | None = None,
    ) -> None:
        self._update_keywords(
            project_id, subject_id, relation_id,
            lambda kws: _replace(kws, keyword_id, lambda k: _patch(k, updates)),
        )

    def delete_keyword(
        self, project_id: str, subject_id: str, keyword_id: str, relation_id: str | None = None
    ) -> None:
        self._update_keywords(project_id, subject_id, relation_id, lambda kws: _remove(kws, keyword_id))

    # Log ledger

    def add_log(self, log: LogCreate) -> str:
        entry = AnalysisLog(**log.model_dump())
        self._logs = [*self._logs, entry]
        return entry.id

    def get_log(self, log_id: str) -> AnalysisLog | None:
        return _find(self._logs, log_id)

    def list_logs(self, project_id: str | None = None) -> list[AnalysisLog]:
        if project_id is None:
            return self.logs
        return [log for log in self._logs if log.project_id == project_id]

    def update_log_progress(self, log_id: str, progress: int, status: LogStatus | None = None) -> None:
        def apply(log: AnalysisLog) -> AnalysisLog:
            return log.model_copy(update={
                "progress": max(0, min(100, progress)),
                "status": status or log.status,
                "completed_at": self._clock() if status == LogStatus.COMPLETED else log.completed_at,
            })

        self._logs = _replace(self._logs, log_id, apply)

    # Copy-on-write helpers; every project-scoped change bumps updated_at

    def _update_project(self, project_id: str, fn: Callable[[AnalysisProject], AnalysisProject]) -> None:
        def apply(project: AnalysisProject) -> AnalysisProject:
            return fn(project).model_copy(update={"updated_at": self._clock()})

        self._projects = _replace(self._projects, project_id, apply)

    def _update_subject(self, project_id: str, subject_id: str, fn: Callable[[Subject], Subject]) -> None:
        self._update_project(
            project_id, lambda p: p.model_copy(update={"subjects": _replace(p.subjects, subject_id, fn)})
        )

    def _update_relation(
        self, project_id: str, subject_id: str, relation_id: str, fn: Callable[[Relation], Relation]
    ) -> None:
        self._update_subject(
            project_id, subject_id,
            lambda s: s.model_copy(update={"relations": _replace(s.relations, relation_id, fn)}),
        )

    def _update_keywords(
        self,
        project_id: str,
        subject_id: str,
        relation_id: str | None,
        fn: Callable[[list[Keyword]], list[Keyword]],
    ) -> None:
        if relation_id:
            self._update_relation(
                project_id, subject_id, relation_id, lambda r: r.model_copy(update={"keywords": fn(r.keywords)})
            )
        else:
            self._update_subject(
                project_id, subject_id, lambda s: s.model_copy(update={"keywords": fn(s.keywords)})
            )
