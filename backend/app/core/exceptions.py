class ProjectNotFoundError(Exception):
    def __init__(self, project_id: str):
        super().__init__(f"Project not found: {project_id}")
        self.project_id = project_id


class AnalysisPreconditionError(Exception):
    pass


class StateLoadError(Exception):
    pass


class StateVersionError(StateLoadError):
    def __init__(self, found: int, supported: int):
        super().__init__(f"Persisted state version {found} is newer than supported version {supported}")
        self.found = found
        self.supported = supported
