"""
variance_services.project_service -- Saved analysis projects.

Responsibility:
    Create, read, list, update and delete named snapshots of a dataset and
    the settings it was reviewed under.

Architecture position:
    Services -- the only layer that holds a database session.  Uses the
    caller's session and flushes; the caller owns the transaction
    (``session_scope`` in scripts, a rolled-back session in tests).

Invariants enforced:
    - Callers only ever see frozen ``Project`` DTOs, never ``ProjectModel``.
    - ``created_at`` / ``updated_at`` come from the injected clock so saved
      timestamps are reproducible under a DeterministicClock.
    - ``record_count`` is kept in step with the stored dataset.

Failure modes:
    - ProjectNotFoundError: unknown or malformed project id.
    - ProjectError: empty project name.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from variance_kernel.domain.clock import Clock, SystemClock
from variance_kernel.domain.projects import Project, ProjectSettings
from variance_kernel.domain.records import ParsedDataset
from variance_kernel.exceptions import ProjectError, ProjectNotFoundError
from variance_kernel.logging_config import LogContext, get_logger
from variance_kernel.models.project import ProjectModel

logger = get_logger("services.projects")


def _clean_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ProjectError("Project name must not be empty")
    return cleaned


class ProjectService:
    """CRUD over saved projects.

    Contract:
        Receives the session and clock via constructor injection.
    Guarantees:
        - ``list_projects`` returns the most recently updated project first.
        - Every mutation flushes so ids and timestamps are visible to the
          caller's session immediately.
    """

    def __init__(self, session: Session, clock: Clock | None = None) -> None:
        self._session = session
        self._clock = clock or SystemClock()

    def _load(self, project_id: UUID | str) -> ProjectModel:
        try:
            key = project_id if isinstance(project_id, UUID) else UUID(str(project_id))
        except ValueError:
            raise ProjectNotFoundError(str(project_id)) from None
        model = self._session.get(ProjectModel, key)
        if model is None:
            raise ProjectNotFoundError(str(key))
        return model

    def create_project(
        self,
        name: str,
        dataset: ParsedDataset,
        settings: ProjectSettings | None = None,
    ) -> Project:
        now = self._clock.now()
        model = ProjectModel(
            name=_clean_name(name),
            dataset=dataset.to_dict(),
            settings=(settings or ProjectSettings()).to_dict(),
            record_count=len(dataset),
            created_at=now,
            updated_at=now,
        )
        self._session.add(model)
        self._session.flush()
        with LogContext.bind(project_id=model.id):
            logger.info(
                "project_created",
                extra={"project_name": model.name, "record_count": model.record_count},
            )
        return model.to_dto()

    def get_project(self, project_id: UUID | str) -> Project:
        return self._load(project_id).to_dto()

    def list_projects(self) -> list[Project]:
        stmt = select(ProjectModel).order_by(
            ProjectModel.updated_at.desc(), ProjectModel.created_at.desc()
        )
        return [model.to_dto() for model in self._session.scalars(stmt)]

    def update_project(
        self,
        project_id: UUID | str,
        name: str | None = None,
        dataset: ParsedDataset | None = None,
        settings: ProjectSettings | None = None,
    ) -> Project:
        """
        Change any of name, dataset or settings.  Fields left as None keep
        their stored value; ``updated_at`` always moves to the clock's now.
        """
        model = self._load(project_id)
        changed: list[str] = []
        if name is not None:
            model.name = _clean_name(name)
            changed.append("name")
        if dataset is not None:
            model.dataset = dataset.to_dict()
            model.record_count = len(dataset)
            changed.append("dataset")
        if settings is not None:
            model.settings = settings.to_dict()
            changed.append("settings")
        model.updated_at = self._clock.now()
        self._session.flush()
        with LogContext.bind(project_id=model.id):
            logger.info("project_updated", extra={"fields": changed})
        return model.to_dto()

    def delete_project(self, project_id: UUID | str) -> None:
        model = self._load(project_id)
        self._session.delete(model)
        self._session.flush()
        with LogContext.bind(project_id=model.id):
            logger.info("project_deleted")
