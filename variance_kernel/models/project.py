"""
Module: variance_kernel.models.project
Responsibility: ORM persistence for saved variance analysis projects.  The
    dataset and settings are stored as JSON documents produced by the domain
    objects' ``to_dict()`` methods.
Architecture position: Kernel > Models.  Imports from db/base.py and the
    domain DTOs it converts to.

Failure modes:
    - KeyError / ValueError from ``to_dto()`` if a stored JSON document was
      edited outside the service into an invalid shape.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from variance_kernel.db.base import TrackedBase
from variance_kernel.domain.projects import Project, ProjectSettings
from variance_kernel.domain.records import ParsedDataset


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back out
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ProjectModel(TrackedBase):
    """Persistent saved project."""

    __tablename__ = "variance_projects"

    __table_args__ = (
        Index("ix_variance_projects_updated_at", "updated_at"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    dataset: Mapped[dict] = mapped_column(JSON, nullable=False)
    settings: Mapped[dict] = mapped_column(JSON, nullable=False)
    record_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def to_dto(self) -> Project:
        return Project(
            project_id=self.id,
            name=self.name,
            dataset=ParsedDataset.from_dict(self.dataset),
            settings=ProjectSettings.from_dict(self.settings),
            created_at=_aware(self.created_at),
            updated_at=_aware(self.updated_at),
        )

    def __repr__(self) -> str:
        return f"<ProjectModel {self.id}: {self.name} ({self.record_count} records)>"
