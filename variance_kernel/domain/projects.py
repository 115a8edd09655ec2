"""
Saved project DTOs.

A project is a named snapshot of a dataset together with the analysis
settings it was reviewed under.  These are the objects services hand out;
the ORM model in ``variance_kernel.models.project`` never leaves the service
layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from variance_kernel.domain.records import ParsedDataset
from variance_kernel.domain.values import GroupBy, VarianceThresholds


@dataclass(frozen=True)
class ProjectSettings:
    """Per-project analysis settings."""

    thresholds: VarianceThresholds = field(default_factory=VarianceThresholds)
    group_by: GroupBy = GroupBy.NONE

    def to_dict(self) -> dict[str, Any]:
        return {
            "thresholds": self.thresholds.to_dict(),
            "group_by": self.group_by.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ProjectSettings:
        data = data or {}
        return cls(
            thresholds=VarianceThresholds.from_dict(data.get("thresholds") or {}),
            group_by=GroupBy(data.get("group_by", GroupBy.NONE.value)),
        )


@dataclass(frozen=True)
class Project:
    """A saved analysis."""

    project_id: UUID
    name: str
    dataset: ParsedDataset
    settings: ProjectSettings
    created_at: datetime
    updated_at: datetime

    @property
    def record_count(self) -> int:
        return len(self.dataset)
