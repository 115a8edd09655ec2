"""
Analysis settings schema.

The YAML files shipped with (or passed to) ``variance_config`` are parsed by
the loader into these frozen types.  Column alias tables stay raw here
(role name -> substrings); the ingestion layer compiles them into its
resolver strategy.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from variance_kernel.domain.projects import ProjectSettings
from variance_kernel.domain.values import GroupBy, VarianceThresholds


@dataclass(frozen=True)
class AnalysisSettings:
    """Everything the analysis pipeline reads from configuration."""

    thresholds: VarianceThresholds = field(default_factory=VarianceThresholds)
    group_by: GroupBy = GroupBy.NONE
    # (role, (alias, ...)) in the priority order given by the file
    column_aliases: tuple[tuple[str, tuple[str, ...]], ...] = ()
    extraction_error_prefix: str = "ERROR:"
    max_merge_sources: int = 3
    source_path: str | None = None

    def aliases_dict(self) -> dict[str, tuple[str, ...]]:
        return dict(self.column_aliases)

    def project_settings(self) -> ProjectSettings:
        return ProjectSettings(thresholds=self.thresholds, group_by=self.group_by)

    def with_project_settings(self, settings: ProjectSettings) -> AnalysisSettings:
        return replace(self, thresholds=settings.thresholds, group_by=settings.group_by)
