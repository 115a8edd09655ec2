"""
variance_services.workspace -- The analysis session a user works in.

Responsibility:
    Holds the current dataset, analysis settings and filters, and exposes
    every view a reviewer needs: the filtered record list, grouped rollups,
    KPIs, summary, insights and the text export.  Workflow edits go through
    here so the dataset is always replaced, never mutated.

Architecture position:
    Services -- composes the import service (ingestion), the pure engines
    and the workflow actions.  Reads the clock for "today" and passes it to
    the engines.

Invariants enforced:
    - Loading is all-or-nothing: a failed load re-raises and the previous
      dataset, filters and settings are left exactly as they were.
    - Every record in the dataset is classified under the current
      thresholds; changing thresholds reclassifies the whole dataset.
    - A saved project keeps its stored significance flags, including ones
      set by hand, unless its thresholds differ from the workspace's.
    - Loading a new dataset clears the filters.

Failure modes:
    - IngestionError subclasses from the load methods.
    - MergeError from ``load_files``.
    - WorkflowError / RecordNotFoundError from record edits.
    - TypeError / ValueError from ``update_thresholds`` on invalid values.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Sequence
from uuid import UUID, uuid4

from variance_config import AnalysisSettings
from variance_engines.aggregation import GroupedRollup, group_records
from variance_engines.classifier import classify
from variance_engines.filtering import FacetValues, FilterSpec, facet_values, filter_records
from variance_engines.kpi import KpiReport, calculate_kpis
from variance_engines.merge import MergeStrategy
from variance_engines.summary import Insight, VarianceSummary, build_insights, calculate_summary
from variance_ingestion.services.import_service import ImportService, MergeOutcome
from variance_kernel.domain.clock import Clock, SystemClock
from variance_kernel.domain.projects import Project, ProjectSettings
from variance_kernel.domain.records import ParsedDataset, VarianceRecord
from variance_kernel.domain.values import GroupBy, VarianceThresholds
from variance_kernel.logging_config import LogContext, get_logger
from variance_services import workflow
from variance_services.export import export_filename, render_analysis_report
from variance_services.sample_data import generate_sample_dataset

logger = get_logger("services.workspace")


@dataclass(frozen=True)
class ExportedReport:
    filename: str
    text: str


class AnalysisWorkspace:
    """One reviewer's working state over a single dataset."""

    def __init__(
        self,
        import_service: ImportService | None = None,
        settings: AnalysisSettings | None = None,
        clock: Clock | None = None,
    ) -> None:
        if import_service is None:
            import_service = ImportService(settings=settings)
        self._imports = import_service
        self._settings = settings or import_service.settings
        self._clock = clock or SystemClock()
        self._dataset = ParsedDataset()
        self._dataset_id: UUID | None = None
        self._filters = FilterSpec()

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def dataset(self) -> ParsedDataset:
        return self._dataset

    @property
    def dataset_id(self) -> UUID | None:
        return self._dataset_id

    @property
    def settings(self) -> AnalysisSettings:
        return self._settings

    @property
    def thresholds(self) -> VarianceThresholds:
        return self._settings.thresholds

    @property
    def group_by(self) -> GroupBy:
        return self._settings.group_by

    @property
    def filters(self) -> FilterSpec:
        return self._filters

    @property
    def has_data(self) -> bool:
        return len(self._dataset) > 0

    def project_settings(self) -> ProjectSettings:
        return self._settings.project_settings()

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def _replace_dataset(
        self, dataset: ParsedDataset, source: str, reclassify: bool = True
    ) -> ParsedDataset:
        self._dataset = classify(dataset, thresholds=self.thresholds) if reclassify else dataset
        self._dataset_id = uuid4()
        self._filters = FilterSpec()
        with LogContext.bind(dataset_id=self._dataset_id):
            logger.info(
                "dataset_loaded",
                extra={"source": source, "record_count": len(self._dataset)},
            )
        return self._dataset

    def _load(self, source: str, ingest: Callable[[], ParsedDataset]) -> ParsedDataset:
        # ingest() raises before any state changes
        return self._replace_dataset(ingest(), source)

    def load_text(self, text: str, overrides: Mapping[str, str | None] | None = None) -> ParsedDataset:
        return self._load(
            "text", lambda: self._imports.ingest_text(text, overrides, self.thresholds)
        )

    def load_grid(
        self,
        grid: Sequence[Sequence[Any]],
        overrides: Mapping[str, str | None] | None = None,
    ) -> ParsedDataset:
        return self._load(
            "grid", lambda: self._imports.ingest_grid(grid, overrides, self.thresholds)
        )

    def load_records(
        self,
        records: Iterable[Mapping[str, Any]],
        headers: Sequence[str] | None = None,
        overrides: Mapping[str, str | None] | None = None,
    ) -> ParsedDataset:
        return self._load(
            "records",
            lambda: self._imports.ingest_records(records, headers, overrides, self.thresholds),
        )

    def load_file(
        self,
        source_path: Path | str,
        overrides: Mapping[str, str | None] | None = None,
        options: dict[str, Any] | None = None,
    ) -> ParsedDataset:
        return self._load(
            Path(source_path).name,
            lambda: self._imports.ingest_file(source_path, overrides, self.thresholds, options),
        )

    def load_extraction(
        self,
        response_text: str,
        overrides: Mapping[str, str | None] | None = None,
    ) -> ParsedDataset:
        return self._load(
            "ai extraction",
            lambda: self._imports.ingest_extraction(response_text, overrides, self.thresholds),
        )

    def load_files(
        self,
        paths: Sequence[Path | str],
        strategy: MergeStrategy | str = MergeStrategy.STACK,
    ) -> MergeOutcome:
        outcome = self._imports.ingest_files(paths, strategy, self.thresholds)
        self._replace_dataset(outcome.dataset, f"merge:{outcome.strategy.value}")
        return outcome

    def load_dataset(self, dataset: ParsedDataset) -> ParsedDataset:
        return self._replace_dataset(dataset, "dataset")

    def load_sample(self, seed: int | None = None) -> ParsedDataset:
        return self._replace_dataset(
            generate_sample_dataset(seed=seed, clock=self._clock, thresholds=self.thresholds),
            "sample",
        )

    def load_project(self, project: Project) -> ParsedDataset:
        """Adopt a saved project's settings, then its dataset."""
        reclassify = project.settings.thresholds != self.thresholds
        self._settings = self._settings.with_project_settings(project.settings)
        with LogContext.bind(project_id=project.project_id):
            return self._replace_dataset(project.dataset, "project", reclassify=reclassify)

    # -------------------------------------------------------------------------
    # Settings and filters
    # -------------------------------------------------------------------------

    def update_thresholds(
        self,
        percent: float | None = None,
        dollar: float | None = None,
    ) -> VarianceThresholds:
        """Change either threshold and reclassify every record."""
        current = self.thresholds
        thresholds = VarianceThresholds(
            percent=current.percent if percent is None else percent,
            dollar=current.dollar if dollar is None else dollar,
        )
        self._settings = replace(self._settings, thresholds=thresholds)
        self._dataset = classify(self._dataset, thresholds=thresholds)
        logger.info("thresholds_updated", extra=thresholds.to_dict())
        return thresholds

    def set_group_by(self, group_by: GroupBy | str) -> GroupBy:
        self._settings = replace(self._settings, group_by=GroupBy(group_by))
        return self._settings.group_by

    def set_filters(self, spec: FilterSpec | None = None, **changes: Any) -> FilterSpec:
        """Replace the filter spec, or change individual fields of the current one."""
        base = spec if spec is not None else self._filters
        self._filters = replace(base, **changes) if changes else base
        return self._filters

    def reset_filters(self) -> FilterSpec:
        self._filters = FilterSpec()
        return self._filters

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def view(self) -> list[VarianceRecord]:
        return filter_records(self._dataset.records, self._filters)

    def groups(self) -> list[GroupedRollup]:
        """Rollups of the filtered view; empty when grouping is off."""
        if self.group_by is GroupBy.NONE:
            return []
        return group_records(self.view(), group_by=self.group_by)

    def kpis(self, months_elapsed: int | None = None) -> KpiReport:
        return calculate_kpis(
            self._dataset.records, as_of=self._clock.today(), months_elapsed=months_elapsed
        )

    def summary(self) -> VarianceSummary:
        return calculate_summary(self.view())

    def insights(self) -> list[Insight]:
        return build_insights(self._dataset.records)

    def facets(self) -> FacetValues:
        return facet_values(self._dataset.records)

    # -------------------------------------------------------------------------
    # Workflow
    # -------------------------------------------------------------------------

    def _apply(
        self, record_id: UUID | str, action: Callable[[VarianceRecord], VarianceRecord]
    ) -> VarianceRecord:
        updated: list[VarianceRecord] = []

        def run(record: VarianceRecord) -> VarianceRecord:
            result = action(record)
            updated.append(result)
            return result

        with LogContext.bind(dataset_id=self._dataset_id):
            self._dataset = workflow.update_dataset_record(self._dataset, record_id, run)
        return updated[0]

    def update_record(self, record_id: UUID | str, **changes: Any) -> VarianceRecord:
        return self._apply(record_id, lambda r: workflow.update_record(r, **changes))

    def comment(self, record_id: UUID | str, author: str, text: str) -> VarianceRecord:
        return self._apply(
            record_id, lambda r: workflow.add_comment(r, author, text, clock=self._clock)
        )

    def toggle_star(self, record_id: UUID | str) -> VarianceRecord:
        return self._apply(record_id, workflow.toggle_star)

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def export_report(self) -> ExportedReport:
        generated_at = self._clock.now()
        return ExportedReport(
            filename=export_filename(generated_at),
            text=render_analysis_report(self._dataset.records, generated_at),
        )
