"""
Import service: raw content -> validated mapping -> ParsedDataset.

Orchestrates the tabular parsers, column resolver and record builder for
every input shape (pasted text, cell grids, record lists, local files and
AI-extraction responses), and the multi-file workflow that ingests each file
on its own before handing the successes to the merge engine.

Every ingestion attempt runs under its own correlation id and logs
``ingestion_started`` followed by ``ingestion_completed`` or
``ingestion_failed``.  Typed errors propagate unchanged; nothing is
partially ingested.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Sequence
from uuid import uuid4

from variance_config import AnalysisSettings, get_active_settings
from variance_engines.merge import MergeStrategy, merge_datasets
from variance_kernel.domain.records import ParsedDataset
from variance_kernel.domain.values import VarianceThresholds
from variance_kernel.exceptions import FormatError, IngestionError, MergeError
from variance_kernel.logging_config import LogContext, get_logger

from variance_ingestion.adapters.base import SourceAdapter
from variance_ingestion.adapters.extraction import check_extraction_response
from variance_ingestion.adapters.text_adapter import TextFileAdapter
from variance_ingestion.adapters.xlsx_adapter import XlsxAdapter
from variance_ingestion.domain.types import ColumnRole, ImportProbe, RawSource, TabularData
from variance_ingestion.mapping.aliases import ColumnAliases
from variance_ingestion.mapping.builder import build_dataset
from variance_ingestion.mapping.resolver import detect_columns, resolve_columns
from variance_ingestion.parsing.tabular import (
    parse_cell_grid,
    parse_delimited_text,
    parse_record_objects,
)

logger = get_logger("ingestion.import_service")

PROBE_SAMPLE_SIZE = 5

Overrides = Mapping[ColumnRole | str, str | None]


def _default_adapters() -> dict[str, SourceAdapter]:
    adapters: dict[str, SourceAdapter] = {}
    for adapter in (TextFileAdapter(), XlsxAdapter()):
        for extension in adapter.extensions:
            adapters[extension] = adapter
    return adapters


@dataclass(frozen=True)
class SourceFailure:
    """One file that could not be ingested during a multi-file import."""

    source_name: str
    error_code: str
    message: str


@dataclass(frozen=True)
class MergeOutcome:
    """Result of ``ImportService.ingest_files``."""

    dataset: ParsedDataset
    strategy: MergeStrategy
    sources: tuple[str, ...]  # files that ingested successfully, in order
    failures: tuple[SourceFailure, ...] = ()

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)


class ImportService:
    """Runs the ingestion pipeline. Holds settings, alias table and file adapters."""

    def __init__(
        self,
        settings: AnalysisSettings | None = None,
        aliases: ColumnAliases | None = None,
        adapters: dict[str, SourceAdapter] | None = None,
    ):
        self._settings = settings or get_active_settings()
        self._aliases = aliases or ColumnAliases.from_settings(self._settings)
        self._adapters = adapters if adapters is not None else _default_adapters()

    @property
    def settings(self) -> AnalysisSettings:
        return self._settings

    @property
    def aliases(self) -> ColumnAliases:
        return self._aliases

    # -------------------------------------------------------------------------
    # Reading and previewing
    # -------------------------------------------------------------------------

    def read_file(self, source_path: Path | str, options: dict[str, Any] | None = None) -> RawSource:
        """
        Read a local file through the adapter registered for its extension.

        Raises:
            FormatError: no adapter for the extension, or unreadable content.
            OSError: the file cannot be opened.
        """
        path = Path(source_path)
        adapter = self._adapters.get(path.suffix.lower())
        if adapter is None:
            raise FormatError(
                f"Unsupported file type {path.suffix or '(none)'!r}; "
                f"expected one of {sorted(self._adapters)}",
                path.name,
            )
        return adapter.read(path, options or {})

    def parse_source(self, raw: RawSource) -> TabularData:
        if raw.text is not None:
            return parse_delimited_text(raw.text, raw.name)
        return parse_cell_grid(raw.grid, raw.name)

    def probe_tabular(self, tabular: TabularData) -> ImportProbe:
        """Preview for the column-mapping step: headers, sample rows, best guess."""
        return ImportProbe(
            headers=tabular.headers,
            row_count=tabular.row_count,
            sample_rows=tabular.rows[:PROBE_SAMPLE_SIZE],
            detected_mapping=detect_columns(tabular.headers, self._aliases),
            delimiter=tabular.delimiter,
        )

    def probe_text(self, text: str) -> ImportProbe:
        return self.probe_tabular(parse_delimited_text(text))

    def probe_file(self, source_path: Path | str, options: dict[str, Any] | None = None) -> ImportProbe:
        return self.probe_tabular(self.parse_source(self.read_file(source_path, options)))

    # -------------------------------------------------------------------------
    # Ingestion
    # -------------------------------------------------------------------------

    def _ingest(
        self,
        source_name: str,
        parse: Callable[[], TabularData],
        overrides: Overrides | None,
        thresholds: VarianceThresholds | None,
    ) -> ParsedDataset:
        thresholds = thresholds or self._settings.thresholds
        with LogContext.bind(correlation_id=str(uuid4()), source_name=source_name):
            logger.info(
                "ingestion_started",
                extra={"overridden_roles": sorted(ColumnRole(r).value for r in (overrides or {}))},
            )
            try:
                tabular = parse()
                mapping = resolve_columns(tabular.headers, self._aliases, overrides)
                dataset = build_dataset(tabular, mapping, thresholds)
            except IngestionError as exc:
                logger.warning(
                    "ingestion_failed",
                    extra={"error_code": exc.code, "error": str(exc)},
                )
                raise
            logger.info(
                "ingestion_completed",
                extra={
                    "record_count": len(dataset),
                    "column_count": len(dataset.columns),
                    "periods": list(dataset.periods),
                },
            )
            return dataset

    def ingest_text(
        self,
        text: str,
        overrides: Overrides | None = None,
        thresholds: VarianceThresholds | None = None,
        source_name: str = "pasted text",
    ) -> ParsedDataset:
        return self._ingest(
            source_name, lambda: parse_delimited_text(text, source_name), overrides, thresholds
        )

    def ingest_grid(
        self,
        grid: Sequence[Sequence[Any]],
        overrides: Overrides | None = None,
        thresholds: VarianceThresholds | None = None,
        source_name: str = "spreadsheet",
    ) -> ParsedDataset:
        return self._ingest(
            source_name, lambda: parse_cell_grid(grid, source_name), overrides, thresholds
        )

    def ingest_records(
        self,
        records: Iterable[Mapping[str, Any]],
        headers: Sequence[str] | None = None,
        overrides: Overrides | None = None,
        thresholds: VarianceThresholds | None = None,
        source_name: str = "records",
    ) -> ParsedDataset:
        return self._ingest(
            source_name,
            lambda: parse_record_objects(records, headers, source_name),
            overrides,
            thresholds,
        )

    def ingest_source(
        self,
        raw: RawSource,
        overrides: Overrides | None = None,
        thresholds: VarianceThresholds | None = None,
    ) -> ParsedDataset:
        return self._ingest(raw.name, lambda: self.parse_source(raw), overrides, thresholds)

    def ingest_file(
        self,
        source_path: Path | str,
        overrides: Overrides | None = None,
        thresholds: VarianceThresholds | None = None,
        options: dict[str, Any] | None = None,
    ) -> ParsedDataset:
        path = Path(source_path)
        return self._ingest(
            path.name,
            lambda: self.parse_source(self.read_file(path, options)),
            overrides,
            thresholds,
        )

    def ingest_extraction(
        self,
        response_text: str,
        overrides: Overrides | None = None,
        thresholds: VarianceThresholds | None = None,
        source_name: str = "ai extraction",
    ) -> ParsedDataset:
        """
        Ingest CSV produced by an AI extraction collaborator.

        Raises:
            ExtractionError: the response carries the failure sentinel.
        """
        prefix = self._settings.extraction_error_prefix
        return self._ingest(
            source_name,
            lambda: parse_delimited_text(check_extraction_response(response_text, prefix), source_name),
            overrides,
            thresholds,
        )

    def ingest_files(
        self,
        paths: Sequence[Path | str],
        strategy: MergeStrategy | str = MergeStrategy.STACK,
        thresholds: VarianceThresholds | None = None,
    ) -> MergeOutcome:
        """
        Ingest each file independently, then merge the ones that succeeded.

        A file that fails is recorded in ``failures`` and left out of the
        merge; it does not stop the others.

        Raises:
            MergeError: more files than the configured maximum, or no file
                could be ingested.
        """
        strategy = MergeStrategy(strategy)
        thresholds = thresholds or self._settings.thresholds
        limit = self._settings.max_merge_sources
        if len(paths) > limit:
            raise MergeError(
                f"At most {limit} files can be combined, got {len(paths)}",
                dataset_count=len(paths),
            )

        datasets: list[ParsedDataset] = []
        sources: list[str] = []
        failures: list[SourceFailure] = []
        for source_path in paths:
            name = Path(source_path).name
            try:
                datasets.append(self.ingest_file(source_path, thresholds=thresholds))
                sources.append(name)
            except IngestionError as exc:
                failures.append(SourceFailure(name, exc.code, str(exc)))
            except OSError as exc:
                logger.warning("source_unreadable", extra={"source": name, "error": str(exc)})
                failures.append(SourceFailure(name, "SOURCE_UNREADABLE", str(exc)))

        if not datasets:
            raise MergeError("None of the files could be ingested", dataset_count=0)

        merged = merge_datasets(datasets, strategy=strategy, thresholds=thresholds)
        logger.info(
            "multi_file_import_completed",
            extra={
                "strategy": strategy.value,
                "sources": sources,
                "failed_sources": [f.source_name for f in failures],
                "record_count": len(merged),
            },
        )
        return MergeOutcome(
            dataset=merged,
            strategy=strategy,
            sources=tuple(sources),
            failures=tuple(failures),
        )
