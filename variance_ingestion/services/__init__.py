"""Ingestion services."""

from variance_ingestion.services.import_service import (
    ImportService,
    MergeOutcome,
    SourceFailure,
)

__all__ = [
    "ImportService",
    "MergeOutcome",
    "SourceFailure",
]
