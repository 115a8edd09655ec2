"""
Typed Exception Hierarchy for variance analysis.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Ingestion is where user-supplied data meets the pipeline, and callers need
to tell a bad paste apart from a bad column mapping without parsing message
text. Every error therefore has:
  1. A TYPED exception class (catch by type, not message)
  2. A CODE attribute (machine-readable, safe to surface in an API or UI)
  3. Structured DATA (missing roles, unknown ids, extraction reason)

Example:
    try:
        dataset = service.ingest_text(pasted)
    except MappingError as e:
        ask_user_to_map(e.missing_roles)
    except FormatError as e:
        show_message(str(e))

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    VarianceAnalysisError (base)
    |
    +-- IngestionError
    |   +-- FormatError
    |   +-- MappingError
    |   +-- ExtractionError
    |
    +-- MergeError
    |
    +-- WorkflowError
    |   +-- RecordNotFoundError
    |
    +-- ProjectError
        +-- ProjectNotFoundError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                 | When Raised
----------------|----------------------|-------------------------------------------
Ingestion       | FORMAT_ERROR         | Raw input has no header/data or no valid rows
                | MAPPING_ERROR        | Required role unresolved, or override names
                |                      | a header not present in the input
                | EXTRACTION_FAILED    | AI extraction answered with the error sentinel
----------------|----------------------|-------------------------------------------
Merge           | MERGE_ERROR          | Nothing to merge, or pairing without exactly
                |                      | two datasets
----------------|----------------------|-------------------------------------------
Workflow        | WORKFLOW_ERROR       | Illegal field or value in a workflow action
                | RECORD_NOT_FOUND     | Record id not present in the dataset
----------------|----------------------|-------------------------------------------
Project         | PROJECT_NOT_FOUND    | Saved project id does not exist

Numeric cells that cannot be parsed are NOT errors: they normalize to 0 so a
single bad cell never fails an ingestion.
"""


class VarianceAnalysisError(Exception):
    """
    Base exception for all variance analysis errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "VARIANCE_ANALYSIS_ERROR"


# Ingestion exceptions


class IngestionError(VarianceAnalysisError):
    """Base exception for failures while turning raw content into records."""

    code: str = "INGESTION_ERROR"


class FormatError(IngestionError):
    """Raw tabular input could not be parsed into a header and data rows."""

    code: str = "FORMAT_ERROR"

    def __init__(self, reason: str, source_name: str | None = None):
        self.reason = reason
        self.source_name = source_name
        if source_name:
            super().__init__(f"{source_name}: {reason}")
        else:
            super().__init__(reason)


class MappingError(IngestionError):
    """Column mapping is missing a required role or names an unknown header."""

    code: str = "MAPPING_ERROR"

    def __init__(
        self,
        missing_roles: tuple[str, ...] = (),
        unknown_headers: tuple[str, ...] = (),
    ):
        self.missing_roles = tuple(missing_roles)
        self.unknown_headers = tuple(unknown_headers)
        parts = []
        if self.missing_roles:
            parts.append(
                "Missing required column(s): " + ", ".join(self.missing_roles)
            )
        if self.unknown_headers:
            parts.append(
                "Mapped column(s) not found in input: "
                + ", ".join(self.unknown_headers)
            )
        super().__init__("; ".join(parts) or "Invalid column mapping")


class ExtractionError(IngestionError):
    """AI extraction reported that it could not read the source."""

    code: str = "EXTRACTION_FAILED"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason or "Extraction failed")


# Merge exceptions


class MergeError(VarianceAnalysisError):
    """Datasets could not be combined with the requested strategy."""

    code: str = "MERGE_ERROR"

    def __init__(self, reason: str, dataset_count: int = 0):
        self.reason = reason
        self.dataset_count = dataset_count
        super().__init__(reason)


# Workflow exceptions


class WorkflowError(VarianceAnalysisError):
    """A workflow action tried to set an illegal field or value."""

    code: str = "WORKFLOW_ERROR"

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class RecordNotFoundError(WorkflowError):
    """Record with the given id is not in the dataset."""

    code: str = "RECORD_NOT_FOUND"

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Variance record not found: {record_id}")


# Project exceptions


class ProjectError(VarianceAnalysisError):
    """Base exception for saved project errors."""

    code: str = "PROJECT_ERROR"


class ProjectNotFoundError(ProjectError):
    """Saved project with the given id does not exist."""

    code: str = "PROJECT_NOT_FOUND"

    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project not found: {project_id}")
