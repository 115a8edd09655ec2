"""
variance_services -- Package init and public API.

Responsibility:
    Stateful orchestration over the pure engines and the ingestion
    pipeline: the analysis workspace, workflow actions, saved projects,
    the text export and demo data.  This is the **only** layer that may hold
    database sessions or read wall-clock time.

Architecture position:
    Services -- stateful orchestration over engines + ingestion + kernel.

    Dependency direction (enforced by tests/architecture/test_layer_boundaries.py):
        variance_services/  -> variance_engines/, variance_ingestion/, variance_kernel/  (allowed)
        variance_engines/   -> variance_services/  (FORBIDDEN)
        variance_kernel/    -> variance_services/  (FORBIDDEN)

Invariants enforced:
    - Layer isolation: variance_kernel and variance_engines never import
      from this package.
"""

from variance_kernel.logging_config import get_logger

logger = get_logger("services")

from variance_services.export import export_filename, render_analysis_report
from variance_services.project_service import ProjectService
from variance_services.sample_data import generate_sample_dataset
from variance_services.workflow import (
    WORKFLOW_FIELDS,
    add_comment,
    toggle_star,
    update_dataset_record,
    update_record,
)
from variance_services.workspace import AnalysisWorkspace, ExportedReport

__all__ = [
    "WORKFLOW_FIELDS",
    "AnalysisWorkspace",
    "ExportedReport",
    "ProjectService",
    "add_comment",
    "export_filename",
    "generate_sample_dataset",
    "render_analysis_report",
    "toggle_star",
    "update_dataset_record",
    "update_record",
]
