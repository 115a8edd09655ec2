"""
Pure domain layer.

Immutable value objects and records with NO dependencies on the ORM, the
database or I/O.  Time enters only through an injected Clock.
"""

from variance_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from variance_kernel.domain.projects import Project, ProjectSettings
from variance_kernel.domain.records import (
    DIMENSIONS,
    ParsedDataset,
    VarianceRecord,
    has_value,
)
from variance_kernel.domain.values import (
    Comment,
    GroupBy,
    RootCause,
    VarianceStatus,
    VarianceThresholds,
    compute_percent_variance,
)

__all__ = [
    "Clock",
    "Comment",
    "DIMENSIONS",
    "DeterministicClock",
    "GroupBy",
    "ParsedDataset",
    "Project",
    "ProjectSettings",
    "RootCause",
    "SystemClock",
    "VarianceRecord",
    "VarianceStatus",
    "VarianceThresholds",
    "compute_percent_variance",
    "has_value",
]
