"""
variance_ingestion.domain -- Pure types for ingestion.

ZERO I/O. Imports only from variance_kernel/domain/.
"""

from variance_ingestion.domain.types import (
    REQUIRED_ROLES,
    ROLE_PRIORITY,
    ColumnMapping,
    ColumnRole,
    ImportProbe,
    RawSource,
    TabularData,
)

__all__ = [
    "REQUIRED_ROLES",
    "ROLE_PRIORITY",
    "ColumnMapping",
    "ColumnRole",
    "ImportProbe",
    "RawSource",
    "TabularData",
]
