"""
variance_ingestion.domain.types -- Pure frozen dataclasses for ingestion.

ZERO I/O. Imports only from variance_kernel/domain/.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Mapping


# =============================================================================
# Column roles
# =============================================================================


class ColumnRole(str, Enum):
    """Semantic meaning assigned to a raw column header."""

    CATEGORY = "category"
    BUDGET = "budget"
    ACTUAL = "actual"
    COST_CENTER = "cost_center"
    GL_ACCOUNT = "gl_account"
    PERIOD = "period"

    @property
    def is_required(self) -> bool:
        return self in REQUIRED_ROLES


# Fixed scan order for auto-detection: each header takes the first
# still-unassigned role it matches in this order.
ROLE_PRIORITY: tuple[ColumnRole, ...] = (
    ColumnRole.CATEGORY,
    ColumnRole.BUDGET,
    ColumnRole.ACTUAL,
    ColumnRole.COST_CENTER,
    ColumnRole.GL_ACCOUNT,
    ColumnRole.PERIOD,
)

REQUIRED_ROLES: frozenset[ColumnRole] = frozenset(
    {ColumnRole.CATEGORY, ColumnRole.BUDGET, ColumnRole.ACTUAL}
)


# =============================================================================
# Column mapping
# =============================================================================


@dataclass(frozen=True)
class ColumnMapping:
    """Source header chosen for each role; ``None`` means unassigned."""

    category: str | None = None
    budget: str | None = None
    actual: str | None = None
    cost_center: str | None = None
    gl_account: str | None = None
    period: str | None = None

    def get(self, role: ColumnRole | str) -> str | None:
        return getattr(self, ColumnRole(role).value)

    def assigned(self) -> dict[ColumnRole, str]:
        """Roles that have a header, in priority order."""
        return {
            role: self.get(role)
            for role in ROLE_PRIORITY
            if self.get(role)
        }

    def missing_required(self) -> tuple[ColumnRole, ...]:
        return tuple(r for r in ROLE_PRIORITY if r.is_required and not self.get(r))

    def with_overrides(self, overrides: Mapping[ColumnRole | str, str | None]) -> ColumnMapping:
        """Replace any subset of assignments. ``None`` or ``""`` clears a role."""
        changes = {ColumnRole(role).value: (header or None) for role, header in overrides.items()}
        return replace(self, **changes)

    def to_dict(self) -> dict[str, str]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name)}

    @classmethod
    def from_dict(cls, data: Mapping[str, str | None]) -> ColumnMapping:
        return cls().with_overrides(data)


# =============================================================================
# Parsed tabular content
# =============================================================================


@dataclass(frozen=True)
class TabularData:
    """Header list plus one header -> cell dict per accepted data row."""

    headers: tuple[str, ...]
    rows: tuple[dict[str, Any], ...]  # do not mutate
    delimiter: str | None = None  # None for grid / record sources

    @property
    def row_count(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class RawSource:
    """Content read by an adapter: exactly one of ``text`` or ``grid``."""

    name: str
    text: str | None = None
    grid: tuple[tuple[Any, ...], ...] | None = None

    def __post_init__(self) -> None:
        if (self.text is None) == (self.grid is None):
            raise ValueError("RawSource needs exactly one of text or grid")


@dataclass(frozen=True)
class ImportProbe:
    """Preview of a source before records are built (the column-mapping step)."""

    headers: tuple[str, ...]
    row_count: int
    sample_rows: tuple[dict[str, Any], ...]  # first 5 rows; do not mutate
    detected_mapping: ColumnMapping
    delimiter: str | None = None

    @property
    def missing_roles(self) -> tuple[ColumnRole, ...]:
        return self.detected_mapping.missing_required()

    @property
    def is_ready(self) -> bool:
        return not self.missing_roles
