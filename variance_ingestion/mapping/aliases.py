"""
Column alias tables used by auto-detection.

``ColumnAliases`` is the strategy object handed to the resolver.  The
default table comes from ``variance_config`` so deployments can extend it in
YAML; tests build their own with ``ColumnAliases.from_mapping``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from variance_ingestion.domain.types import ROLE_PRIORITY, ColumnRole


@dataclass(frozen=True)
class ColumnAliases:
    """Lower-case substrings that identify each role in a header."""

    table: tuple[tuple[ColumnRole, tuple[str, ...]], ...]

    def aliases_for(self, role: ColumnRole) -> tuple[str, ...]:
        for candidate, aliases in self.table:
            if candidate is role:
                return aliases
        return ()

    def matches(self, role: ColumnRole, header: str) -> bool:
        """True when the lower-cased header contains any alias of ``role``."""
        lowered = header.lower()
        return any(alias in lowered for alias in self.aliases_for(role))

    def extended(self, role: ColumnRole | str, aliases: Iterable[str]) -> ColumnAliases:
        """Copy with extra aliases appended to one role."""
        role = ColumnRole(role)
        extra = tuple(a.strip().lower() for a in aliases if a.strip())
        table = dict(self.table)
        table[role] = table.get(role, ()) + extra
        return ColumnAliases.from_mapping(table)

    @classmethod
    def from_mapping(cls, raw: Mapping[ColumnRole | str, Iterable[str]]) -> ColumnAliases:
        """
        Build from role -> aliases.

        Raises:
            ValueError: an unknown role name.
        """
        by_role: dict[ColumnRole, tuple[str, ...]] = {}
        for role, aliases in raw.items():
            try:
                role = ColumnRole(role)
            except ValueError:
                raise ValueError(
                    f"Unknown column role {role!r}; expected one of "
                    f"{[r.value for r in ColumnRole]}"
                ) from None
            by_role[role] = tuple(a.strip().lower() for a in aliases if a.strip())
        # Stored in scan priority order regardless of input order
        return cls(table=tuple((r, by_role.get(r, ())) for r in ROLE_PRIORITY))

    @classmethod
    def from_settings(cls, settings) -> ColumnAliases:
        """Compile the alias table carried by ``AnalysisSettings``."""
        return cls.from_mapping(settings.aliases_dict())

    @classmethod
    def default(cls) -> ColumnAliases:
        from variance_config import get_active_settings

        return cls.from_settings(get_active_settings())
