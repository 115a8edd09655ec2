"""
Column role resolution: raw headers -> validated ColumnMapping. Pure, ZERO I/O.

Auto-detection is an ordered scan with a deterministic tie-break:

    for header in headers (source order):
        for role in ROLE_PRIORITY:
            if role is unassigned and header matches an alias of role:
                assign header to role
                move on to the next header

So a header fills at most one role, and a role keeps the first header that
claimed it. Ambiguous layouts resolve by header order first, then by role
priority. Callers may override any assignment before validation.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from variance_kernel.exceptions import MappingError
from variance_kernel.logging_config import get_logger
from variance_ingestion.domain.types import ROLE_PRIORITY, ColumnMapping, ColumnRole
from variance_ingestion.mapping.aliases import ColumnAliases

logger = get_logger("ingestion.resolver")


def detect_columns(headers: Sequence[str], aliases: ColumnAliases) -> ColumnMapping:
    """Best-effort mapping from alias matches. Not validated."""
    assigned: dict[str, str] = {}
    for header in headers:
        if not header:
            continue
        for role in ROLE_PRIORITY:
            if role.value in assigned:
                continue
            if aliases.matches(role, header):
                assigned[role.value] = header
                break
    return ColumnMapping(**assigned)


def validate_mapping(mapping: ColumnMapping, headers: Sequence[str]) -> ColumnMapping:
    """
    Reject a mapping that cannot be used to build records.

    Raises:
        MappingError: a required role is unassigned, or an assigned header is
            not one of ``headers``.
    """
    header_set = set(headers)
    missing = tuple(role.value for role in mapping.missing_required())
    unknown = tuple(
        header for header in mapping.assigned().values() if header not in header_set
    )
    if missing or unknown:
        logger.warning(
            "column_mapping_rejected",
            extra={"missing_roles": list(missing), "unknown_headers": list(unknown)},
        )
        raise MappingError(missing_roles=missing, unknown_headers=unknown)
    return mapping


def resolve_columns(
    headers: Sequence[str],
    aliases: ColumnAliases,
    overrides: Mapping[ColumnRole | str, str | None] | None = None,
) -> ColumnMapping:
    """
    Auto-detect, apply manual overrides, then validate.

    Raises:
        MappingError: see ``validate_mapping``.
        ValueError: an override names an unknown role.
    """
    mapping = detect_columns(headers, aliases)
    if overrides:
        mapping = mapping.with_overrides(overrides)
    mapping = validate_mapping(mapping, headers)

    logger.info(
        "columns_resolved",
        extra={
            "mapping": mapping.to_dict(),
            "overridden_roles": sorted(ColumnRole(r).value for r in (overrides or {})),
        },
    )
    return mapping
