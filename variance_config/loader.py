"""
Configuration Loader (``variance_config.loader``).

Responsibility
--------------
Loads YAML files and parses them into ``variance_config.schema`` dataclass
instances.  Runtime callers go through ``variance_config.get_active_settings()``
instead of calling this module directly.

Invariants enforced
-------------------
* ``validate_settings`` collects every problem before reporting, so a bad
  file is fixed in one pass.
* Every parsed object is a frozen dataclass.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Top-level YAML that is not a mapping  -> ``ValueError``.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any

import yaml

from variance_config.schema import AnalysisSettings
from variance_kernel.domain.values import GroupBy, VarianceThresholds


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level, got {type(data).__name__}")
    return data


def merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` onto ``base``. Lists and scalars are replaced."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_settings(data: dict[str, Any]) -> list[str]:
    """Return a list of human-readable problems; empty when valid."""
    errors: list[str] = []

    thresholds = data.get("thresholds", {})
    if not isinstance(thresholds, dict):
        errors.append("thresholds: must be a mapping")
    else:
        for key in ("percent", "dollar"):
            if key not in thresholds:
                continue
            value = thresholds[key]
            if not _is_number(value) or not math.isfinite(value) or value < 0:
                errors.append(f"thresholds.{key}: must be a non-negative number, got {value!r}")

    group_by = data.get("group_by", GroupBy.NONE.value)
    valid_groupings = [g.value for g in GroupBy]
    if group_by not in valid_groupings:
        errors.append(f"group_by: must be one of {valid_groupings}, got {group_by!r}")

    aliases = data.get("column_aliases", {})
    if not isinstance(aliases, dict):
        errors.append("column_aliases: must be a mapping of role -> list of strings")
    else:
        for role, values in aliases.items():
            if not isinstance(values, list) or not all(
                isinstance(v, str) and v.strip() for v in values
            ):
                errors.append(f"column_aliases.{role}: must be a list of non-empty strings")

    extraction = data.get("extraction", {})
    if not isinstance(extraction, dict):
        errors.append("extraction: must be a mapping")
    elif "error_prefix" in extraction:
        prefix = extraction["error_prefix"]
        if not isinstance(prefix, str) or not prefix.strip():
            errors.append("extraction.error_prefix: must be a non-empty string")

    merge = data.get("merge", {})
    if not isinstance(merge, dict):
        errors.append("merge: must be a mapping")
    elif "max_sources" in merge:
        max_sources = merge["max_sources"]
        if not isinstance(max_sources, int) or isinstance(max_sources, bool) or max_sources < 1:
            errors.append(f"merge.max_sources: must be a positive integer, got {max_sources!r}")

    return errors


def parse_settings(data: dict[str, Any], source_path: str | None = None) -> AnalysisSettings:
    """Parse an already-validated settings dict."""
    thresholds = VarianceThresholds.from_dict(data.get("thresholds") or {})
    aliases = tuple(
        (str(role), tuple(a.strip().lower() for a in values))
        for role, values in (data.get("column_aliases") or {}).items()
    )
    extraction = data.get("extraction") or {}
    merge = data.get("merge") or {}
    defaults = AnalysisSettings()
    return AnalysisSettings(
        thresholds=thresholds,
        group_by=GroupBy(data.get("group_by", GroupBy.NONE.value)),
        column_aliases=aliases,
        extraction_error_prefix=extraction.get("error_prefix", defaults.extraction_error_prefix),
        max_merge_sources=merge.get("max_sources", defaults.max_merge_sources),
        source_path=source_path,
    )
