"""
variance_config -- single public entrypoint for analysis configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_settings()``.  The shipped ``defaults.yaml`` is always the
    base layer; an optional override file is merged on top of it.

Architecture position:
    Configuration -- sits above ``variance_kernel`` and below the ingestion,
    engine and service packages.  The kernel never imports from here.

Failure modes:
    - ``FileNotFoundError`` -- override path does not exist.
    - ``yaml.YAMLError`` -- malformed YAML.
    - ``ValueError`` -- schema validation failures (all problems listed).

Audit relevance:
    Every successful ``get_active_settings()`` call emits a
    ``VARIANCE_CONFIG_TRACE`` log entry with the thresholds, grouping and
    source file, so any significance flag can be traced to the settings that
    produced it.
"""

from __future__ import annotations

from pathlib import Path

from variance_config.loader import (
    load_yaml_file,
    merge_dicts,
    parse_settings,
    validate_settings,
)
from variance_config.schema import AnalysisSettings
from variance_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"

__all__ = [
    "AnalysisSettings",
    "DEFAULTS_PATH",
    "get_active_settings",
]


def get_active_settings(config_path: Path | str | None = None) -> AnalysisSettings:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: Optional YAML file whose keys override the defaults.

    Returns:
        Frozen ``AnalysisSettings``.

    Raises:
        FileNotFoundError: If ``config_path`` does not exist.
        ValueError: If the merged configuration fails validation.
    """
    data = load_yaml_file(DEFAULTS_PATH)
    source = str(DEFAULTS_PATH)
    if config_path is not None:
        data = merge_dicts(data, load_yaml_file(Path(config_path)))
        source = str(config_path)

    errors = validate_settings(data)
    if errors:
        raise ValueError(
            "Configuration validation failed:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )

    settings = parse_settings(data, source_path=source)

    _logger.info(
        "VARIANCE_CONFIG_TRACE",
        extra={
            "trace_type": "VARIANCE_CONFIG_TRACE",
            "config_source": source,
            "threshold_percent": settings.thresholds.percent,
            "threshold_dollar": settings.thresholds.dollar,
            "group_by": settings.group_by.value,
            "alias_roles": [role for role, _ in settings.column_aliases],
        },
    )
    return settings
