"""
Plain-text variance analysis report.

Executive summary, then starred items with their comments, then every
other item that carries comments.  Rendering is pure; the caller supplies
``generated_at`` and decides where the text goes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from variance_engines.summary import calculate_summary
from variance_kernel.domain.records import VarianceRecord, has_value
from variance_kernel.logging_config import get_logger
from variance_kernel.utils.formatting import format_currency, format_percent

logger = get_logger("services.export")

REPORT_TITLE = "VARIANCE ANALYSIS EXPORT"
RULE = "=" * 50
SUBRULE = "-" * 30


def export_filename(generated_at: datetime) -> str:
    return f"variance-analysis-{generated_at.date().isoformat()}.txt"


def _or_na(value: str | None) -> str:
    return value if has_value(value) else "N/A"


def _starred_lines(records: list[VarianceRecord]) -> list[str]:
    lines = [f"STARRED ITEMS ({len(records)})", SUBRULE]
    if not records:
        lines.append("No starred items.")
    for i, record in enumerate(records, start=1):
        lines.append(f"{i}. {record.category}")
        lines.append(f"   Cost Center: {_or_na(record.cost_center)}")
        lines.append(f"   GL Account: {_or_na(record.gl_account)}")
        lines.append(
            f"   Budget: {format_currency(record.budget)} | "
            f"Actual: {format_currency(record.actual)}"
        )
        lines.append(
            f"   Variance: {format_currency(record.dollar_variance)} "
            f"({format_percent(record.percent_variance)})"
        )
        if record.comments:
            lines.append("   Comments:")
            for comment in record.comments:
                lines.append(
                    f"     - {comment.text} "
                    f"({comment.author}, {comment.timestamp.date().isoformat()})"
                )
        lines.append("")
    return lines


def _commented_lines(records: list[VarianceRecord]) -> list[str]:
    lines = [f"OTHER ITEMS WITH COMMENTS ({len(records)})", SUBRULE]
    for i, record in enumerate(records, start=1):
        lines.append(f"{i}. {record.category} ({_or_na(record.cost_center)})")
        lines.append(f"   Variance: {format_currency(record.dollar_variance)}")
        for comment in record.comments:
            lines.append(f"   - {comment.text}")
        lines.append("")
    return lines


def render_analysis_report(records: Iterable[VarianceRecord], generated_at: datetime) -> str:
    """
    Render the report for ``records`` (usually the full dataset, unfiltered).

    Starred items appear once, in the starred section, whether or not they
    have comments.
    """
    records = list(records)
    summary = calculate_summary(records)
    starred = [r for r in records if r.is_starred]
    commented = [r for r in records if r.comments and not r.is_starred]

    lines = [
        REPORT_TITLE,
        f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S %Z').strip()}",
        RULE,
        "",
        "EXECUTIVE SUMMARY",
        SUBRULE,
        f"Total Budget: {format_currency(summary.total_budget)}",
        f"Total Actual: {format_currency(summary.total_actual)}",
        f"Net Variance: {format_currency(summary.total_dollar_variance)} "
        f"({format_percent(summary.total_percent_variance)})",
        f"Significant Items: {summary.significant_count}",
        "",
    ]
    lines.extend(_starred_lines(starred))
    if commented:
        lines.append("")
        lines.extend(_commented_lines(commented))

    logger.info(
        "report_rendered",
        extra={
            "record_count": len(records),
            "starred_count": len(starred),
            "commented_count": len(commented),
        },
    )
    return "\n".join(lines).rstrip("\n") + "\n"
