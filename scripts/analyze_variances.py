#!/usr/bin/env python3
"""
Analyze budget-vs-actual variances from one or more files.

Loads the files (or a generated sample), merges them when more than one is
given, classifies every line against the thresholds and prints the summary,
insights, KPIs and (optionally) grouped rollups.

Usage:
    python3 scripts/analyze_variances.py FILE [FILE ...] [options]
    python3 scripts/analyze_variances.py --sample [options]

Examples:
    # One export, default thresholds from config
    python3 scripts/analyze_variances.py q1_variance.csv

    # Separate budget and actuals workbooks, paired by cost center / GL / period
    python3 scripts/analyze_variances.py budget.xlsx actuals.xlsx --strategy budget_actual

    # Tighter thresholds, grouped by cost center, with a text export
    python3 scripts/analyze_variances.py q1.csv --threshold-percent 5 --group-by cost_center \\
        --export out/

    # Save the analysis as a project
    python3 scripts/analyze_variances.py --sample --save-project "Q1 review" --db sqlite:///projects.db
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Project root on sys.path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Budget-vs-actual variance analysis.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "files",
        nargs="*",
        type=Path,
        help="CSV, TSV, TXT or XLSX files to analyze.",
    )
    parser.add_argument(
        "--sample",
        action="store_true",
        help="Analyze a generated demo dataset instead of files.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for --sample.",
    )
    parser.add_argument(
        "--strategy",
        choices=("stack", "budget_actual"),
        default="stack",
        help="How to combine several files (default: stack).",
    )
    parser.add_argument(
        "--threshold-percent",
        type=float,
        default=None,
        help="Percent threshold for significance (default: from config).",
    )
    parser.add_argument(
        "--threshold-dollar",
        type=float,
        default=None,
        help="Dollar threshold for significance (default: from config).",
    )
    parser.add_argument(
        "--group-by",
        choices=("none", "cost_center", "gl_account"),
        default=None,
        help="Print rollups grouped by this dimension.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML file overriding the packaged defaults.",
    )
    parser.add_argument(
        "--export",
        type=Path,
        default=None,
        help="Directory to write the text report into.",
    )
    parser.add_argument(
        "--save-project",
        default=None,
        metavar="NAME",
        help="Save the analysis as a project with this name.",
    )
    parser.add_argument(
        "--db",
        default=None,
        help="Database URL for --save-project (default: sqlite:///variance_projects.db).",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Log level for structured logs on stderr (default: WARNING).",
    )
    args = parser.parse_args(argv)
    if not args.files and not args.sample:
        parser.error("give at least one file, or --sample")
    return args


def _print_report(workspace) -> None:
    from variance_kernel.utils.formatting import format_currency, format_percent

    summary = workspace.summary()
    print(f"Records:        {summary.record_count}")
    print(f"Total budget:   {format_currency(summary.total_budget)}")
    print(f"Total actual:   {format_currency(summary.total_actual)}")
    print(
        f"Net variance:   {format_currency(summary.total_dollar_variance)} "
        f"({format_percent(summary.total_percent_variance)})"
    )
    print(f"Significant:    {summary.significant_count}")
    print()

    print("Insights:")
    for insight in workspace.insights():
        print(f"  [{insight.kind.value}] {insight.text}")
    print()

    kpis = workspace.kpis()
    print("KPIs:")
    print(f"  Explained:    {kpis.explained_count}/{kpis.total_variances} ({kpis.explained_percent:.0f}%)")
    print(f"  Overdue:      {kpis.overdue_count}")
    print(
        f"  Run rate:     {format_currency(kpis.run_rate_projection)} "
        f"({kpis.months_elapsed} month(s) elapsed, projected variance "
        f"{format_currency(kpis.projected_variance)})"
    )
    for breakdown in kpis.by_root_cause:
        print(
            f"  {breakdown.root_cause.label:<12} {breakdown.count:>4}  "
            f"{format_currency(breakdown.total_variance)}"
        )

    groups = workspace.groups()
    if groups:
        print()
        print(f"Grouped by {workspace.group_by.value}:")
        for group in groups:
            print(
                f"  {group.key:<30} {group.record_count:>4}  "
                f"{format_currency(group.total_dollar_variance):>14} "
                f"({format_percent(group.total_percent_variance)})"
            )


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    # Lazy imports so we fail fast on args first
    import yaml

    from variance_config import get_active_settings
    from variance_kernel.exceptions import VarianceAnalysisError
    from variance_kernel.logging_config import configure_logging
    from variance_services import AnalysisWorkspace

    configure_logging(level=getattr(logging, args.log_level.upper(), logging.WARNING))

    try:
        settings = get_active_settings(args.config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"ERROR: Failed to load config: {e}", file=sys.stderr)
        return 1

    workspace = AnalysisWorkspace(settings=settings)
    try:
        if args.threshold_percent is not None or args.threshold_dollar is not None:
            workspace.update_thresholds(args.threshold_percent, args.threshold_dollar)
        if args.group_by is not None:
            workspace.set_group_by(args.group_by)
    except (TypeError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    try:
        if args.sample:
            workspace.load_sample(seed=args.seed)
        elif len(args.files) == 1:
            workspace.load_file(args.files[0])
        else:
            outcome = workspace.load_files(args.files, strategy=args.strategy)
            for failure in outcome.failures:
                print(
                    f"WARNING: skipped {failure.source_name}: {failure.message}",
                    file=sys.stderr,
                )
    except VarianceAnalysisError as e:
        print(f"ERROR: [{e.code}] {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    _print_report(workspace)

    if args.export is not None:
        report = workspace.export_report()
        args.export.mkdir(parents=True, exist_ok=True)
        target = args.export / report.filename
        target.write_text(report.text, encoding="utf-8")
        print(f"\nReport written to {target}")

    if args.save_project:
        from variance_kernel.db import create_tables, init_engine_from_url, session_scope
        from variance_kernel.db.engine import DEFAULT_DATABASE_URL
        from variance_services import ProjectService

        init_engine_from_url(args.db or DEFAULT_DATABASE_URL)
        create_tables()
        with session_scope() as session:
            project = ProjectService(session).create_project(
                args.save_project, workspace.dataset, workspace.project_settings()
            )
        print(f"\nSaved project {project.name!r} ({project.project_id})")

    return 0


if __name__ == "__main__":
    sys.exit(main())
