"""
Command-line entry point for treecarbon.

Reads a tree or woodland plot table, runs the pipeline, and prints the
ranked results and any rejected rows.
"""
import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from rich.console import Console
from rich.table import Table

from .config_loader import load_settings
from .data_import import read_table, stem_rows_from_frame, tree_rows_from_frame
from .exceptions import TreeCarbonError
from .logging_config import setup_logging
from .ranking import RankingProjector
from .records import PipelineResult
from .tree_pipeline import build_tree_records
from .woodland_pipeline import build_plot_aggregates

console = Console()


def render_table(title: str, rows: List[Dict[str, Any]], labels: Sequence[str]) -> Table:
    """Build a rich table from projected rows."""
    table = Table(title=title)
    for label in labels:
        table.add_column(label, justify="left" if label in ("Team", "Species") else "right")
    for row in rows:
        table.add_row(*["" if row.get(label) is None else str(row.get(label)) for label in labels])
    return table


def print_errors(result: PipelineResult) -> None:
    if not result.errors:
        return
    console.print(f"\n[bold red]{len(result.errors)} row(s) rejected:[/bold red]")
    for err in result.errors:
        console.print(f"  [red]✗[/red] row {err.index} ({err.team}): {err.message}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="treecarbon",
        description="Aboveground carbon and sequestration for trees and woodland plots",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  treecarbon trees trees_2024.csv
  treecarbon plots plots_2024.csv --exclude-team "Team 7" --limit 10
  treecarbon plots plots_2024.csv --config my_settings.yaml --listing
        """
    )
    parser.add_argument(
        "category",
        choices=["trees", "plots"],
        help="Single-tree table or woodland plot table",
    )
    parser.add_argument("input", type=Path, help="Input CSV file")
    parser.add_argument("--config", type=Path, help="Settings file (YAML, TOML or JSON)")
    parser.add_argument(
        "--exclude-team",
        action="append",
        default=[],
        metavar="TEAM",
        help="Leave a team out of the ranking (repeatable)",
    )
    parser.add_argument("--limit", type=int, help="Maximum rows in the ranking")
    parser.add_argument(
        "--listing",
        action="store_true",
        help="Also print the unranked first-measurement listing",
    )
    parser.add_argument(
        "--require-complete-remeasurement",
        action="store_true",
        help="Withhold plot sequestration when stem counts differ between measurements",
    )
    parser.add_argument("--strict", action="store_true", help="Stop at the first bad row")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line interface."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        settings = load_settings(args.config)
        overrides: Dict[str, Any] = {}
        if args.exclude_team:
            overrides['excluded_teams'] = settings.excluded_teams | set(args.exclude_team)
        if args.limit is not None:
            overrides['display_row_cap'] = args.limit
        if overrides:
            settings = settings.with_overrides(**overrides)

        df = read_table(args.input)
        if args.category == "trees":
            result = build_tree_records(tree_rows_from_frame(df), settings, strict=args.strict)
            projector = RankingProjector.for_trees(settings)
            title = "Carbon sequestered by tree"
        else:
            result = build_plot_aggregates(
                stem_rows_from_frame(df),
                settings,
                strict=args.strict,
                require_complete_remeasurement=args.require_complete_remeasurement,
            )
            projector = RankingProjector.for_plots(settings)
            title = "Carbon sequestered per acre by plot"
    except (TreeCarbonError, OSError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1

    if args.listing:
        labels = [c.label for c in projector.listing_columns or projector.columns]
        console.print(render_table("First measurement", projector.listing(result.records), labels))

    console.print(render_table(title, projector.project(result.records), projector.labels))

    if result.warnings:
        console.print(f"\n[yellow]{len(result.warnings)} without a complete second measurement[/yellow]")
    print_errors(result)
    return 0 if result.ok else 2


if __name__ == "__main__":
    sys.exit(main())
