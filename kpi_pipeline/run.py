"""Main pipeline runner: validates inputs and builds the marketing KPI table."""

import argparse
import logging
import os
import sys
from dataclasses import replace
from pathlib import Path

import pandas as pd
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from kpi_pipeline.config import PipelineConfig, load_pipeline_config
from kpi_pipeline.domains import marketing
from kpi_pipeline.utils.types import PipelineStatus, parse_tie_break

console = Console()

SUMMARY_ROWS = 20


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )


def build_config(args: argparse.Namespace) -> PipelineConfig:
    config = load_pipeline_config(args.env)

    if args.data_dir:
        config = replace(config, source=replace(config.source, data_dir=Path(args.data_dir)))
    if args.output_dir:
        config = replace(config, output=replace(config.output, output_dir=Path(args.output_dir)))
    if args.format:
        config = replace(config, output=replace(config.output, fmt=args.format))
    if args.tie_break:
        config = replace(config, tie_break=parse_tie_break(args.tie_break))

    return config


def _fmt(value) -> str:
    if pd.isna(value):
        return "-"
    if isinstance(value, float):
        return f"{value:,.2f}"
    return str(value)


def render_kpi_table(kpis: pd.DataFrame, limit: int = SUMMARY_ROWS) -> Table:
    table = Table(title=f"Marketing KPIs ({len(kpis)} rows)")
    for col in kpis.columns:
        justify = "left" if col in ("month", "region", "country", "channel") else "right"
        table.add_column(col, justify=justify)

    for row in kpis.head(limit).itertuples(index=False):
        table.add_row(*(_fmt(v) for v in row))

    return table


def validate_inputs(config: PipelineConfig) -> bool:
    table = Table(title="Input Validation")
    table.add_column("Source")
    table.add_column("Valid")
    table.add_column("Details")

    match marketing.validate(config):
        case {"status": PipelineStatus.OK, "row_counts": counts}:
            for name, count in counts.items():
                table.add_row(name, "[green]✓[/green]", f"{count} rows")
            valid = True
        case {"status": PipelineStatus.ERROR, "message": msg}:
            table.add_row(str(config.source.data_dir), "[red]✗[/red]", msg)
            valid = False
        case other:
            table.add_row(str(config.source.data_dir), "[red]✗[/red]", f"Unknown validation result: {other}")
            valid = False

    console.print(table)
    return valid


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Build the marketing KPI table")
    parser.add_argument("--env", default=os.environ.get("PIPELINE_ENV", "development"),
                        help="Configuration environment (production, staging, development)")
    parser.add_argument("--data-dir", type=str, help="Directory holding the input relations")
    parser.add_argument("--output-dir", type=str, help="Directory to write the KPI table to")
    parser.add_argument("--format", choices=["csv", "parquet", "excel", "json"], help="Output format")
    parser.add_argument("--tie-break", choices=["fan_out", "lowest_campaign_id"],
                        help="Attribution policy for first orders tied across campaigns")
    parser.add_argument("--validate", action="store_true", help="Only validate inputs, don't run")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    try:
        config = build_config(args)
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        sys.exit(1)

    if args.validate:
        if not validate_inputs(config):
            sys.exit(1)
        return

    console.print(f"[bold]Running marketing KPI pipeline ({config.env})...[/bold]")
    stages = marketing.run(config)
    console.print(render_kpi_table(stages["kpis"]))


if __name__ == "__main__":
    main()
