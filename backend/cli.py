#!/usr/bin/env python3
"""
CLI for the Construction Project Pipeline

Commands:
    run     - Normalize, filter and deduplicate one batch, then export
    rules   - List the eligibility rules applied at each stage

Usage:
    construction-pipeline run --whobuilds wb_06.xlsx --narajang nj_06.xlsx --master master.xlsx
    construction-pipeline rules

Examples:
    # Two Whobuilds exports, no master yet
    construction-pipeline run -w wb_a.xlsx -w wb_b.xlsx --output-dir out/

    # Show what would happen without writing files
    construction-pipeline run -n nj_06.xlsx -m master.xlsx --dry-run

    # Override filters for this run only
    construction-pipeline run -n nj_06.xlsx --min-amount 50000000 --excluded-keywords "철거, 도색"
"""

import json
import logging
import sys

import click

from config import Config
from services.eligibility_filter import STAGE_RULES, EligibilityFilter
from services.excel_loader import TabularReadError, export_results
from services.pipeline import run_pipeline
from services.pipeline_config import ConfigError, PipelineConfig

LEVEL_COLORS = {
    'info': None,
    'success': 'green',
    'warning': 'yellow',
    'error': 'red',
}


def _configure_logging(verbose: bool):
    level = logging.DEBUG if verbose else getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(level=level, format=Config.LOG_FORMAT)


@click.group()
@click.version_option(version="1.0.0", prog_name="construction-pipeline")
def cli():
    """Construction Project Pipeline CLI - Merge Whobuilds and Narajang exports into the master."""
    pass


@cli.command("run")
@click.option("--whobuilds", "-w", "whobuilds_files", multiple=True,
              type=click.Path(exists=True, dir_okay=False), help="Whobuilds export (repeatable)")
@click.option("--narajang", "-n", "narajang_file",
              type=click.Path(exists=True, dir_okay=False), help="Narajang export")
@click.option("--master", "-m", "master_file",
              type=click.Path(exists=True, dir_okay=False), help="Existing master file")
@click.option("--output-dir", "-o", default=None, help="Export directory (default: PIPELINE_OUTPUT_DIR)")
@click.option("--chunk-size", type=int, default=None, help="Rows per upload chunk")
@click.option("--offset-days", type=int, default=None, help="Completion cutoff = today + N days")
@click.option("--min-amount", type=float, default=None, help="Minimum Narajang contract amount")
@click.option("--excluded-types", default=None, help="Comma-separated construction types to drop")
@click.option("--excluded-keywords", default=None, help="Comma-separated name keywords to drop")
@click.option("--today", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="Run date (default: today)")
@click.option("--dry-run", is_flag=True, help="Run the pipeline without writing files")
@click.option("--json", "output_json", is_flag=True, help="Output the run record as JSON")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
def run(whobuilds_files, narajang_file, master_file, output_dir, chunk_size, offset_days,
        min_amount, excluded_types, excluded_keywords, today, dry_run, output_json, verbose):
    """
    Normalize, filter and deduplicate one batch, then export.

    At least one of --whobuilds / --narajang is required.
    """
    _configure_logging(verbose)

    if not whobuilds_files and not narajang_file:
        raise click.UsageError("At least one Whobuilds or Narajang file is required.")

    try:
        config = PipelineConfig.from_env(
            chunk_size=chunk_size,
            completion_offset_days=offset_days,
            min_contract_amount=min_amount,
            excluded_types=excluded_types,
            excluded_keywords=excluded_keywords,
            today=today.date() if today else None,
        )
    except ConfigError as e:
        click.secho(f"Error: {e}", fg="red")
        sys.exit(1)

    try:
        result = run_pipeline(list(whobuilds_files), narajang_file, master_file, config)
    except TabularReadError as e:
        click.secho(f"Error: {e}", fg="red")
        sys.exit(1)

    ctx = result.context

    if output_json:
        click.echo(json.dumps(ctx.to_record(), indent=2, ensure_ascii=False, default=str))
    else:
        for entry in ctx.logs:
            click.secho(f"[{entry.timestamp}] {entry.message}", fg=LEVEL_COLORS.get(entry.level))

        click.echo()
        click.echo("=" * 60)
        click.secho("RUN SUMMARY", fg="cyan", bold=True)
        click.echo("=" * 60)
        click.echo(ctx.summary())
        click.echo()

    if dry_run:
        if not output_json:
            click.secho("DRY RUN - No files written", fg="yellow")
        return

    try:
        paths = export_results(result, output_dir or Config.OUTPUT_DIR)
    except OSError as e:
        click.secho(f"Error: Could not write exports: {e}", fg="red")
        sys.exit(1)
    if not output_json:
        click.secho(f"Exported {len(paths)} file(s):", fg="green", bold=True)
        for path in paths:
            click.echo(f"  - {path}")


@cli.command("rules")
def rules():
    """List the eligibility rules applied at each stage, in order."""
    for stage in STAGE_RULES:
        click.secho(f"{stage}:", fg="cyan", bold=True)
        for info in EligibilityFilter.get_rule_info(stage):
            click.echo(f"  - {info['name']}: {info['description']}")


if __name__ == "__main__":
    cli()
