#!/usr/bin/env python3
"""
run-insights CLI.

Inspect insights, goal progress and data quality for a set of runs.

Usage:
    run-insights insights runs.json              # Ranked training insights
    run-insights progress goal.json runs.json    # Progress toward a goal
    run-insights validate goal.json              # Check a goal definition
    run-insights filter-stats runs.json          # Quality filter diagnostics
    run-insights templates --type run-count      # Browse goal templates
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, List

import pydantic
from pydantic import TypeAdapter
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .analysis.quality import filter_stats, get_rejection_details
from .config import get_settings
from .exceptions import RunInsightsError
from .models.activity import ActivityRecord
from .models.goals import GoalType, parse_goal
from .models.insights import InsightCategory, InsightConfig, InsightFilter
from .services.goal_progress import GoalProgressCalculator, format_goal_progress
from .services.insight_engine import InsightEngine
from .templates import ALL_TEMPLATES, get_templates_by_type
from .utils.formatting import format_distance, format_pace, format_time

console = Console()
logger = logging.getLogger(__name__)

_records_adapter = TypeAdapter(List[ActivityRecord])


def get_priority_color(priority: str) -> str:
    """Get rich color for an insight priority."""
    colors = {
        "high": "red",
        "medium": "yellow",
        "low": "green",
    }
    return colors.get(priority, "white")


def _read_json(path: str) -> Any:
    with Path(path).open(encoding="utf-8") as f:
        return json.load(f)


def load_records(path: str) -> List[ActivityRecord]:
    """Load a JSON list of activity records."""
    return _records_adapter.validate_python(_read_json(path))


def load_goal(path: str):
    """Load a single goal definition."""
    return parse_goal(_read_json(path))


def _parse_now(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid ISO timestamp: {value}")


def _format_goal_value(goal_type: str, value: float) -> str:
    if goal_type == GoalType.DISTANCE_TOTAL:
        return format_distance(value)
    if goal_type == GoalType.PACE_FOR_RACE_DISTANCE:
        return format_time(value) if value > 0 else "-"
    return f"{value:.0f} runs"


def cmd_insights(args):
    """Show ranked insights."""
    console.print()
    console.print(Panel("[bold]Run Insights[/bold]"))
    console.print()

    records = load_records(args.records)

    overrides = {}
    if args.max is not None:
        overrides["max_insights"] = args.max
    config = InsightConfig.from_settings(get_settings(), **overrides)
    engine = InsightEngine(config)

    criteria = None
    if args.category:
        criteria = InsightFilter(categories=[InsightCategory(c) for c in args.category])

    insights = engine.get_prioritized_insights(records, criteria, args.now)

    if not insights:
        console.print("[yellow]Not enough data for insights yet.[/yellow]")
        console.print(
            f"At least {config.min_sample_size} valid runs are needed; "
            "try 'run-insights filter-stats' to see what was filtered."
        )
        console.print()
        return

    for rank, insight in enumerate(insights, 1):
        score = engine.calculate_prioritization_score(insight)
        color = get_priority_color(insight.priority.value)

        body = (
            f"{insight.finding}\n\n"
            f"[dim]{insight.interpretation}[/dim]\n\n"
            f"[bold]Try:[/bold] {insight.recommendation}\n\n"
            f"[dim]{insight.category.value} | confidence {insight.confidence:.0%} | "
            f"n={insight.sample_size} | score {score.total_score:.2f}[/dim]"
        )
        console.print(Panel(
            body,
            title=f"{rank}. [{color}]{insight.title}[/{color}]",
            box=box.ROUNDED,
        ))

    console.print()


def cmd_progress(args):
    """Show progress toward a goal."""
    console.print()
    console.print(Panel("[bold]Goal Progress[/bold]"))
    console.print()

    goal = load_goal(args.goal)
    records = load_records(args.records)

    progress = GoalProgressCalculator().calculate_progress(goal, records, args.now)

    table = Table(title=goal.display_title, box=box.ROUNDED)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    status = "[green]On track[/green]" if progress.is_on_track else "[yellow]Behind[/yellow]"
    table.add_row("Current", _format_goal_value(goal.type, progress.current_value))
    table.add_row("Target", _format_goal_value(goal.type, goal.target_value))
    table.add_row("Progress", format_goal_progress(progress))
    table.add_row("Expected", f"{progress.expected_progress:.1f}%")
    table.add_row("Status", status)
    table.add_row("Days remaining", str(progress.days_remaining))
    table.add_row("Projected completion", progress.projected_completion.strftime("%Y-%m-%d"))
    console.print(table)
    console.print()

    milestones = Table(title="Milestones", box=box.SIMPLE)
    milestones.add_column("Milestone")
    milestones.add_column("Due", justify="right")
    milestones.add_column("Done", justify="center")
    for milestone in progress.milestones:
        milestones.add_row(
            milestone.title,
            milestone.target_date.strftime("%Y-%m-%d"),
            "[green]yes[/green]" if milestone.is_completed else "-",
        )
    console.print(milestones)
    console.print()

    for line in progress.insights:
        console.print(f"  {line}")
    if progress.recommendations:
        console.print()
        console.print("[bold]Recommendations[/bold]")
        for line in progress.recommendations:
            console.print(f"  - {line}")
    console.print()


def cmd_validate(args):
    """Validate a goal definition."""
    goal = load_goal(args.goal)
    result = GoalProgressCalculator().validate_goal(goal, args.now)

    console.print()
    if result.is_valid:
        console.print(f"[green]Goal '{goal.display_title}' is valid.[/green]")
    else:
        console.print(f"[red]Goal '{goal.display_title}' has problems:[/red]")
        for error in result.errors:
            console.print(f"  - {error}")
    console.print()

    if not result.is_valid:
        sys.exit(1)


def cmd_filter_stats(args):
    """Show quality filter diagnostics."""
    console.print()
    console.print(Panel("[bold]Data Quality[/bold]"))
    console.print()

    records = load_records(args.records)
    stats = filter_stats(records)

    table = Table(title="Quality Filter", box=box.ROUNDED)
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("Total records", str(stats.total))
    table.add_row("Valid", f"[green]{stats.valid}[/green]")
    table.add_row("Filtered", f"[yellow]{stats.filtered}[/yellow]")
    table.add_section()
    for reason, count in stats.filter_reasons.model_dump().items():
        table.add_row(reason.replace("_", " ").capitalize(), str(count))
    console.print(table)
    console.print()

    if args.details:
        rejected = get_rejection_details(records)
        if not rejected:
            console.print("[green]No records rejected.[/green]")
        for item in rejected:
            record = item.record
            label = record.id or record.start_date_local.isoformat()
            pace = format_pace(item.pace) if item.pace else "-"
            console.print(
                f"[bold]{label}[/bold] {format_distance(record.distance)} @ {pace}/km"
            )
            for reason in item.reasons:
                console.print(f"  - {reason}")
        console.print()


def cmd_templates(args):
    """List goal templates."""
    templates = get_templates_by_type(GoalType(args.type)) if args.type else ALL_TEMPLATES

    table = Table(title="Goal Templates", box=box.ROUNDED)
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("Target", justify="right")
    table.add_column("Difficulty")
    table.add_column("Time")

    for template in templates:
        table.add_row(
            template.id,
            template.title,
            _format_goal_value(template.type, template.target_value),
            template.difficulty.value,
            template.estimated_time_commitment,
        )

    console.print()
    console.print(table)
    console.print()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="run-insights",
        description="run-insights - running analytics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  run-insights insights runs.json --max 5
  run-insights insights runs.json --category health performance
  run-insights progress goal.json runs.json --now 2024-06-01T12:00:00
  run-insights validate goal.json
  run-insights filter-stats runs.json --details
  run-insights templates --type pace-for-race-distance
        """,
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Insights command
    insights_p = subparsers.add_parser("insights", help="Show ranked training insights")
    insights_p.add_argument("records", help="JSON file with a list of activity records")
    insights_p.add_argument("--now", type=_parse_now, help="Evaluation time (ISO 8601)")
    insights_p.add_argument("--max", type=int, help="Maximum number of insights")
    insights_p.add_argument(
        "--category",
        nargs="+",
        choices=[c.value for c in InsightCategory],
        help="Only show these categories",
    )

    # Progress command
    progress_p = subparsers.add_parser("progress", help="Show progress toward a goal")
    progress_p.add_argument("goal", help="JSON file with a goal definition")
    progress_p.add_argument("records", help="JSON file with a list of activity records")
    progress_p.add_argument("--now", type=_parse_now, help="Evaluation time (ISO 8601)")

    # Validate command
    validate_p = subparsers.add_parser("validate", help="Validate a goal definition")
    validate_p.add_argument("goal", help="JSON file with a goal definition")
    validate_p.add_argument("--now", type=_parse_now, help="Reference time (ISO 8601)")

    # Filter stats command
    stats_p = subparsers.add_parser("filter-stats", help="Show data quality diagnostics")
    stats_p.add_argument("records", help="JSON file with a list of activity records")
    stats_p.add_argument(
        "--details", action="store_true", help="List every rejected record"
    )

    # Templates command
    templates_p = subparsers.add_parser("templates", help="List goal templates")
    templates_p.add_argument(
        "--type",
        choices=[t.value for t in GoalType],
        help="Only show templates of this goal type",
    )

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else get_settings().log_level
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    commands = {
        "insights": cmd_insights,
        "progress": cmd_progress,
        "validate": cmd_validate,
        "filter-stats": cmd_filter_stats,
        "templates": cmd_templates,
    }

    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        return

    try:
        command(args)
    except RunInsightsError as e:
        logger.debug("Command failed: %r", e)
        console.print(Panel(f"[red]{escape(e.message)}[/red]", title="Error", box=box.ROUNDED))
        sys.exit(1)
    except (OSError, json.JSONDecodeError, pydantic.ValidationError) as e:
        console.print(Panel(f"[red]Invalid input: {escape(str(e))}[/red]", title="Error", box=box.ROUNDED))
        sys.exit(1)


if __name__ == "__main__":
    main()
