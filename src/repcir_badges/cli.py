#!/usr/bin/env python3
"""
Repcir badges CLI.

Seed the badge catalog, evaluate a user, and inspect progress and streaks.

Usage:
    repcir-badges seed
    repcir-badges catalog
    repcir-badges evaluate --user u1 --member m1 --trigger workout
    repcir-badges badges --user u1
    repcir-badges progress --user u1 --member m1
    repcir-badges streak --member m1 --timezone Europe/Madrid
"""

import argparse
from dataclasses import dataclass
from typing import Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .catalog import BadgeCatalog
from .config import get_settings
from .db.repositories import (
    SQLiteBadgeDefinitionRepository,
    SQLiteUserBadgeRepository,
    create_sqlite_repositories,
)
from .logging_config import setup_logging
from .models.badges import BadgeTier, EvaluationContext, EvaluationTrigger
from .services.award_service import AwardService
from .services.criteria_evaluator import CriteriaEvaluator
from .services.progress import ProgressCalculator
from .services.streaks import WorkoutStreakService

console = Console()


def get_tier_color(tier: BadgeTier) -> str:
    """Get rich color for a badge tier."""
    colors = {
        BadgeTier.BRONZE: "dark_orange3",
        BadgeTier.SILVER: "grey70",
        BadgeTier.GOLD: "gold1",
        BadgeTier.PLATINUM: "cyan",
    }
    return colors.get(tier, "white")


def format_progress_bar(percent: float, width: int = 20) -> str:
    """Render a percentage as a text bar."""
    filled = int(round(percent / 100 * width))
    return "█" * filled + "░" * (width - filled)


@dataclass
class Services:
    definitions: SQLiteBadgeDefinitionRepository
    award: AwardService
    progress: ProgressCalculator
    streaks: WorkoutStreakService


def build_services(db_path: Optional[str] = None) -> Services:
    """Wire the engine against one SQLite database."""
    settings = get_settings()
    db_path = db_path or settings.badges_db_path
    definitions = SQLiteBadgeDefinitionRepository(db_path)
    user_badges = SQLiteUserBadgeRepository(db_path)
    repos = create_sqlite_repositories(db_path)
    catalog = BadgeCatalog(definitions)
    evaluator = CriteriaEvaluator(repos, timezone=settings.default_timezone)
    return Services(
        definitions=definitions,
        award=AwardService(catalog, user_badges, evaluator, repos.goals, settings),
        progress=ProgressCalculator(catalog, user_badges, evaluator),
        streaks=WorkoutStreakService(repos.workouts, timezone=settings.default_timezone),
    )


def cmd_seed(args, services: Services):
    """Insert the default badge catalog."""
    inserted = services.definitions.seed()
    console.print(f"[green]Seeded {inserted} new badge definitions[/green]")


def cmd_catalog(args, services: Services):
    """List the badge catalog."""
    table = Table(title="Badge Catalog", box=box.ROUNDED)
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Tier")
    table.add_column("Rule", style="dim")

    for badge in services.definitions.list_definitions():
        color = get_tier_color(badge.tier)
        table.add_row(
            badge.id,
            f"{badge.icon or ''} {badge.name}",
            badge.category.value,
            f"[{color}]{badge.tier.value}[/{color}]",
            badge.description or badge.criteria.type,
        )
    console.print(table)


def cmd_evaluate(args, services: Services):
    """Evaluate and award badges for a user."""
    context = EvaluationContext(
        user_id=args.user,
        member_id=args.member,
        trigger=EvaluationTrigger(args.trigger),
        exercise_name=args.exercise,
        exercise_value=args.value,
        exercise_unit=args.unit,
    )
    result = services.award.evaluate_and_award(context)

    if not result.awarded:
        console.print("No new badges earned.")
    for awarded in result.awarded:
        color = get_tier_color(awarded.badge_tier)
        console.print(
            f"[bold]{awarded.badge_icon or ''} {awarded.badge_name}[/bold] "
            f"[{color}]{awarded.badge_tier.value}[/{color}]"
        )

    for match in result.goal_matches:
        console.print(
            f"[green]Goal {match.status.value}:[/green] {match.goal_title} "
            f"({match.current_pr_value:g} / {match.target_value:g} {match.target_unit})"
        )


def cmd_badges(args, services: Services):
    """Show a user's earned badges."""
    earned = services.award.get_user_badges(args.user)
    if not earned:
        console.print("No badges earned yet.")
        return

    table = Table(title=f"Badges for {args.user}", box=box.ROUNDED)
    table.add_column("#", justify="right")
    table.add_column("Badge")
    table.add_column("Tier")
    table.add_column("Earned")
    table.add_column("Featured", justify="center")

    for item in earned:
        color = get_tier_color(item.badge.tier)
        table.add_row(
            str(item.display_order),
            f"{item.badge.icon or ''} {item.badge.name}",
            f"[{color}]{item.badge.tier.value}[/{color}]",
            item.earned_at.strftime("%Y-%m-%d"),
            "★" if item.is_featured else "",
        )
    console.print(table)


def cmd_progress(args, services: Services):
    """Show progress toward badges."""
    if args.in_progress:
        progress = services.progress.get_in_progress_badges(args.user, args.member, max_items=args.limit)
    else:
        progress = services.progress.get_user_badge_progress(args.user, args.member)

    table = Table(title="Badge Progress", box=box.ROUNDED)
    table.add_column("Badge")
    table.add_column("Progress")
    table.add_column("%", justify="right")
    table.add_column("Current / Target", justify="right")

    for item in progress:
        style = "green" if item.is_earned else ("yellow" if item.progress_percent > 0 else "dim")
        table.add_row(
            f"{item.icon or ''} {item.badge_name}",
            f"[{style}]{format_progress_bar(item.progress_percent)}[/{style}]",
            f"{item.progress_percent:.1f}",
            f"{item.current_value:g} / {item.target_value:g}",
        )
    console.print(table)


def cmd_streak(args, services: Services):
    """Show current and longest workout streak."""
    info = services.streaks.get_streak_info(args.member, timezone=args.timezone)
    text = f"""
[cyan]Current streak:[/cyan]  {info.current} days
[cyan]Longest streak:[/cyan]  {info.longest} days
[cyan]Last workout:[/cyan]    {info.last_activity_date or '-'}
"""
    console.print(Panel(text, title="Workout Streak", box=box.ROUNDED))


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Repcir badges - achievement evaluation and awarding",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--db", help="Path to the badges SQLite database")
    parser.add_argument("--log-level", default=None, help="Log level (default from settings)")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("seed", help="Seed the default badge catalog")
    subparsers.add_parser("catalog", help="List badge definitions")

    evaluate_p = subparsers.add_parser("evaluate", help="Evaluate and award badges for a user")
    evaluate_p.add_argument("--user", "-u", required=True, help="User ID")
    evaluate_p.add_argument("--member", "-m", help="Circle member ID")
    evaluate_p.add_argument(
        "--trigger",
        choices=[t.value for t in EvaluationTrigger],
        default=EvaluationTrigger.WORKOUT.value,
        help="What triggered the evaluation",
    )
    evaluate_p.add_argument("--exercise", help="Exercise name of a new PR")
    evaluate_p.add_argument("--value", type=float, help="Value of a new PR")
    evaluate_p.add_argument("--unit", help="Unit of a new PR (default lbs)")

    badges_p = subparsers.add_parser("badges", help="Show earned badges")
    badges_p.add_argument("--user", "-u", required=True, help="User ID")

    progress_p = subparsers.add_parser("progress", help="Show badge progress")
    progress_p.add_argument("--user", "-u", required=True, help="User ID")
    progress_p.add_argument("--member", "-m", help="Circle member ID")
    progress_p.add_argument("--in-progress", action="store_true", help="Only partly completed badges")
    progress_p.add_argument("--limit", type=int, default=2, help="Max items with --in-progress")

    streak_p = subparsers.add_parser("streak", help="Show workout streak")
    streak_p.add_argument("--member", "-m", required=True, help="Circle member ID")
    streak_p.add_argument("--timezone", "-z", help="IANA timezone (default from settings)")

    args = parser.parse_args()
    setup_logging(args.log_level)

    commands = {
        "seed": cmd_seed,
        "catalog": cmd_catalog,
        "evaluate": cmd_evaluate,
        "badges": cmd_badges,
        "progress": cmd_progress,
        "streak": cmd_streak,
    }
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        return

    command(args, build_services(args.db))


if __name__ == "__main__":
    main()
