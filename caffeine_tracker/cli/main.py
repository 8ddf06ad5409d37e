"""
CLI interface for Caffeine Tracker.

Terminal front end: records doses and renders the values computed by the
core. It supplies the current time and does the input validation the core
leaves to its callers.
"""

import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from caffeine_tracker.config.loader import (
    TrackerConfig,
    default_tracker_config,
    load_tracker_config,
)
from caffeine_tracker.config.logging import configure_logging
from caffeine_tracker.core.aggregation import (
    SUPPORTED_WINDOWS,
    closest_beverage,
    rollup,
    today_entries,
)
from caffeine_tracker.core.catalog import (
    BEVERAGE_CATALOG,
    beverages_in_category,
    find_beverage,
    search_beverages,
)
from caffeine_tracker.core.sleep import parse_clock_time
from caffeine_tracker.core.summary import summarize
from caffeine_tracker.storage.db import initialize_schema
from caffeine_tracker.storage.gateway import SqliteGateway
from caffeine_tracker.storage.models import BeverageCategory
from caffeine_tracker.storage.profile import ProfileRepository
from caffeine_tracker.storage.repository import RETENTION_DAYS, FavoritesRegistry, IntakeLedger

app = typer.Typer()
profile_app = typer.Typer(help="Show or change personal settings.")
app.add_typer(profile_app, name="profile")
console = Console()

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

# Bounds applied at this edge before a dose reaches the ledger
MIN_DOSE_MG = 1
MAX_DOSE_MG = 500
MAX_CEILING_MG = 500


@dataclass
class CliState:
    config: TrackerConfig
    db_path: str


def _now() -> datetime:
    return datetime.now()


def _state(ctx: typer.Context) -> CliState:
    state = ctx.find_root().obj
    if state is None:
        config = default_tracker_config()
        state = CliState(config=config, db_path=config.storage.path)
    return state


def _gateway(state: CliState) -> SqliteGateway:
    return SqliteGateway(state.db_path)


def _ledger(state: CliState) -> IntakeLedger:
    return IntakeLedger(_gateway(state), clock=_now)


def _profiles(state: CliState) -> ProfileRepository:
    return ProfileRepository(
        _gateway(state),
        clock=_now,
        default_max_caffeine_mg=state.config.profile.default_max_caffeine_mg
    )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a YAML configuration file"
    ),
    db_path: Optional[str] = typer.Option(
        None,
        "--db",
        help="Override the SQLite database path"
    )
):
    """Caffeine Tracker CLI."""
    try:
        config = load_tracker_config(config_path) if config_path else default_tracker_config()
    except Exception as e:
        console.print(f"[red]Error loading configuration:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    configure_logging(config.logging.level)
    ctx.obj = CliState(config=config, db_path=db_path or config.storage.path)

    if ctx.invoked_subcommand is None:
        console.print("Caffeine Tracker - Use --help to see available commands")


@app.command()
def init(ctx: typer.Context):
    """Initialize the Caffeine Tracker database."""
    state = _state(ctx)
    try:
        initialize_schema(state.db_path)
        console.print("[green]✓[/] Database initialized successfully")
        sys.exit(EXIT_CODE_PASS)
    except Exception as e:
        console.print(f"[red]Error initializing database:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


@app.command()
def add(
    ctx: typer.Context,
    mg: Optional[int] = typer.Option(None, "--mg", "-m", help="Caffeine amount in mg"),
    beverage: Optional[str] = typer.Option(None, "--beverage", "-b", help="Catalog beverage name"),
    at: Optional[str] = typer.Option(None, "--at", help="ISO timestamp of the intake (defaults to now)")
):
    """Record a caffeine intake."""
    if mg is None and beverage is None:
        console.print("[red]Error:[/] pass --mg or --beverage")
        sys.exit(EXIT_CODE_FAIL)

    amount = mg
    if amount is None:
        match = find_beverage(beverage)
        if match is None:
            console.print(f"[red]Error:[/] unknown beverage '{beverage}'")
            sys.exit(EXIT_CODE_FAIL)
        amount = match.amount_mg

    if not MIN_DOSE_MG <= amount <= MAX_DOSE_MG:
        console.print(f"[red]Error:[/] amount must be between {MIN_DOSE_MG} and {MAX_DOSE_MG} mg")
        sys.exit(EXIT_CODE_FAIL)

    try:
        occurred_at = datetime.fromisoformat(at) if at else None
    except ValueError:
        console.print(f"[red]Error:[/] invalid timestamp '{at}'")
        sys.exit(EXIT_CODE_FAIL)

    try:
        ledger = _ledger(_state(ctx))
        dose = ledger.record(amount, at=occurred_at)
    except Exception as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    if dose not in ledger.snapshot():
        console.print(f"[yellow]Warning:[/] {dose.occurred_at:%Y-%m-%d} is past the {RETENTION_DAYS}-day history; not kept")
        return

    console.print(f"[green]✓[/] Recorded {dose.amount_mg}mg at {dose.occurred_at:%Y-%m-%d %H:%M}")


@app.command()
def status(ctx: typer.Context):
    """Show the current caffeine level and derived estimates."""
    state = _state(ctx)
    now = _now()
    try:
        snapshot = _ledger(state).snapshot()
        profile = _profiles(state).profile
    except Exception as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    summary = summarize(snapshot, profile, now)

    console.print("\n[bold]Current Caffeine[/bold]")
    console.print("-" * 40)
    console.print(f"Level: {summary.level_mg:.1f}mg")
    console.print(f"Status: {summary.status.icon} {summary.status.label}")
    console.print(f"Of daily limit ({summary.max_caffeine_mg}mg): {summary.percentage:.0f}%")
    console.print(f"Energy level: {summary.energy:.0f}%")
    console.print(f"Today's intake: {summary.today_total_mg}mg")

    if summary.last_intake is not None:
        console.print(f"Last intake: {_format_hours(summary.last_intake.hours_elapsed)} ago")
    else:
        console.print("Last intake: none recorded")

    if summary.awake_until is not None:
        if summary.awake_until <= now:
            console.print("Awake effect: worn off")
        else:
            console.print(f"Awake effect until: {summary.awake_until:%H:%M}")

    console.print(f"Sleep disruption risk (bedtime {profile.bedtime}): {summary.sleep_disruption}%")


@app.command()
def today(ctx: typer.Context):
    """List today's doses, newest first."""
    doses = today_entries(_ledger(_state(ctx)).snapshot(), _now())

    if not doses:
        console.print("No caffeine recorded today")
        return

    table = Table(title="Today")
    table.add_column("Time")
    table.add_column("Amount", justify="right")
    table.add_column("Like")
    for dose in doses:
        label = closest_beverage(dose.amount_mg)
        table.add_row(
            f"{dose.occurred_at:%H:%M}",
            f"{dose.amount_mg}mg",
            f"{label.icon} {label.name}" if label else "-"
        )
    console.print(table)


@app.command()
def history(
    ctx: typer.Context,
    days: int = typer.Option(7, "--days", "-d", help="Window length: 7 or 30")
):
    """Show per-day totals for the last week or month."""
    if days not in SUPPORTED_WINDOWS:
        console.print(f"[red]Error:[/] --days must be one of {list(SUPPORTED_WINDOWS)}")
        sys.exit(EXIT_CODE_FAIL)

    state = _state(ctx)
    limit = _profiles(state).profile.max_caffeine_mg
    totals = rollup(_ledger(state).snapshot(), _now(), days)

    table = Table(title=f"Last {days} days")
    table.add_column("Date")
    table.add_column("Total", justify="right")
    for entry in totals:
        total = f"{entry.total_mg}mg"
        if limit and entry.total_mg > limit:
            total = f"[red]{total}[/]"
        table.add_row(entry.day.isoformat(), total)
    console.print(table)


@app.command()
def catalog(
    ctx: typer.Context,
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Filter by name or category"),
    category: Optional[BeverageCategory] = typer.Option(None, "--category", help="coffee or other")
):
    """List catalog beverages."""
    favorites = FavoritesRegistry(_gateway(_state(ctx)))

    beverages = list(BEVERAGE_CATALOG)
    if category is not None:
        beverages = beverages_in_category(category, beverages)
    if search:
        beverages = search_beverages(search, beverages)

    if not beverages:
        console.print("No beverages found")
        return

    table = Table(title="Beverages")
    table.add_column("")
    table.add_column("Name")
    table.add_column("Caffeine", justify="right")
    table.add_column("Category")
    for beverage in beverages:
        table.add_row(
            "⭐" if favorites.is_favorite(beverage) else "",
            f"{beverage.icon} {beverage.name}",
            f"{beverage.amount_mg}mg",
            beverage.category.value
        )
    console.print(table)


@app.command()
def favorite(ctx: typer.Context, name: str = typer.Argument(..., help="Catalog beverage name")):
    """Toggle a beverage in the favorites list."""
    beverage = find_beverage(name)
    if beverage is None:
        console.print(f"[red]Error:[/] unknown beverage '{name}'")
        sys.exit(EXIT_CODE_FAIL)

    added = FavoritesRegistry(_gateway(_state(ctx))).toggle_favorite(beverage)
    verb = "Added" if added else "Removed"
    console.print(f"[green]✓[/] {verb} {beverage.name} {'to' if added else 'from'} favorites")


@app.command()
def favorites(ctx: typer.Context):
    """List favorite beverages."""
    entries = FavoritesRegistry(_gateway(_state(ctx))).favorites()
    if not entries:
        console.print("No favorites yet")
        return
    for beverage in entries:
        console.print(f"{beverage.icon} {beverage.name} ({beverage.amount_mg}mg)")


@profile_app.command("show")
def profile_show(ctx: typer.Context):
    """Show the stored profile."""
    profile = _profiles(_state(ctx)).profile

    table = Table(title="Profile")
    table.add_column("Setting")
    table.add_column("Value")
    table.add_row("Sleep window", f"{profile.bedtime} - {profile.wake_time}")
    table.add_row("Target sleep", _format_hours(profile.target_sleep_hours))
    table.add_row("Daily limit", f"{profile.max_caffeine_mg}mg")
    table.add_row("Tolerance", str(profile.tolerance))
    table.add_row(
        "Heart rate sensitivity",
        profile.heart_rate_sensitivity.value if profile.heart_rate_sensitivity else "-"
    )
    table.add_row(
        "Important times",
        ", ".join(sorted(slot.value for slot in profile.important_time_slots)) or "-"
    )
    table.add_row("Onboarding", "complete" if profile.onboarding_complete else f"step {profile.onboarding_step}")
    console.print(table)


@profile_app.command("set")
def profile_set(
    ctx: typer.Context,
    bedtime: Optional[str] = typer.Option(None, "--bedtime", help="HH:MM"),
    wake_time: Optional[str] = typer.Option(None, "--wake-time", help="HH:MM"),
    target_sleep: Optional[float] = typer.Option(None, "--target-sleep", help="Hours of sleep to aim for"),
    max_caffeine: Optional[int] = typer.Option(None, "--max-caffeine", help="Daily limit in mg (0-500)")
):
    """Change personal settings."""
    changes = {}
    for label, value in (("bedtime", bedtime), ("wake_time", wake_time)):
        if value is None:
            continue
        if parse_clock_time(value) is None:
            console.print(f"[red]Error:[/] {label} must be HH:MM")
            sys.exit(EXIT_CODE_FAIL)
        changes[label] = value

    if target_sleep is not None:
        changes["target_sleep_hours"] = target_sleep

    if max_caffeine is not None:
        if not 0 <= max_caffeine <= MAX_CEILING_MG:
            console.print(f"[red]Error:[/] --max-caffeine must be between 0 and {MAX_CEILING_MG}")
            sys.exit(EXIT_CODE_FAIL)
        changes["max_caffeine_mg"] = max_caffeine

    if not changes:
        console.print("Nothing to change")
        return

    try:
        _profiles(_state(ctx)).update(**changes)
    except ValueError as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)
    console.print("[green]✓[/] Profile updated")


@profile_app.command("reset-onboarding")
def profile_reset_onboarding(ctx: typer.Context):
    """Restart the sensitivity questionnaire."""
    _profiles(_state(ctx)).restart_onboarding()
    console.print("[green]✓[/] Onboarding will restart")


def _format_hours(hours: float) -> str:
    """Format a duration in hours as 'Xh Ym'."""
    total_minutes = int(round(hours * 60))
    h, m = divmod(max(0, total_minutes), 60)
    return f"{h}h {m}m"


if __name__ == "__main__":
    app()
