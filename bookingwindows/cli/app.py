"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import List, Optional, Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..config import AppConfig, get_default_config_path
from ..domain.engine import SchedulingEngine
from ..domain.exceptions import SchedulingError
from ..domain.models import (
    InvalidRange,
    RecurrencePattern,
    RecurrenceSpec,
    ServiceKind,
    TimeRange,
)
from ..domain.parsing import parse_date, parse_datetime, parse_time_of_day
from ..adapters.http_feed import HttpCalendarFeed
from ..adapters.json_feed import JsonCalendarFeed
from ..services.availability_service import AvailabilityService

app = typer.Typer(
    name="bookingwindows",
    help="Check booking availability, conflicts and recurring schedules",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
FeedOption = Annotated[Optional[Path], typer.Option("--feed", "-f", help="JSON feed file; overrides the configured feed")]
JsonOption = Annotated[bool, typer.Option("--json", help="Print the raw JSON result")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")]
ExtendedTravelOption = Annotated[bool, typer.Option("--extended-travel", help="Use the extended travel buffer")]


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    if config_file is None and not config_path.exists():
        # Defaults are usable without a config file
        return AppConfig()
    return AppConfig.load_from_yaml(config_path)


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


def _build_service(
    config: AppConfig,
    feed_file: Optional[Path],
    extended_travel: bool = False,
) -> AvailabilityService:
    """Wire the configured feed adapter and engine into a service."""
    engine = SchedulingEngine(config.to_policy(extended_travel=extended_travel))

    if feed_file is not None or config.feed.path is not None:
        feed = JsonCalendarFeed(feed_file or config.feed.path, timezone=config.timezone)
    elif config.feed.url:
        feed = HttpCalendarFeed(
            base_url=config.feed.url,
            access_token=config.feed.token,
            timezone=config.timezone,
            timeout=config.feed.timeout_seconds,
        )
    else:
        raise typer.BadParameter("No feed configured. Pass --feed or set feed.path / feed.url in the config.")

    return AvailabilityService(calendar_feed=feed, engine=engine, booking_source=feed)


def _parse_kind(value: Optional[str]) -> Optional[ServiceKind]:
    if value is None:
        return None
    try:
        return ServiceKind(value.lower())
    except ValueError:
        choices = ", ".join(kind.value for kind in ServiceKind)
        raise typer.BadParameter(f"Unknown service kind '{value}'. Choose from: {choices}")


def _windows_table(title: str, windows: List[TimeRange]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("From", style="bold green")
    table.add_column("To", style="green")
    table.add_column("Minutes", justify="right", style="dim")

    for window in windows:
        clocks = window.clock_dict()
        table.add_row(clocks["start"], clocks["end"], str(window.duration_minutes()))

    return table


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {error}")
    raise typer.Exit(1)


@app.command()
def day(
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    kind: Annotated[Optional[str], typer.Option("--kind", "-k", help="Service kind: walk, sitting, meet_and_greet, other")] = None,
    exclude_event: Annotated[Optional[str], typer.Option("--exclude-event", help="Calendar event id to ignore (rescheduling)")] = None,
    config_file: ConfigOption = None,
    feed: FeedOption = None,
    extended_travel: ExtendedTravelOption = False,
    as_json: JsonOption = False,
    verbose: VerboseOption = False,
):
    """
    Show the free windows on a single day.

    Examples:

        bookingwindows day 2025-06-02 --feed feed.json
        bookingwindows day 2025-06-02 --kind walk --json
    """
    _configure_logging(verbose)
    try:
        config = _load_config(config_file)
        service = _build_service(config, feed, extended_travel)
        result = service.single_day(parse_date(date), _parse_kind(kind), exclude_event)
    except (FileNotFoundError, ValueError, SchedulingError) as e:
        _fail(e)

    if as_json:
        console.print_json(data=result.to_dict())
        return

    if result.available:
        console.print()
        console.print(_windows_table(f"Free windows on {result.date.isoformat()}", result.windows))
        console.print(f"[green]✓ {result.message}[/green]\n")
    else:
        console.print(f"[yellow]⚠ {result.message}[/yellow]")


@app.command(name="range")
def date_range(
    start: Annotated[str, typer.Argument(help="First day (YYYY-MM-DD)")],
    end: Annotated[str, typer.Argument(help="Last day, inclusive (YYYY-MM-DD)")],
    kind: Annotated[str, typer.Option("--kind", "-k", help="Service kind of the stay")] = ServiceKind.SITTING.value,
    config_file: ConfigOption = None,
    feed: FeedOption = None,
    as_json: JsonOption = False,
    verbose: VerboseOption = False,
):
    """
    Check a multi-day stay; every day must be free.
    """
    _configure_logging(verbose)
    try:
        config = _load_config(config_file)
        service = _build_service(config, feed)
        result = service.multi_day(parse_date(start), parse_date(end), _parse_kind(kind))
    except (FileNotFoundError, ValueError, SchedulingError) as e:
        _fail(e)

    if as_json:
        console.print_json(data=result.to_dict())
        if isinstance(result, InvalidRange):
            raise typer.Exit(1)
        return

    if isinstance(result, InvalidRange):
        _fail(ValueError(result.message))

    if not result.available:
        console.print(f"[yellow]⚠ {result.message}[/yellow]")
        for record in result.conflicts:
            console.print(f"  {record.date.isoformat()}: {record.reason}")
        return

    console.print(f"\n[bold green]✓ {result.message}[/bold green]\n")
    console.print(_windows_table("Arrival day", result.start_day_windows or []))
    if result.end_date != result.start_date:
        console.print(_windows_table("Departure day", result.end_day_windows or []))
    console.print()


@app.command()
def conflict(
    start: Annotated[str, typer.Argument(help="Start (YYYY-MM-DD HH:mm or ISO 8601)")],
    end: Annotated[str, typer.Argument(help="End (YYYY-MM-DD HH:mm or ISO 8601)")],
    kind: Annotated[Optional[str], typer.Option("--kind", "-k", help="Service kind of the new booking")] = None,
    exclude: Annotated[Optional[str], typer.Option("--exclude", help="Booking id being rescheduled")] = None,
    config_file: ConfigOption = None,
    feed: FeedOption = None,
    as_json: JsonOption = False,
    verbose: VerboseOption = False,
):
    """
    Check a requested interval against confirmed bookings.
    """
    _configure_logging(verbose)
    try:
        config = _load_config(config_file)
        service = _build_service(config, feed)
        candidate = TimeRange(
            start=parse_datetime(start, config.timezone),
            end=parse_datetime(end, config.timezone),
        )
        exclude_id = int(exclude) if exclude is not None and exclude.isdigit() else exclude
        result = service.check_booking(candidate, _parse_kind(kind), exclude_id)
    except (FileNotFoundError, ValueError, SchedulingError) as e:
        _fail(e)

    if as_json:
        console.print_json(data={"ok": result is None, "conflict": result.to_dict() if result else None})
        if result is not None:
            raise typer.Exit(2)
        return

    if result is None:
        console.print(f"[green]✓ {candidate} is free[/green]")
    else:
        console.print(f"[bold red]✗ {result.message}[/bold red]")
        raise typer.Exit(2)


@app.command()
def recurring(
    start_date: Annotated[str, typer.Argument(help="First date (YYYY-MM-DD)")],
    preferred_time: Annotated[str, typer.Option("--time", "-t", help="Preferred start time (HH:mm)")],
    pattern: Annotated[RecurrencePattern, typer.Option("--pattern", "-p", help="weekly, biweekly or custom")] = RecurrencePattern.WEEKLY,
    days: Annotated[Optional[str], typer.Option("--days", help="ISO weekdays for custom, e.g. 1,3,5")] = None,
    weeks: Annotated[int, typer.Option("--weeks", "-w", help="Weeks ahead")] = 12,
    duration: Annotated[int, typer.Option("--duration", "-d", help="Duration in minutes")] = 60,
    kind: Annotated[str, typer.Option("--kind", "-k", help="Service kind")] = ServiceKind.WALK.value,
    config_file: ConfigOption = None,
    feed: FeedOption = None,
    extended_travel: ExtendedTravelOption = False,
    as_json: JsonOption = False,
    verbose: VerboseOption = False,
):
    """
    Expand a recurring request and classify every date.

    Examples:

        bookingwindows recurring 2025-06-02 --time 09:00 --weeks 4
        bookingwindows recurring 2025-06-02 --time 14:30 -p custom --days 1,3,5
    """
    _configure_logging(verbose)
    try:
        config = _load_config(config_file)
        service = _build_service(config, feed, extended_travel)
        days_of_week = frozenset(int(part) for part in days.split(",") if part.strip()) if days else frozenset()
        spec = RecurrenceSpec(
            pattern=pattern,
            preferred_time=parse_time_of_day(preferred_time),
            start_date=parse_date(start_date),
            horizon_weeks=weeks,
            days_of_week=days_of_week,
        )
        result = service.recurring(spec, duration, _parse_kind(kind))
    except (FileNotFoundError, ValueError, SchedulingError) as e:
        _fail(e)

    if as_json:
        console.print_json(data=result.to_dict())
        return

    table = Table(title="Recurring availability", show_header=True, header_style="bold cyan")
    table.add_column("Date", style="bold")
    table.add_column("Status")
    table.add_column("Details", style="dim")

    for item in result.confirmed:
        data = item.to_dict()
        table.add_row(data["display_date"], "[green]available[/green]", data["time"])
    for item in result.conflicting:
        data = item.to_dict()
        suggestions = ", ".join(alt["display_time"] for alt in data["alternatives"])
        table.add_row(data["display_date"], "[yellow]conflict[/yellow]", f"{data['reason']}; try {suggestions}")
    for item in result.blocked:
        data = item.to_dict()
        table.add_row(data["display_date"], "[red]blocked[/red]", data["detail"])

    summary = result.summary()
    console.print()
    console.print(table)
    console.print(
        f"\n{summary['available']} available, {summary['conflicts']} conflicting, "
        f"{summary['blocked']} blocked of {summary['total_requested']} requested\n"
    )


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]bookingwindows[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
