"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Annotated

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..adapters.rest_store import RestScheduleStore
from ..adapters.snapshot_store import SnapshotScheduleStore
from ..config import AppConfig, load_config
from ..domain.exceptions import ScheduleGridError
from ..domain.grid_builder import GridBuilder
from ..domain.models import (
    ClassifiedSlot,
    EventOccupant,
    EventStart,
    SessionOccupant,
    SessionStart,
    WeekGrid,
)
from ..domain.span_geometry import SpanGeometryCalculator
from ..services.schedule_grid import ScheduleGridService

app = typer.Typer(
    name="schedulegrid",
    help="Show a coach's week: sessions, availability and external calendar events",
    add_completion=False
)

console = Console()

WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _build_store(config: AppConfig, *, mock: bool, snapshot: Optional[Path]):
    """Pick the store adapter: explicit snapshot, bundled mock data, or REST."""
    tz = config.timezone
    snapshot_path = snapshot or config.snapshot_path

    if mock:
        return SnapshotScheduleStore.mock(timezone=tz)

    if snapshot_path:
        return SnapshotScheduleStore.from_file(snapshot_path, timezone=tz)

    if config.store is None:
        raise ScheduleGridError(
            "No data source configured. Add a 'store' section to config.yaml, "
            "pass --snapshot, or use --mock."
        )

    return RestScheduleStore.from_config(config.store, timezone=tz)


def _determine_anchor(
    *,
    tz: str,
    this_week: bool,
    next_week: bool,
    start_option: Optional[str],
    fallback=None,
):
    """
    Resolve the day whose week is shown, from shortcut flags or an explicit date.
    """
    if this_week and next_week:
        console.print("[red]Error: --this-week and --next-week cannot be combined.[/red]")
        raise typer.Exit(1)

    today = pendulum.now(tz).date()

    if next_week:
        return today.add(days=7)

    if this_week:
        return today

    if start_option:
        try:
            return pendulum.from_format(start_option, "YYYY-MM-DD", tz=tz).date()
        except ValueError as e:
            console.print(f"[red]Could not parse start date: {e}[/red]")
            raise typer.Exit(1)

    return fallback or today


def render_cell(slot: ClassifiedSlot, calculator: SpanGeometryCalculator) -> str:
    """
    Render one slot. Only start slots carry content; continuation slots are
    drawn as a bare rail under the block that started above them.
    """
    occupant = slot.occupant

    if isinstance(occupant, SessionStart):
        session = occupant.session
        geometry = calculator.span_for(slot)
        rows = geometry.rows(calculator.units_per_hour)
        mode = "online" if session.is_online else "in person"
        start = session.scheduled_at.in_timezone(slot.start.timezone).format("HH:mm")
        cell = f"[bold green]{start} {escape(session.client_name)}[/bold green]"
        detail = ", ".join(part for part in [session.session_type, mode] if part)
        cell += f"\n[dim]{escape(detail)}[/dim]"
        if rows > 1:
            cell += f" [dim]({rows} rows)[/dim]"
        return cell

    if isinstance(occupant, EventStart):
        event = occupant.event
        geometry = calculator.span_for(slot)
        rows = geometry.rows(calculator.units_per_hour)
        cell = f"[yellow]{escape(event.display_title)}[/yellow]"
        if rows > 1:
            cell += f" [dim]({rows} rows)[/dim]"
        return cell

    if isinstance(occupant, SessionOccupant):
        return "[green]│[/green]"

    if isinstance(occupant, EventOccupant):
        return "[yellow]│[/yellow]"

    return "[dim]·[/dim]" if slot.within_availability else ""


def render_week(
    grid: WeekGrid,
    calculator: SpanGeometryCalculator,
    from_hour: int = 0,
    to_hour: int = 24,
) -> Table:
    """Render the grid as a table: hours as rows, dates as columns."""
    table = Table(show_header=True, header_style="bold cyan", show_lines=True)
    table.add_column("", style="dim", no_wrap=True)

    for day in grid.dates:
        table.add_column(day.format("ddd DD.MM"), min_width=14)

    banners = [
        "\n".join(escape(event.display_title) for event in grid.all_day_for(day))
        for day in grid.dates
    ]
    if any(banners):
        table.add_row("All day", *[f"[magenta]{banner}[/magenta]" for banner in banners])

    for hour in range(from_hour, to_hour):
        cells = [render_cell(day_slots[hour], calculator) for day_slots in grid.slots]
        table.add_row(f"{hour:02d}:00", *cells)

    return table


@app.command()
def show(
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    start: Annotated[Optional[str], typer.Option("--start", help="Any date inside the week to show (YYYY-MM-DD)")] = None,
    this_week: Annotated[bool, typer.Option("--this-week", help="Show the current week.")] = False,
    next_week: Annotated[bool, typer.Option("--next-week", help="Show the coming week.")] = False,
    from_hour: Annotated[Optional[int], typer.Option("--from-hour", min=0, max=23, help="First hour row shown. Defaults to display.scroll_to_hour")] = None,
    to_hour: Annotated[int, typer.Option("--to-hour", min=1, max=24, help="Hour row after the last one shown")] = 24,
    mock: Annotated[bool, typer.Option("--mock", help="Use the bundled mock week instead of a store.")] = False,
    snapshot: Annotated[Optional[Path], typer.Option("--snapshot", help="Read sessions, availability and events from a JSON snapshot.")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """
    Show the classified week grid.

    Examples:

        schedulegrid show --mock

        schedulegrid show --snapshot week.json --start 2024-12-09

        schedulegrid show --next-week --from-hour 6
    """
    _configure_logging(verbose)

    try:
        config = load_config(config_file)
        tz = config.timezone

        store = _build_store(config, mock=mock, snapshot=snapshot)
        fallback = store.anchor_date() if isinstance(store, SnapshotScheduleStore) else None

        anchor = _determine_anchor(
            tz=tz,
            this_week=this_week,
            next_week=next_week,
            start_option=start,
            fallback=fallback,
        )

        first_hour = config.display.scroll_to_hour if from_hour is None else from_hour
        if first_hour >= to_hour:
            console.print("[red]Error: --from-hour must be before --to-hour.[/red]")
            raise typer.Exit(1)

        service = ScheduleGridService.from_store(
            store,
            GridBuilder(timezone=tz),
            hidden_statuses=config.hidden_session_statuses,
            week_starts_on=config.display.week_starts_on,
        )
        grid = asyncio.run(service.build_week(anchor))

    except FileNotFoundError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    except (ScheduleGridError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    calculator = SpanGeometryCalculator(units_per_hour=config.display.units_per_hour)

    console.print()
    console.print(
        f"[bold cyan]Week {grid.dates[0].format('DD.MM.YYYY')} - "
        f"{grid.dates[-1].format('DD.MM.YYYY')}[/bold cyan] ({tz})"
    )
    console.print(render_week(grid, calculator, from_hour=first_hour, to_hour=to_hour))

    dropped = store.report.dropped_count
    if dropped:
        console.print(f"[yellow]⚠ {dropped} malformed record(s) skipped. Use --verbose for details.[/yellow]")
    console.print()


@app.command()
def availability(
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file")] = None,
    mock: Annotated[bool, typer.Option("--mock", help="Use the bundled mock week instead of a store.")] = False,
    snapshot: Annotated[Optional[Path], typer.Option("--snapshot", help="Read availability from a JSON snapshot.")] = None,
):
    """
    List the weekly availability template.
    """
    try:
        config = load_config(config_file)
        store = _build_store(config, mock=mock, snapshot=snapshot)
        windows = asyncio.run(store.fetch_availability())

    except FileNotFoundError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    except (ScheduleGridError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if not windows:
        console.print("[yellow]No availability configured.[/yellow]")
        return

    table = Table(
        title="Weekly availability",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Day", style="bold yellow")
    table.add_column("Hours")
    table.add_column("Active")

    for window in sorted(windows, key=lambda w: w.day_of_week):
        table.add_row(
            WEEKDAY_NAMES[window.day_of_week],
            f"{window.start_time.strftime('%H:%M')} - {window.end_time.strftime('%H:%M')}",
            "[green]yes[/green]" if window.active else "[dim]no[/dim]",
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]schedulegrid[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
