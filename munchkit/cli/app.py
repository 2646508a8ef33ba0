"""
Main CLI application using Typer.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Iterator, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.place_loader import PlaceFileLoader
from ..adapters.recent_store import create_recent_store
from ..config import AppConfig
from ..domain.exceptions import MunchError
from ..domain.hours import OpenState
from ..domain.recency import recent_places, recent_search_queries
from ..domain.records import SearchQuery
from ..services.place_hours import PlaceHoursService
from ..services.recents import RecentsService

app = typer.Typer(
    name="munchkit",
    help="Opening hours and recently viewed places for Munch",
    add_completion=False
)

console = Console()

STATE_STYLES = {
    OpenState.OPEN: "bold green",
    OpenState.CLOSING: "bold yellow",
    OpenState.OPENING: "bold cyan",
    OpenState.CLOSED: "bold red",
    OpenState.UNKNOWN: "dim",
}

RECENT_KINDS = ("places", "searches")

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config = AppConfig.load_or_default(config_file)

    # --verbose wins over the configured level
    root = logging.getLogger()
    if root.level != logging.DEBUG:
        root.setLevel(config.log_level)

    return config


@contextmanager
def _recents_service(config: AppConfig) -> Iterator[RecentsService]:
    store = create_recent_store(config.database_url)
    try:
        yield RecentsService(
            store,
            places=recent_places(config.recents.places_capacity),
            search_queries=recent_search_queries(config.recents.search_queries_capacity),
        )
    finally:
        store.dispose()


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    Opening hours and recents for Munch places.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.command()
def hours(
    places_file: Annotated[Path, typer.Argument(help="JSON file with place records")],
    place_id: Annotated[str, typer.Argument(help="Id of the place to show")],
    at: Annotated[Optional[str], typer.Option("--at", help="Evaluate at this ISO timestamp instead of now")] = None,
    config_file: ConfigOption = None,
    remember: Annotated[bool, typer.Option("--remember/--no-remember", help="Add the place to recent places.")] = True,
):
    """
    Show the open state and weekly hours of a place.

    Examples:

        munchkit hours places.json 8f3a-place
        munchkit hours places.json 8f3a-place --at 2024-11-29T23:30:00+08:00
    """
    try:
        config = _load_config(config_file)

        place = PlaceFileLoader(places_file).get(place_id)
        if place is None:
            console.print(f"[bold red]Error:[/bold red] Unknown place '{place_id}'")
            raise typer.Exit(1)

        service = PlaceHoursService(
            timezone=config.timezone,
            opening_lead_minutes=config.hours.opening_lead_minutes,
            closing_lead_minutes=config.hours.closing_lead_minutes,
        )
        now = pendulum.parse(at, tz=config.timezone) if at else None
        summary = service.summarize(place, now)

        style = STATE_STYLES[summary.state]
        console.print(f"\n[bold]{place.name}[/bold]  [{style}]{summary.state.value.upper()}[/{style}]")
        console.print(f"{summary.today_label}\n")

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Day", style="bold yellow")
        table.add_column("Hours")
        for day, text in summary.week.items():
            table.add_row(day.text, text)
        console.print(table)

        if remember:
            with _recents_service(config) as recents:
                recents.record_place(place)

    except (FileNotFoundError, ValueError, MunchError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def recent(
    kind: Annotated[str, typer.Argument(help="'places' or 'searches'")] = "places",
    limit: Annotated[Optional[int], typer.Option("--limit", "-n", help="Maximum number of entries")] = None,
    config_file: ConfigOption = None,
):
    """
    List recently viewed places or recent searches, newest first.
    """
    if kind not in RECENT_KINDS:
        console.print(f"[bold red]Error:[/bold red] Unknown kind '{kind}', use places or searches")
        raise typer.Exit(1)

    try:
        with _recents_service(_load_config(config_file)) as service:
            if kind == "places":
                items = service.recent_places(limit)
            else:
                items = service.recent_searches(limit)

        if not items:
            console.print(f"[yellow]No recent {kind}.[/yellow]")
            return

        if kind == "places":
            table = Table(title="Recent places", show_header=True, header_style="bold cyan")
            table.add_column("Id", style="dim")
            table.add_column("Name", style="bold yellow")
            for place in items:
                table.add_row(place.id, place.name)
            console.print(table)

        else:
            for query in items:
                console.print(f"  {query.query or '(no text)'}")

    except (FileNotFoundError, ValueError, MunchError) as e:
        console.print(f"[bold red]Error:[/bold red] Failed to load recents: {e}")
        raise typer.Exit(1)


@app.command()
def search(
    text: Annotated[str, typer.Argument(help="Search text to remember")],
    config_file: ConfigOption = None,
):
    """
    Record a search query in the recent searches list.
    """
    try:
        with _recents_service(_load_config(config_file)) as service:
            service.record_search(SearchQuery(query=text))
        console.print(f"[green]✓ Saved search '{text}'[/green]")

    except (FileNotFoundError, ValueError, MunchError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def clear_recent(
    kind: Annotated[str, typer.Argument(help="'places' or 'searches'")],
    config_file: ConfigOption = None,
):
    """
    Clear recently viewed places or recent searches.
    """
    if kind not in RECENT_KINDS:
        console.print(f"[bold red]Error:[/bold red] Unknown kind '{kind}', use places or searches")
        raise typer.Exit(1)

    try:
        with _recents_service(_load_config(config_file)) as service:
            if kind == "places":
                service.clear_places()
            else:
                service.clear_searches()

        console.print(f"\n[green]✓ Recent {kind} cleared.[/green]\n")

    except (FileNotFoundError, ValueError, MunchError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]munchkit[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
