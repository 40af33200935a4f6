"""List command - filtered catalog listing."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from photoshelf.core.archive import PhotoArchive
from photoshelf.core.config import Config
from photoshelf.core.dates import format_date_short, sort_by_date_taken
from photoshelf.core.exceptions import PhotoshelfError
from photoshelf.services.query import PhotoFilters

console = Console()


def list_photos(
    data_dir: Path = typer.Option(
        Path("data"),
        "--data-dir",
        "-d",
        envvar="PHOTOSHELF_DATA_DIR",
        help="Directory with photos.json",
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
    ),
    tags: Optional[str] = typer.Option(None, "--tags", "-t", help="Comma-separated, matches any"),
    people: Optional[str] = typer.Option(None, "--people", help="Comma-separated, matches any"),
    location: Optional[str] = typer.Option(None, "--location", "-l", help="Substring of the place"),
    year_from: Optional[int] = typer.Option(None, "--year-from", help="Earliest capture year"),
    year_to: Optional[int] = typer.Option(None, "--year-to", help="Latest capture year"),
    precision: Optional[str] = typer.Option(None, "--precision", help="Comma-separated date precisions"),
    search: Optional[str] = typer.Option(None, "--search", "-q", help="Free-text search"),
    limit: int = typer.Option(50, "--limit", "-n", help="Maximum rows", min=1),
    oldest_first: bool = typer.Option(False, "--oldest-first", help="Sort by capture date ascending"),
) -> None:
    """Lists photos matching the filters, newest first."""
    archive = PhotoArchive(Config(data_dir=data_dir))

    try:
        filters = PhotoFilters.from_params(
            tags=tags,
            people=people,
            location=location,
            year_from=year_from,
            year_to=year_to,
            precision=precision,
        )
        photos = archive.search(search) if search else archive.all_photos()
    except PhotoshelfError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    matched = sort_by_date_taken(
        (photo for photo in photos if filters.matches(photo)),
        descending=not oldest_first,
    )
    if not matched:
        console.print("[yellow]No photos match[/yellow]")
        return

    table = Table(title=f"{len(matched)} photos")
    table.add_column("ID", style="dim")
    table.add_column("File", style="cyan")
    table.add_column("Taken")
    table.add_column("Location")
    table.add_column("Tags", style="green")
    table.add_column("People", style="magenta")

    for photo in matched[:limit]:
        table.add_row(
            photo.id,
            photo.filename,
            format_date_short(photo.date_taken, photo.date_taken_precision),
            photo.location.title,
            ", ".join(photo.tags),
            ", ".join(photo.people),
        )

    console.print(table)
    if len(matched) > limit:
        console.print(f"[dim]{len(matched) - limit} more not shown[/dim]")
