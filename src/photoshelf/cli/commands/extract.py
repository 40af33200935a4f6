"""Extract command - reads EXIF metadata into the catalog."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn
from rich.table import Table

from photoshelf.core.archive import PhotoArchive
from photoshelf.core.config import Config
from photoshelf.core.exceptions import PhotoshelfError
from photoshelf.core.logger import set_verbose

console = Console()


def extract(
    filename: Optional[str] = typer.Argument(
        None,
        help="Single image in the images directory (all images if omitted)",
    ),
    data_dir: Path = typer.Option(
        Path("data"),
        "--data-dir",
        "-d",
        envvar="PHOTOSHELF_DATA_DIR",
        help="Directory with photos.json and the images folder",
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
    ),
    images_dir: Optional[Path] = typer.Option(
        None,
        "--images-dir",
        "-i",
        help="Image directory (defaults to DATA_DIR/images)",
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
    ),
    geocode: bool = typer.Option(
        False,
        "--geocode",
        help="Reverse-geocode GPS coordinates (Nominatim)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log service calls with their parameters",
    ),
) -> None:
    """Reads EXIF metadata and creates or updates catalog records.

    Records are matched by filename; tags and people entered by hand are kept.
    """
    set_verbose(verbose)
    config = Config(data_dir=data_dir, images_dir=images_dir, geocode=geocode, verbose=verbose)
    archive = PhotoArchive(config)

    try:
        if filename:
            photo, created = archive.extract_one(filename)
            action = "Created" if created else "Updated"
            console.print(f"[green]{action}[/green] {photo.id} ({photo.filename})")
            return

        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("Extracting", total=None)

            def progress_callback(current: int, total: int, name: str) -> None:
                progress.update(task, total=total, completed=current - 1, description=name)

            result = archive.extract_all(progress_callback=progress_callback)
            progress.update(task, completed=result.total_images, description="Done")

    except PhotoshelfError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        raise typer.Exit(130)

    console.print()
    console.print(f"[green]{result.message}[/green]")

    if result.errors:
        table = Table(title="Failed files")
        table.add_column("File", style="cyan")
        table.add_column("Error", style="red")
        for error in result.errors:
            table.add_row(error["filename"], error["error"])
        console.print(table)
