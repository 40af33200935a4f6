"""Stats command - collection overview."""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from photoshelf.core.archive import PhotoArchive
from photoshelf.core.config import Config

console = Console()


def stats(
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
    top: int = typer.Option(
        10,
        "--top",
        "-n",
        help="How many tags and people to show",
        min=1,
    ),
) -> None:
    """Shows counts by year, date precision, country, tag and person."""
    archive = PhotoArchive(Config(data_dir=data_dir))
    summary = archive.stats()

    if not summary["total"]:
        console.print("[yellow]The catalog is empty[/yellow]")
        console.print(f"Run 'photoshelf extract --data-dir {data_dir}' to read your images.")
        return

    console.print(f"[blue]{summary['total']} photos[/blue]")
    console.print()

    def _print_counts(title: str, column: str, counts: dict) -> None:
        table = Table(title=title)
        table.add_column(column, style="cyan")
        table.add_column("Photos", style="green", justify="right")
        for key, count in counts.items():
            table.add_row(key, str(count))
        console.print(table)

    _print_counts("By year", "Year", dict(sorted(summary["byYear"].items())))
    _print_counts("By date precision", "Precision", summary["byPrecision"])
    _print_counts("By country", "Country", summary["byCountry"])

    tags = archive.tags()[:top]
    if tags:
        _print_counts("Top tags", "Tag", {entry["tag"]: entry["count"] for entry in tags})

    people = archive.people()[:top]
    if people:
        _print_counts("Top people", "Person", {entry["person"]: entry["count"] for entry in people})
