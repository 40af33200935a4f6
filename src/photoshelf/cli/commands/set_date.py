"""Set-date command - manual capture date entry."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from photoshelf.core.archive import PhotoArchive
from photoshelf.core.config import Config
from photoshelf.core.dates import create_decade_estimate, create_estimated_date, format_date_for_display
from photoshelf.core.exceptions import PhotoshelfError
from photoshelf.models.photo import DatePrecision

console = Console()


def set_date(
    photo_id: str = typer.Argument(..., help="Photo id"),
    year: Optional[int] = typer.Option(None, "--year", "-y", help="Capture year", min=1, max=9999),
    month: Optional[int] = typer.Option(None, "--month", "-m", help="Capture month", min=1, max=12),
    day: Optional[int] = typer.Option(None, "--day", help="Capture day", min=1, max=31),
    decade: Optional[int] = typer.Option(None, "--decade", help="Capture decade, e.g. 1980"),
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
) -> None:
    """Sets an estimated capture date for photos without usable EXIF.

    The precision follows from the options given: --decade, --year,
    --year with --month, or all of --year, --month and --day.
    """
    try:
        if decade is not None:
            if any(value is not None for value in (year, month, day)):
                raise typer.BadParameter("--decade cannot be combined with --year/--month/--day")
            date_taken = create_decade_estimate(decade // 10 * 10)
            precision = DatePrecision.DECADE
        elif year is None:
            raise typer.BadParameter("give --year or --decade")
        elif day is not None:
            if month is None:
                raise typer.BadParameter("--day requires --month")
            date_taken = create_estimated_date(year, month, day)
            precision = DatePrecision.DAY
        elif month is not None:
            date_taken = create_estimated_date(year, month)
            precision = DatePrecision.MONTH
        else:
            date_taken = create_estimated_date(year)
            precision = DatePrecision.YEAR
    except ValueError as e:
        # datetime() rejects e.g. February 30
        raise typer.BadParameter(str(e))

    archive = PhotoArchive(Config(data_dir=data_dir))
    try:
        photo = archive.set_date(photo_id, date_taken, precision)
    except PhotoshelfError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(
        f"[green]{photo.filename}:[/green] "
        f"{format_date_for_display(photo.date_taken, photo.date_taken_precision)}"
    )
