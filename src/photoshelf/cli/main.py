"""Main CLI definition for Photoshelf."""

import typer

from photoshelf import __version__
from photoshelf.cli.commands.extract import extract
from photoshelf.cli.commands.list import list_photos
from photoshelf.cli.commands.serve import serve
from photoshelf.cli.commands.set_date import set_date
from photoshelf.cli.commands.stats import stats


def version_callback(value: bool) -> None:
    if value:
        print(f"photoshelf {__version__}")
        raise typer.Exit()


app = typer.Typer(help="Personal photo archive.", no_args_is_help=True)


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    """Personal photo archive: JSON catalog, EXIF extraction and a REST API."""


app.command()(serve)
app.command()(extract)
app.command()(stats)
app.command("list")(list_photos)
app.command("set-date")(set_date)


if __name__ == "__main__":
    app()
