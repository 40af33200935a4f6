"""Serve command - runs the REST API and browse page."""

import socket
import webbrowser
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

console = Console()


def _find_available_port(start_port: int, host: str, max_attempts: int = 10) -> Optional[int]:
    """First port from start_port on that can be bound, or None."""
    for candidate in range(start_port, min(start_port + max_attempts, 65536)):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            try:
                s.bind((host, candidate))
            except OSError:
                continue
        return candidate
    return None


def serve(
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
    host: str = typer.Option(
        "0.0.0.0",
        "--host",
        help="Interface to bind",
    ),
    port: int = typer.Option(
        3001,
        "--port",
        "-p",
        envvar="PHOTOSHELF_PORT",
        help="Port for the web server",
        min=1024,
        max=65535,
    ),
    geocode: bool = typer.Option(
        False,
        "--geocode",
        help="Reverse-geocode GPS coordinates during extraction (Nominatim)",
    ),
    no_browser: bool = typer.Option(
        False,
        "--no-browser",
        help="Do not open a browser",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log service calls with their parameters",
    ),
) -> None:
    """Starts the photo archive server.

    Serves the JSON API under /api, the image files under /images and a
    browse page at /.
    """
    import uvicorn

    from photoshelf.core.config import Config
    from photoshelf.core.logger import set_verbose, set_web_mode
    from photoshelf.web.app import create_app

    set_web_mode(True)
    set_verbose(verbose)

    config = Config(data_dir=data_dir, images_dir=images_dir, geocode=geocode, verbose=verbose)

    console.print("[blue]Photoshelf[/blue]")
    console.print(f"  Catalog: {config.data_file}")
    console.print(f"  Images: {config.images_dir}")
    if geocode:
        console.print("  Reverse geocoding: on")
    console.print(f"  Port: {port}")
    console.print()

    fastapi_app = create_app(config)

    actual_port = _find_available_port(port, host)
    if actual_port is None:
        console.print(f"[red]Error:[/red] No free port found (tried {port}-{port + 9})")
        raise typer.Exit(1)

    if actual_port != port:
        console.print(f"[yellow]Port {port} is taken, using {actual_port}[/yellow]")

    url = f"http://localhost:{actual_port}"
    if not no_browser:
        console.print(f"[green]Opening browser:[/green] {url}")
        webbrowser.open(url)
    else:
        console.print(f"[green]Running at:[/green] {url}")

    console.print()
    console.print("[dim]Ctrl+C to stop[/dim]")
    console.print()

    try:
        uvicorn.run(fastapi_app, host=host, port=actual_port, log_level="warning")
    except KeyboardInterrupt:
        console.print("\n[yellow]Server stopped[/yellow]")
