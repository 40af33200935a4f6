"""Photoshelf - personal photo archive with a JSON catalog, REST API and web UI."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("photoshelf")
except PackageNotFoundError:
    # Fallback for development without installation
    __version__ = "0.0.0-dev"
