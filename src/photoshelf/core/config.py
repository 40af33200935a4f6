"""Configuration for Photoshelf."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class Config:
    """Archive configuration."""

    # Directory holding the JSON catalog and caches
    data_dir: Path = Path("data")

    # Directory with the image files (defaults to data_dir / "images")
    images_dir: Optional[Path] = None

    # Page size when the client does not ask for one
    default_page_limit: int = 100

    # Larger limits are clamped to this value
    max_page_limit: int = 1000

    # Fill city/state/country from GPS via Nominatim during extraction
    geocode: bool = False

    # Verbose mode
    verbose: bool = False

    def __post_init__(self) -> None:
        self.data_dir = Path(self.data_dir)
        if self.images_dir is None:
            self.images_dir = self.data_dir / "images"
        else:
            self.images_dir = Path(self.images_dir)

    @property
    def data_file(self) -> Path:
        return self.data_dir / "photos.json"

    @property
    def geocode_cache_file(self) -> Path:
        return self.data_dir / "geocode_cache.json"

    def ensure_dirs(self) -> None:
        """Creates the data and images directories."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.images_dir.mkdir(parents=True, exist_ok=True)
