"""Core modules for Photoshelf."""

from photoshelf.core.config import Config
from photoshelf.core.exceptions import (
    PhotoshelfError,
    ValidationError,
    NotFoundError,
    ConflictError,
    StorageError,
    ExtractionError,
)
from photoshelf.core import logger

__all__ = [
    "Config",
    "PhotoshelfError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "StorageError",
    "ExtractionError",
    "logger",
]
