"""Data models for Photoshelf."""

from photoshelf.models.photo import Photo, Location, DatePrecision, UNKNOWN_LOCATION, generate_photo_id

__all__ = ["Photo", "Location", "DatePrecision", "UNKNOWN_LOCATION", "generate_photo_id"]
