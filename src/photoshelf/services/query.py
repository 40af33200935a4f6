"""Filtering, pagination and substring search over the photo collection."""

from dataclasses import dataclass, field
from typing import List, Optional

from photoshelf.core.dates import year_of
from photoshelf.core.exceptions import ValidationError
from photoshelf.models.photo import DatePrecision, Photo

DEFAULT_LIMIT = 100


def split_csv(value: Optional[str]) -> List[str]:
    """Splits "a, b,,c" into ["a", "b", "c"]."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class PhotoFilters:
    """Conjunctive filters; multi-valued ones match if ANY value matches."""

    tags: List[str] = field(default_factory=list)
    people: List[str] = field(default_factory=list)
    location: Optional[str] = None
    year_from: Optional[int] = None
    year_to: Optional[int] = None
    precisions: List[DatePrecision] = field(default_factory=list)

    @classmethod
    def from_params(
        cls,
        tags: Optional[str] = None,
        people: Optional[str] = None,
        location: Optional[str] = None,
        year_from: Optional[int] = None,
        year_to: Optional[int] = None,
        precision: Optional[str] = None,
    ) -> "PhotoFilters":
        """Builds filters from raw query-string values (comma-separated lists).

        Raises:
            ValidationError: If a precision value is unknown
        """
        return cls(
            tags=split_csv(tags),
            people=split_csv(people),
            location=location.strip() if location and location.strip() else None,
            year_from=year_from,
            year_to=year_to,
            precisions=[DatePrecision.parse(value) for value in split_csv(precision)],
        )

    def matches(self, photo: Photo) -> bool:
        if self.tags and not any(tag in photo.tags for tag in self.tags):
            return False

        if self.people and not any(person in photo.people for person in self.people):
            return False

        if self.location:
            needle = self.location.lower()
            loc = photo.location
            fields = (loc.city, loc.state, loc.country, loc.title)
            if not any(value and needle in value.lower() for value in fields):
                return False

        if self.year_from is not None or self.year_to is not None:
            year = year_of(photo.date_taken)
            if year is None:
                return False
            if self.year_from is not None and year < self.year_from:
                return False
            if self.year_to is not None and year > self.year_to:
                return False

        if self.precisions and photo.date_taken_precision not in self.precisions:
            return False

        return True


@dataclass
class PhotoPage:
    """One page of query results; total counts all matches."""

    items: List[Photo]
    total: int
    limit: int
    offset: int

    def to_dict(self) -> dict:
        return {
            "photos": [photo.to_dict() for photo in self.items],
            "total": self.total,
            "limit": self.limit,
            "offset": self.offset,
        }


def query_photos(
    photos: List[Photo],
    filters: Optional[PhotoFilters] = None,
    limit: int = DEFAULT_LIMIT,
    offset: int = 0,
) -> PhotoPage:
    """Filters then paginates, keeping collection order.

    Raises:
        ValidationError: If limit or offset is negative
    """
    if limit < 0 or offset < 0:
        raise ValidationError("limit and offset must be non-negative")

    filters = filters or PhotoFilters()
    matched = [photo for photo in photos if filters.matches(photo)]
    return PhotoPage(
        items=matched[offset:offset + limit],
        total=len(matched),
        limit=limit,
        offset=offset,
    )


def search_photos(photos: List[Photo], query: Optional[str]) -> List[Photo]:
    """Case-insensitive substring search over tags, people, location and filename.

    Raises:
        ValidationError: If the query is empty
    """
    if not query or not query.strip():
        raise ValidationError("query parameter q is required")

    needle = query.strip().lower()
    results = []
    for photo in photos:
        haystack = [
            *photo.tags,
            *photo.people,
            photo.location.title,
            photo.location.city,
            photo.location.country,
            photo.filename,
        ]
        if any(value and needle in value.lower() for value in haystack):
            results.append(photo)
    return results
