"""Frequency tables and collection statistics."""

from collections import Counter
from typing import Dict, Iterable, List

from photoshelf.core.dates import year_of
from photoshelf.models.photo import Photo

UNKNOWN = "Unknown"


def _ranked(counter: Counter, key_name: str) -> List[dict]:
    return [{key_name: key, "count": count} for key, count in counter.most_common()]


def count_tags(photos: Iterable[Photo]) -> List[dict]:
    """[{"tag": ..., "count": ...}] sorted by count, most frequent first."""
    return _ranked(Counter(tag for photo in photos for tag in photo.tags), "tag")


def count_people(photos: Iterable[Photo]) -> List[dict]:
    return _ranked(Counter(person for photo in photos for person in photo.people), "person")


def location_key(photo: Photo) -> str:
    """"City, Country" with missing parts replaced by "Unknown"."""
    return f"{photo.location.city or UNKNOWN}, {photo.location.country or UNKNOWN}"


def count_locations(photos: Iterable[Photo]) -> List[dict]:
    return _ranked(Counter(location_key(photo) for photo in photos), "location")


def collection_stats(photos: List[Photo]) -> Dict[str, object]:
    """Totals by capture year (UTC), date precision and country."""
    by_year: Counter = Counter()
    by_precision: Counter = Counter()
    by_country: Counter = Counter()

    for photo in photos:
        year = year_of(photo.date_taken)
        by_year[str(year) if year is not None else UNKNOWN] += 1
        by_precision[photo.date_taken_precision.value] += 1
        by_country[photo.location.country or UNKNOWN] += 1

    return {
        "total": len(photos),
        "byYear": dict(by_year),
        "byPrecision": dict(by_precision),
        "byCountry": dict(by_country),
    }
