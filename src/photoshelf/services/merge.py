"""Reconciling extracted metadata with catalog records (upsert by filename)."""

from typing import List, Optional, Tuple

from photoshelf.core.dates import now_iso
from photoshelf.models.photo import Photo, generate_photo_id
from photoshelf.services.metadata_extractor import ExtractedPhoto

# Tags containing any of these were inserted automatically from camera data
DEVICE_TAG_MARKERS = (
    "Apple",
    "iPhone",
    "Canon",
    "Nikon",
    "Sony",
    "Samsung",
    "Google",
    "Pixel",
    "Fujifilm",
    "Olympus",
    "Panasonic",
    "Leica",
    "Huawei",
    "Xiaomi",
    "OnePlus",
    "DJI",
    "GoPro",
    "Software:",
)


def is_device_tag(tag: str) -> bool:
    return any(marker in tag for marker in DEVICE_TAG_MARKERS)


def clean_device_tags(tags: List[str]) -> List[str]:
    """Drops camera/device marker tags, keeping the order of the rest."""
    return [tag for tag in tags if not is_device_tag(tag)]


def find_by_filename(photos: List[Photo], filename: str) -> Optional[Photo]:
    return next((photo for photo in photos if photo.filename == filename), None)


def create_from_extracted(extracted: ExtractedPhoto, existing_ids) -> Photo:
    """New catalog record for an image that has none yet."""
    now = now_iso()
    return Photo(
        id=generate_photo_id(existing_ids),
        filename=extracted.filename,
        tags=list(extracted.tags),
        people=list(extracted.people),
        location=extracted.location,
        width=extracted.width,
        height=extracted.height,
        date_taken=extracted.date_taken,
        date_taken_precision=extracted.date_taken_precision,
        date_added=now,
        date_modified=now,
        metadata=extracted.metadata,
    )


def merge_extracted(existing: Photo, extracted: ExtractedPhoto) -> Photo:
    """Refreshes machine-derived fields of an existing record.

    User-entered content wins: people are kept, and the location is only
    replaced while it is still "Unknown Location".
    """
    return Photo(
        id=existing.id,
        filename=existing.filename,
        tags=clean_device_tags(existing.tags),
        people=list(existing.people),
        location=extracted.location if existing.location.is_unknown else existing.location,
        width=extracted.width or existing.width,
        height=extracted.height or existing.height,
        date_taken=extracted.date_taken or existing.date_taken,
        date_taken_precision=extracted.date_taken_precision or existing.date_taken_precision,
        date_added=existing.date_added,
        date_modified=now_iso(),
        metadata=extracted.metadata,
        extra=dict(existing.extra),
    )


def upsert_extracted(photos: List[Photo], extracted: ExtractedPhoto) -> Tuple[List[Photo], Photo, bool]:
    """Inserts or merges an extracted record into the collection.

    Args:
        photos: Current collection (not modified)
        extracted: Freshly extracted photo fields

    Returns:
        (updated collection, resulting photo, True if a record was created)
    """
    existing = find_by_filename(photos, extracted.filename)

    if existing is None:
        photo = create_from_extracted(extracted, (p.id for p in photos))
        return photos + [photo], photo, True

    photo = merge_extracted(existing, extracted)
    updated = [photo if p is existing else p for p in photos]
    return updated, photo, False
