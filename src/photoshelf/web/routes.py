"""API endpoints."""

import asyncio
import json
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel

from photoshelf.core.archive import PhotoArchive
from photoshelf.core.exceptions import ValidationError
from photoshelf.services.query import PhotoFilters
from photoshelf.web.state import LEVELS, log_buffer

router = APIRouter()


class ExtractRequest(BaseModel):
    """Single-file metadata extraction request."""
    filename: Optional[str] = None


def get_archive(request: Request) -> PhotoArchive:
    return request.app.state.archive


async def _json_body(request: Request) -> Any:
    """Decoded JSON body; malformed JSON is a validation error."""
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError(f"invalid JSON body: {e}")


# --- Collection queries ---

@router.get("/api/photos")
async def list_photos(
    tags: Optional[str] = Query(None, description="Comma-separated, matches any"),
    people: Optional[str] = Query(None, description="Comma-separated, matches any"),
    location: Optional[str] = Query(None, description="Substring of city, state, country or title"),
    year_from: Optional[int] = Query(None, alias="yearFrom"),
    year_to: Optional[int] = Query(None, alias="yearTo"),
    precision: Optional[str] = Query(None, description="Comma-separated date precisions"),
    limit: Optional[int] = Query(None, ge=0),
    offset: int = Query(0, ge=0),
    archive: PhotoArchive = Depends(get_archive),
):
    """Filtered, paginated list of photos."""
    filters = PhotoFilters.from_params(
        tags=tags,
        people=people,
        location=location,
        year_from=year_from,
        year_to=year_to,
        precision=precision,
    )
    return archive.list_photos(filters, limit=limit, offset=offset).to_dict()


@router.get("/api/photos/search")
async def search_photos(
    q: Optional[str] = Query(None),
    archive: PhotoArchive = Depends(get_archive),
):
    """Substring search over tags, people, location and filename."""
    return [photo.to_dict() for photo in archive.search(q)]


@router.get("/api/photos/stats")
async def get_stats(archive: PhotoArchive = Depends(get_archive)):
    """Counts by year, precision and country."""
    return archive.stats()


@router.get("/api/photos/data")
async def get_data(archive: PhotoArchive = Depends(get_archive)):
    """Whole collection (legacy)."""
    return [photo.to_dict() for photo in archive.all_photos()]


@router.post("/api/photos/data")
async def replace_data(request: Request, archive: PhotoArchive = Depends(get_archive)):
    """Replace the whole collection (legacy)."""
    body = await _json_body(request)
    if not isinstance(body, list):
        raise ValidationError("expected array")
    count = archive.replace_all(body)
    return {"ok": True, "count": count}


# --- Metadata extraction ---

@router.post("/api/photos/extract-metadata")
async def extract_metadata(data: ExtractRequest, archive: PhotoArchive = Depends(get_archive)):
    """Read EXIF from one image and upsert its record."""
    if not data.filename:
        raise ValidationError("filename is required")

    photo, created = await asyncio.to_thread(archive.extract_one, data.filename)
    action = "created" if created else "updated"
    return {
        "success": True,
        "photo": photo.to_dict(),
        "message": f"Metadata extracted for {data.filename} (record {action})",
    }


@router.post("/api/photos/extract-all-metadata")
async def extract_all_metadata(archive: PhotoArchive = Depends(get_archive)):
    """Read EXIF from every image in the images directory."""
    result = await asyncio.to_thread(archive.extract_all)
    return result.to_dict()


# --- Single photo ---

@router.get("/api/photos/{photo_id}")
async def get_photo(photo_id: str, archive: PhotoArchive = Depends(get_archive)):
    """Get one photo by id."""
    return archive.get_photo(photo_id).to_dict()


@router.post("/api/photos", status_code=201)
async def create_photo(request: Request, archive: PhotoArchive = Depends(get_archive)):
    """Create a photo record."""
    body = await _json_body(request)
    return archive.create_photo(body).to_dict()


@router.put("/api/photos/{photo_id}")
async def update_photo(photo_id: str, request: Request, archive: PhotoArchive = Depends(get_archive)):
    """Shallow-merge fields into a photo record."""
    body = await _json_body(request)
    return archive.update_photo(photo_id, body).to_dict()


@router.delete("/api/photos/{photo_id}")
async def delete_photo(photo_id: str, archive: PhotoArchive = Depends(get_archive)):
    """Delete a photo record."""
    archive.delete_photo(photo_id)
    return {"ok": True}


# --- Frequency tables ---

@router.get("/api/tags")
async def get_tags(archive: PhotoArchive = Depends(get_archive)):
    return archive.tags()


@router.get("/api/people")
async def get_people(archive: PhotoArchive = Depends(get_archive)):
    return archive.people()


@router.get("/api/locations")
async def get_locations(archive: PhotoArchive = Depends(get_archive)):
    return archive.locations()


# --- Diagnostics ---

@router.get("/api/logs")
async def get_logs(level: Optional[str] = Query(None, description="One of: " + ", ".join(LEVELS))):
    """Recent diagnostics, oldest first."""
    if level and level not in LEVELS:
        raise ValidationError(f"unknown log level {level!r}")
    return {"logs": log_buffer.get_all(level)}


@router.delete("/api/logs")
async def clear_logs():
    return {"success": True, "cleared": log_buffer.clear()}
