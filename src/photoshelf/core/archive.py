"""Catalog operations behind the API and the CLI."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from photoshelf.core.config import Config
from photoshelf.core.dates import now_iso
from photoshelf.core.exceptions import ConflictError, NotFoundError, StorageError, ValidationError
from photoshelf.core.logger import log_call, log_info, log_result
from photoshelf.models.photo import DatePrecision, Photo
from photoshelf.services.aggregation import collection_stats, count_locations, count_people, count_tags
from photoshelf.services.geocoder import Geocoder
from photoshelf.services.merge import upsert_extracted
from photoshelf.services.metadata_extractor import MetadataExtractor, is_image_file
from photoshelf.services.query import PhotoFilters, PhotoPage, query_photos, search_photos
from photoshelf.services.record_store import RecordStore


@dataclass
class BatchResult:
    """Outcome of extracting metadata for a whole directory."""

    total_images: int = 0
    processed: List[str] = field(default_factory=list)
    errors: List[Dict[str, str]] = field(default_factory=list)

    @property
    def message(self) -> str:
        message = f"Processed {len(self.processed)} of {self.total_images} images"
        if self.errors:
            message += f", {len(self.errors)} failed"
        return message

    def to_dict(self) -> dict:
        data = {
            "success": True,
            "message": self.message,
            "processed": self.processed,
            "totalImages": self.total_images,
        }
        if self.errors:
            data["errors"] = self.errors
        return data


class PhotoArchive:
    """Runs every catalog operation as a load/modify/save cycle over the store.

    Nothing is cached between calls; each operation reads the catalog afresh.
    """

    def __init__(
        self,
        config: Config,
        store: Optional[RecordStore] = None,
        extractor: Optional[MetadataExtractor] = None,
    ):
        self.config = config
        self.store = store or RecordStore(config.data_file)
        if extractor is None:
            geocoder = Geocoder(cache_file=config.geocode_cache_file) if config.geocode else None
            extractor = MetadataExtractor(geocoder=geocoder)
        self.extractor = extractor

    # --- Reads ---

    def all_photos(self) -> List[Photo]:
        return self.store.load()

    def list_photos(
        self,
        filters: Optional[PhotoFilters] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> PhotoPage:
        """Filtered page of photos; limit is clamped to config.max_page_limit."""
        if limit is None:
            limit = self.config.default_page_limit
        limit = min(limit, self.config.max_page_limit)
        return query_photos(self.store.load(), filters, limit=limit, offset=offset)

    def get_photo(self, photo_id: str) -> Photo:
        for photo in self.store.load():
            if photo.id == photo_id:
                return photo
        raise NotFoundError("photo not found")

    def search(self, query: Optional[str]) -> List[Photo]:
        return search_photos(self.store.load(), query)

    def stats(self) -> dict:
        return collection_stats(self.store.load())

    def tags(self) -> List[dict]:
        return count_tags(self.store.load())

    def people(self) -> List[dict]:
        return count_people(self.store.load())

    def locations(self) -> List[dict]:
        return count_locations(self.store.load())

    # --- Writes ---

    def create_photo(self, data: Any) -> Photo:
        """Adds a client-supplied record, stamping dateAdded/dateModified.

        Raises:
            ValidationError: If id or filename is missing or a field is malformed
            ConflictError: If the id is already taken
        """
        if not isinstance(data, dict):
            raise ValidationError("photo must be an object")
        if not data.get("id") or not data.get("filename"):
            raise ValidationError("id and filename are required")

        photos = self.store.load()
        if any(photo.id == data["id"] for photo in photos):
            raise ConflictError("photo with this id already exists")

        now = now_iso()
        record = {**data, "dateAdded": now, "dateModified": now}
        if not record.get("dateTaken"):
            record["dateTaken"] = now
            record.setdefault("dateTakenPrecision", DatePrecision.UNKNOWN.value)
        photo = Photo.from_dict(record)

        self.store.save(photos + [photo])
        log_info(f"created photo {photo.id}")
        return photo

    def update_photo(self, photo_id: str, changes: Any) -> Photo:
        """Shallow-merges changes over a record; id and dateAdded cannot change.

        Raises:
            NotFoundError: If no photo has this id
            ValidationError: If the merged record is malformed
        """
        if not isinstance(changes, dict):
            raise ValidationError("update must be an object")

        photos = self.store.load()
        index = self._index_of(photos, photo_id)
        existing = photos[index]

        merged = {
            **existing.to_dict(),
            **changes,
            "id": existing.id,
            "dateAdded": existing.date_added,
            "dateModified": max(now_iso(), existing.date_modified),
        }
        photo = Photo.from_dict(merged)

        photos[index] = photo
        self.store.save(photos)
        log_info(f"updated photo {photo.id}")
        return photo

    def set_date(self, photo_id: str, date_taken: str, precision: DatePrecision) -> Photo:
        """Manual capture date entry."""
        return self.update_photo(
            photo_id,
            {"dateTaken": date_taken, "dateTakenPrecision": DatePrecision(precision).value},
        )

    def delete_photo(self, photo_id: str) -> None:
        """Raises NotFoundError if no photo has this id."""
        photos = self.store.load()
        index = self._index_of(photos, photo_id)
        del photos[index]
        self.store.save(photos)
        log_info(f"deleted photo {photo_id}")

    def replace_all(self, data: Any) -> int:
        """Replaces the whole collection (legacy bulk endpoint).

        Raises:
            ValidationError: If data is not an array of valid records
        """
        photos = self.store.parse(data)
        self.store.save(photos, keep_unreadable=False)
        return len(photos)

    @staticmethod
    def _index_of(photos: List[Photo], photo_id: str) -> int:
        for index, photo in enumerate(photos):
            if photo.id == photo_id:
                return index
        raise NotFoundError("photo not found")

    # --- Metadata extraction ---

    def image_path(self, filename: str) -> Path:
        """Resolves a filename inside the images directory.

        Raises:
            ValidationError: If the name is empty or escapes the directory
            NotFoundError: If the file does not exist
        """
        if not filename or not filename.strip():
            raise ValidationError("filename is required")

        images_dir = self.config.images_dir.resolve()
        path = (images_dir / filename).resolve()
        if images_dir not in path.parents:
            raise ValidationError("filename must refer to a file in the images directory")
        if not path.is_file():
            raise NotFoundError("image file not found")
        return path

    def extract_one(self, filename: str) -> Tuple[Photo, bool]:
        """Extracts EXIF for one image and upserts it by filename.

        Returns:
            (resulting photo, True if a new record was created)
        """
        log_call("PhotoArchive", "extract_one", filename=filename)
        path = self.image_path(filename)

        extracted = self.extractor.extract(path, filename)
        photos, photo, created = upsert_extracted(self.store.load(), extracted)
        self.store.save(photos)

        log_result("PhotoArchive", "extract_one", f"{photo.id} ({'created' if created else 'updated'})")
        return photo, created

    def extract_all(
        self,
        progress_callback: Optional[Callable[[int, int, str], None]] = None,
    ) -> BatchResult:
        """Extracts EXIF for every image in the images directory.

        A failing file is recorded in the result and the batch goes on. Files
        whose EXIF could not be read still get a fallback record but are listed
        as errors, not as processed.

        Args:
            progress_callback: Called with (current, total, filename) before each file

        Raises:
            StorageError: If the images directory is missing or the catalog cannot be written
        """
        images_dir = self.config.images_dir
        log_call("PhotoArchive", "extract_all", images_dir=str(images_dir))

        if not images_dir.is_dir():
            raise StorageError(f"images directory {images_dir} does not exist")

        image_files = sorted((p for p in images_dir.iterdir() if is_image_file(p)), key=lambda p: p.name)
        result = BatchResult(total_images=len(image_files))
        photos = self.store.load()

        for current, path in enumerate(image_files, 1):
            if progress_callback:
                progress_callback(current, len(image_files), path.name)
            try:
                extracted = self.extractor.extract(path, path.name)
                photos, _, _ = upsert_extracted(photos, extracted)
            except Exception as e:
                result.errors.append({"filename": path.name, "error": str(e)})
                continue

            if extracted.is_fallback:
                result.errors.append({"filename": path.name, "error": extracted.error or "EXIF extraction failed"})
            else:
                result.processed.append(path.name)

        self.store.save(photos)
        log_result("PhotoArchive", "extract_all", result.message)
        return result
