"""JSON file persistence for the photo collection.

The whole collection lives in one JSON array and is rewritten on every
mutation. There is no index and no incremental write: the intended scale is a
personal archive of thousands of records, where reading and rewriting the full
file per request is cheap enough.

Writes go to a sibling ``.tmp`` file that then replaces the catalog, so a
reader never sees a half-written file. There is no locking; two overlapping
load/modify/save cycles race and the last save wins.

A record that fails validation does not take the catalog down with it: it is
skipped on load, kept aside as raw JSON and appended unchanged on the next save.
"""

import json
from pathlib import Path
from typing import Any, List

from photoshelf.core.exceptions import StorageError, ValidationError
from photoshelf.core.logger import log_call, log_info, log_result, log_warning
from photoshelf.models.photo import Photo


class RecordStore:
    """Loads and atomically saves the photo collection."""

    def __init__(self, data_file: Path):
        """
        Args:
            data_file: Path to the JSON catalog
        """
        self.data_file = Path(data_file)
        # Raw records from the last load that did not validate
        self.unreadable: List[Any] = []

    @property
    def temp_file(self) -> Path:
        return self.data_file.with_suffix(self.data_file.suffix + ".tmp")

    def load(self) -> List[Photo]:
        """Reads the collection.

        Never raises: a missing, unreadable or non-JSON catalog yields an empty
        list, invalid records are skipped, and each problem is logged.
        """
        log_call("RecordStore", "load", path=str(self.data_file))
        self.unreadable = []

        if not self.data_file.exists():
            log_info(f"catalog {self.data_file} does not exist yet")
            return []

        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            log_warning(f"Failed to read catalog {self.data_file}: {e}")
            return []

        if not isinstance(data, list):
            log_warning(f"Failed to read catalog {self.data_file}: expected array")
            return []

        photos = []
        for index, item in enumerate(data):
            try:
                photos.append(Photo.from_dict(item))
            except ValidationError as e:
                label = item.get("id") if isinstance(item, dict) else None
                log_warning(f"Skipping catalog record #{index} ({label or 'no id'}): {e.message}")
                self.unreadable.append(item)

        log_result("RecordStore", "load", f"{len(photos)} photos")
        return photos

    @staticmethod
    def parse(data) -> List[Photo]:
        """Converts a decoded JSON array into photos.

        Raises:
            ValidationError: If data is not an array or a record is malformed
        """
        if not isinstance(data, list):
            raise ValidationError("expected array")
        return [Photo.from_dict(item) for item in data]

    def save(self, photos: List[Photo], keep_unreadable: bool = True) -> None:
        """Writes the whole collection, replacing the catalog atomically.

        Args:
            photos: The collection to persist
            keep_unreadable: Append the records skipped by the last load

        Raises:
            StorageError: If the write or the replace fails
        """
        log_call("RecordStore", "save", path=str(self.data_file), count=len(photos))

        records = [photo.to_dict() for photo in photos]
        if keep_unreadable:
            records.extend(self.unreadable)
        payload = json.dumps(records, ensure_ascii=False, indent=2)
        tmp_path = self.temp_file

        try:
            self.data_file.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(payload)
            tmp_path.replace(self.data_file)
        except OSError as e:
            raise StorageError(f"failed to write data: {e}")

        log_result("RecordStore", "save", f"{len(photos)} photos")
