"""Photo record model."""

import random
import string
import time
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from photoshelf.core.exceptions import ValidationError

UNKNOWN_LOCATION = "Unknown Location"

RECORD_KEYS = frozenset({
    "id",
    "filename",
    "tags",
    "people",
    "location",
    "width",
    "height",
    "dateTaken",
    "dateTakenPrecision",
    "dateAdded",
    "dateModified",
    "metadata",
})


class DatePrecision(str, Enum):
    """How certain the capture date is, from most to least certain."""

    EXACT = "exact"
    DAY = "day"
    MONTH = "month"
    YEAR = "year"
    DECADE = "decade"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "DatePrecision":
        """Parses a precision name, raising ValidationError for unknown values."""
        try:
            return cls(value)
        except ValueError:
            allowed = ", ".join(p.value for p in cls)
            raise ValidationError(f"invalid dateTakenPrecision {value!r} (expected one of: {allowed})")


@dataclass
class Location:
    """Where a photo was taken. `title` is always set."""

    title: str = UNKNOWN_LOCATION
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @classmethod
    def from_coordinates(cls, latitude: float, longitude: float) -> "Location":
        """Location titled with its coordinates, e.g. "50.087451, 14.420671"."""
        return cls(
            title=f"{latitude:.6f}, {longitude:.6f}",
            latitude=latitude,
            longitude=longitude,
        )

    @property
    def is_unknown(self) -> bool:
        return self.title == UNKNOWN_LOCATION

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def to_dict(self) -> dict:
        return {key: value for key, value in asdict(self).items() if value is not None}

    @classmethod
    def from_dict(cls, data: Any) -> "Location":
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValidationError("location must be an object")

        title = data.get("title") or UNKNOWN_LOCATION
        if not isinstance(title, str):
            raise ValidationError("location.title must be a string")

        location = cls(title=title)
        for key in ("address", "city", "state", "country"):
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise ValidationError(f"location.{key} must be a string")
            setattr(location, key, value)
        for key in ("latitude", "longitude"):
            value = data.get(key)
            if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
                raise ValidationError(f"location.{key} must be a number")
            setattr(location, key, value)
        return location


@dataclass
class Photo:
    """A catalog record.

    Attributes use snake_case; the persisted and API form (`to_dict`) uses the
    camelCase keys of the JSON catalog.
    """

    id: str
    filename: str
    tags: List[str] = field(default_factory=list)
    people: List[str] = field(default_factory=list)
    location: Location = field(default_factory=Location)
    width: int = 0
    height: int = 0
    date_taken: str = ""
    date_taken_precision: DatePrecision = DatePrecision.UNKNOWN
    date_added: str = ""
    date_modified: str = ""
    metadata: Optional[Dict[str, Any]] = None
    # Keys outside the model, written back unchanged
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        data = {
            **self.extra,
            "id": self.id,
            "filename": self.filename,
            "tags": list(self.tags),
            "people": list(self.people),
            "location": self.location.to_dict(),
            "width": self.width,
            "height": self.height,
            "dateTaken": self.date_taken,
            "dateTakenPrecision": self.date_taken_precision.value,
            "dateAdded": self.date_added,
            "dateModified": self.date_modified,
        }
        if self.metadata is not None:
            data["metadata"] = self.metadata
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "Photo":
        """Build a Photo from its JSON form.

        Raises:
            ValidationError: If a required field is missing or has the wrong type
        """
        if not isinstance(data, dict):
            raise ValidationError("photo must be an object")

        photo_id = data.get("id")
        filename = data.get("filename")
        if not photo_id or not isinstance(photo_id, str):
            raise ValidationError("id is required")
        if not filename or not isinstance(filename, str):
            raise ValidationError("filename is required")

        metadata = data.get("metadata")
        if metadata is not None and not isinstance(metadata, dict):
            raise ValidationError("metadata must be an object")

        return cls(
            id=photo_id,
            filename=filename,
            tags=_string_list(data.get("tags"), "tags"),
            people=_string_list(data.get("people"), "people"),
            location=Location.from_dict(data.get("location")),
            width=_dimension(data.get("width"), "width"),
            height=_dimension(data.get("height"), "height"),
            date_taken=_optional_string(data.get("dateTaken"), "dateTaken"),
            date_taken_precision=DatePrecision.parse(data.get("dateTakenPrecision") or DatePrecision.UNKNOWN.value),
            date_added=_optional_string(data.get("dateAdded"), "dateAdded"),
            date_modified=_optional_string(data.get("dateModified"), "dateModified"),
            metadata=metadata,
            extra={key: value for key, value in data.items() if key not in RECORD_KEYS},
        )


def _string_list(value: Any, name: str) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValidationError(f"{name} must be a list of strings")
    return list(value)


def _dimension(value: Any, name: str) -> int:
    if value is None:
        return 0
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"{name} must be a non-negative integer")
    return value


def _optional_string(value: Any, name: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be an ISO-8601 string")
    return value


_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_photo_id(existing_ids: Iterable[str] = ()) -> str:
    """Returns a fresh id of the form img_<millis>_<random>, unique among existing_ids."""
    taken = set(existing_ids)
    while True:
        suffix = "".join(random.choices(_ID_ALPHABET, k=9))
        candidate = f"img_{int(time.time() * 1000)}_{suffix}"
        if candidate not in taken:
            return candidate
