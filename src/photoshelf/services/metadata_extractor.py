"""Reading EXIF data from image files and normalizing it into photo fields."""

import mimetypes
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import piexif
from PIL import Image

from photoshelf import __version__
from photoshelf.core.dates import now_iso, parse_exif_datetime, to_iso
from photoshelf.core.exceptions import ExtractionError
from photoshelf.core.logger import log_call, log_result, log_warning
from photoshelf.models.photo import DatePrecision, Location
from photoshelf.services.geocoder import Geocoder

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".tif", ".tiff", ".webp", ".png", ".heic"}

# Large or binary tags that are not worth keeping in the catalog
EXIF_DENYLIST = {
    "MakerNote",
    "InterColorProfile",
    "ICC_Profile",
    "PrintImageMatching",
    "ColorMatrix1",
    "ColorMatrix2",
    "ForwardMatrix1",
    "ForwardMatrix2",
    "CameraCalibration1",
    "CameraCalibration2",
    "ReductionMatrix1",
    "ReductionMatrix2",
    "AsShotICCProfile",
    "CurrentICCProfile",
    "DNGPrivateData",
    "JPEGTables",
    "XMLPacket",
    "ImageResources",
}

# (date tag, matching offset tag), in priority order
DATE_TAGS = [
    ("DateTimeOriginal", "OffsetTimeOriginal"),
    ("DateTimeDigitized", "OffsetTimeDigitized"),
    ("DateTime", "OffsetTime"),
]

_IFDS = ("0th", "Exif", "GPS", "Interop")

COLOR_SPACES = {1: "sRGB", 2: "Adobe RGB", 65535: "Uncalibrated"}
RESOLUTION_UNITS = {1: "none", 2: "inches", 3: "cm"}
COMPRESSIONS = {1: "Uncompressed", 6: "JPEG", 7: "JPEG", 8: "Deflate", 32773: "PackBits"}
WHITE_BALANCE = {0: "Auto", 1: "Manual"}
EXPOSURE_MODES = {0: "Auto", 1: "Manual", 2: "Auto bracket"}
METERING_MODES = {
    0: "Unknown",
    1: "Average",
    2: "Center-weighted average",
    3: "Spot",
    4: "Multi-spot",
    5: "Multi-segment",
    6: "Partial",
    255: "Other",
}


def is_image_file(path: Path) -> bool:
    return path.is_file() and path.suffix.lower() in IMAGE_EXTENSIONS


@dataclass
class ExtractedPhoto:
    """Photo fields derived from an image file, before merging into the catalog."""

    filename: str
    width: int = 0
    height: int = 0
    date_taken: str = ""
    date_taken_precision: DatePrecision = DatePrecision.UNKNOWN
    location: Location = field(default_factory=Location)
    metadata: Dict[str, Any] = field(default_factory=dict)
    tags: List[str] = field(default_factory=list)
    people: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.metadata.get("processing", {}).get("source") == "fallback"


class MetadataExtractor:
    """Turns the raw EXIF tags of an image into structured photo fields."""

    EXTRACTOR_VERSION = f"photoshelf-{__version__}"

    def __init__(self, geocoder: Optional[Geocoder] = None):
        """
        Args:
            geocoder: Optional reverse geocoder for filling city/state/country
        """
        self.geocoder = geocoder

    def extract(self, image_path: Path, filename: Optional[str] = None) -> ExtractedPhoto:
        """Extracts photo fields from an image file.

        Never raises for unreadable EXIF: the result is then a fallback record
        with unknown date precision and `metadata.processing.source == "fallback"`.

        Args:
            image_path: Path to the image file
            filename: Catalog filename (defaults to the file name)

        Returns:
            Extracted photo fields
        """
        image_path = Path(image_path)
        filename = filename or image_path.name
        log_call("MetadataExtractor", "extract", file=filename)

        try:
            tags = self.read_exif_tags(image_path)
        except ExtractionError as e:
            log_warning(f"EXIF extraction failed for {filename}: {e}")
            return self._fallback(image_path, filename, str(e))

        extracted = self.normalize(tags, filename, file_info=self._file_info(image_path))
        log_result(
            "MetadataExtractor",
            "extract",
            f"{extracted.width}x{extracted.height}, {extracted.date_taken_precision.value}, {extracted.location.title}",
        )
        return extracted

    def read_exif_tags(self, image_path: Path) -> Dict[str, Any]:
        """Reads EXIF into a flat, JSON-safe mapping of tag name to value.

        Raises:
            ExtractionError: If the file cannot be parsed
        """
        try:
            exif_dict = piexif.load(str(image_path))
        except Exception as e:
            raise ExtractionError(f"cannot read EXIF from {image_path.name}: {e}")

        tags: Dict[str, Any] = {}
        for ifd in _IFDS:
            for tag, raw in (exif_dict.get(ifd) or {}).items():
                info = piexif.TAGS.get(ifd, {}).get(tag)
                if info is None:
                    continue
                value = self._convert_value(raw, info["type"])
                if value is not None:
                    tags[info["name"]] = value
        return tags

    @staticmethod
    def _convert_value(raw: Any, tag_type: int) -> Any:
        """Converts a piexif value into plain JSON types; binary blobs become None."""
        if tag_type in (piexif.TYPES.Rational, piexif.TYPES.SRational):
            if not raw:
                return None
            if isinstance(raw[0], tuple):
                return [_ratio(num, den) for num, den in raw]
            return _ratio(*raw)

        if isinstance(raw, bytes):
            text = raw.rstrip(b"\x00")
            try:
                decoded = text.decode("utf-8").strip()
            except UnicodeDecodeError:
                return None
            if tag_type == piexif.TYPES.Undefined and not decoded.isprintable():
                return None
            return decoded

        if isinstance(raw, tuple):
            return list(raw)
        return raw

    def normalize(self, tags: Dict[str, Any], filename: str, file_info: Optional[dict] = None) -> ExtractedPhoto:
        """Maps a raw tag mapping onto photo fields and grouped metadata.

        Args:
            tags: Flat tag name -> value mapping
            filename: Catalog filename
            file_info: Optional `metadata.file` group

        Returns:
            Extracted photo fields
        """
        extracted_at = now_iso()
        extracted = ExtractedPhoto(
            filename=filename,
            width=_first_int(tags, "PixelXDimension", "ImageWidth"),
            height=_first_int(tags, "PixelYDimension", "ImageLength"),
            date_taken=extracted_at,
        )

        for date_tag, offset_tag in DATE_TAGS:
            if tags.get(date_tag):
                offset = tags.get(offset_tag)
                parsed = parse_exif_datetime(str(tags[date_tag]), offset if isinstance(offset, str) else None)
                if parsed:
                    extracted.date_taken = to_iso(parsed)
                    extracted.date_taken_precision = DatePrecision.EXACT
                break

        gps = self._gps_group(tags)
        if "latitude" in gps and "longitude" in gps:
            extracted.location = self._locate(gps["latitude"], gps["longitude"])

        metadata = {
            "exif": {name: value for name, value in tags.items() if name not in EXIF_DENYLIST},
            "file": file_info or {},
            "technical": self._technical_group(tags),
            "gps": gps,
            "camera": self._camera_group(tags),
            "timestamps": _pick(
                tags,
                dateTimeOriginal="DateTimeOriginal",
                createDate="DateTimeDigitized",
                dateTime="DateTime",
            ),
            "processing": {
                "extractedAt": extracted_at,
                "extractorVersion": self.EXTRACTOR_VERSION,
                "source": "exif",
            },
        }
        extracted.metadata = {group: values for group, values in metadata.items() if values}
        return extracted

    def _locate(self, latitude: float, longitude: float) -> Location:
        location = Location.from_coordinates(latitude, longitude)
        if self.geocoder:
            parts = self.geocoder.reverse(latitude, longitude)
            for key, value in (parts or {}).items():
                setattr(location, key, value)
        return location

    def _fallback(self, image_path: Path, filename: str, error: str) -> ExtractedPhoto:
        extracted_at = now_iso()
        metadata: Dict[str, Any] = {
            "processing": {
                "extractedAt": extracted_at,
                "extractorVersion": self.EXTRACTOR_VERSION,
                "source": "fallback",
                "error": error,
            },
        }
        file_info = self._file_info(image_path)
        if file_info:
            metadata["file"] = file_info
        return ExtractedPhoto(
            filename=filename,
            date_taken=extracted_at,
            metadata=metadata,
            error=error,
        )

    @staticmethod
    def _file_info(image_path: Path) -> dict:
        """File system facts for `metadata.file`; empty when the file is unreadable."""
        try:
            stat = image_path.stat()
        except OSError:
            return {}

        info = {
            "size": stat.st_size,
            "created": to_iso(datetime.fromtimestamp(stat.st_ctime, tz=timezone.utc)),
            "modified": to_iso(datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)),
        }

        try:
            with Image.open(image_path) as img:
                info["format"] = img.format
                info["mimeType"] = Image.MIME.get(img.format)
        except OSError:
            info["format"] = image_path.suffix.lstrip(".").upper() or None
            info["mimeType"] = mimetypes.guess_type(image_path.name)[0]

        return {key: value for key, value in info.items() if value is not None}

    @staticmethod
    def _gps_group(tags: Dict[str, Any]) -> dict:
        gps: Dict[str, Any] = {}

        latitude = _dms_to_decimal(tags.get("GPSLatitude"))
        longitude = _dms_to_decimal(tags.get("GPSLongitude"))
        if latitude is not None and longitude is not None:
            if tags.get("GPSLatitudeRef") == "S":
                latitude = -latitude
            if tags.get("GPSLongitudeRef") == "W":
                longitude = -longitude
            gps["latitude"] = latitude
            gps["longitude"] = longitude

        altitude = tags.get("GPSAltitude")
        if isinstance(altitude, (int, float)):
            gps["altitude"] = -altitude if tags.get("GPSAltitudeRef") == 1 else altitude

        direction = tags.get("GPSImgDirection")
        if isinstance(direction, (int, float)):
            gps["direction"] = direction

        timestamp = _gps_timestamp(tags.get("GPSDateStamp"), tags.get("GPSTimeStamp"))
        if timestamp:
            gps["timestamp"] = timestamp

        return gps

    @staticmethod
    def _technical_group(tags: Dict[str, Any]) -> dict:
        technical: Dict[str, Any] = {}

        if "ColorSpace" in tags:
            technical["colorSpace"] = COLOR_SPACES.get(tags["ColorSpace"], str(tags["ColorSpace"]))
        if isinstance(tags.get("Orientation"), int):
            technical["orientation"] = tags["Orientation"]

        resolution = _pick(tags, x="XResolution", y="YResolution")
        if "ResolutionUnit" in tags:
            resolution["unit"] = RESOLUTION_UNITS.get(tags["ResolutionUnit"], str(tags["ResolutionUnit"]))
        if resolution:
            technical["resolution"] = resolution

        if "Compression" in tags:
            technical["compression"] = COMPRESSIONS.get(tags["Compression"], str(tags["Compression"]))

        bits = tags.get("BitsPerSample")
        if isinstance(bits, list) and bits:
            bits = bits[0]
        if isinstance(bits, int):
            technical["bitDepth"] = bits

        return technical

    @staticmethod
    def _camera_group(tags: Dict[str, Any]) -> dict:
        camera = _pick(
            tags,
            make="Make",
            model="Model",
            software="Software",
            lens="LensModel",
            focalLength="FocalLength",
            aperture="FNumber",
            iso="ISOSpeedRatings",
        )

        if isinstance(camera.get("iso"), list):
            camera["iso"] = camera["iso"][0] if camera["iso"] else None

        exposure = tags.get("ExposureTime")
        if isinstance(exposure, (int, float)) and exposure > 0:
            camera["shutterSpeed"] = f"1/{round(1 / exposure)}" if exposure < 1 else f"{exposure:g}s"

        if isinstance(tags.get("Flash"), int):
            camera["flash"] = bool(tags["Flash"] & 1)
        if "WhiteBalance" in tags:
            camera["whiteBalance"] = WHITE_BALANCE.get(tags["WhiteBalance"], str(tags["WhiteBalance"]))
        if "ExposureMode" in tags:
            camera["exposureMode"] = EXPOSURE_MODES.get(tags["ExposureMode"], str(tags["ExposureMode"]))
        if "MeteringMode" in tags:
            camera["meteringMode"] = METERING_MODES.get(tags["MeteringMode"], str(tags["MeteringMode"]))

        return {key: value for key, value in camera.items() if value is not None}


def _ratio(num: int, den: int) -> Optional[float]:
    if not den:
        return None
    return num / den


def _pick(tags: Dict[str, Any], **names: str) -> dict:
    """Copies the present tags under new keys: _pick(tags, make="Make")."""
    return {key: tags[name] for key, name in names.items() if tags.get(name) is not None}


def _first_int(tags: Dict[str, Any], *names: str) -> int:
    for name in names:
        value = tags.get(name)
        if isinstance(value, int) and not isinstance(value, bool) and value > 0:
            return value
    return 0


def _dms_to_decimal(dms: Any) -> Optional[float]:
    """Converts [degrees, minutes, seconds] to decimal degrees."""
    if not isinstance(dms, list) or len(dms) != 3 or any(part is None for part in dms):
        return None
    degrees, minutes, seconds = dms
    return degrees + minutes / 60 + seconds / 3600


def _gps_timestamp(date_stamp: Any, time_stamp: Any) -> Optional[str]:
    """Combines GPSDateStamp ("2023:06:15") and GPSTimeStamp ([h, m, s]) into ISO-8601 UTC."""
    if not isinstance(date_stamp, str) or not isinstance(time_stamp, list) or len(time_stamp) != 3:
        return None
    if any(part is None for part in time_stamp):
        return None
    hours, minutes, seconds = time_stamp
    parsed = parse_exif_datetime(f"{date_stamp} {int(hours):02d}:{int(minutes):02d}:{int(seconds):02d}")
    return to_iso(parsed) if parsed else None
