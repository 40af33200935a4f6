"""Shared fixtures."""

import piexif
import pytest
from PIL import Image

from photoshelf.models.photo import Photo


@pytest.fixture
def make_photo():
    """Factory for catalog records with sensible defaults."""

    def _make(photo_id="img_1", filename="a.jpg", **fields):
        data = {
            "id": photo_id,
            "filename": filename,
            "tags": [],
            "people": [],
            "location": {"title": "Unknown Location"},
            "width": 0,
            "height": 0,
            "dateTaken": "2023-06-15T14:30:00.000Z",
            "dateTakenPrecision": "exact",
            "dateAdded": "2024-01-01T00:00:00.000Z",
            "dateModified": "2024-01-01T00:00:00.000Z",
        }
        data.update(fields)
        return Photo.from_dict(data)

    return _make


@pytest.fixture
def make_jpeg():
    """Writes a small JPEG with the given EXIF IFDs."""

    def _make(path, zeroth=None, exif=None, gps=None, size=(64, 48)):
        exif_bytes = piexif.dump({
            "0th": zeroth or {},
            "Exif": exif or {},
            "GPS": gps or {},
            "1st": {},
            "thumbnail": None,
        })
        Image.new("RGB", size, color=(200, 120, 40)).save(path, "jpeg", exif=exif_bytes)
        return path

    return _make


@pytest.fixture
def camera_jpeg(make_jpeg):
    """JPEG with capture date, dimensions, camera and GPS tags."""

    def _make(path):
        return make_jpeg(
            path,
            zeroth={
                piexif.ImageIFD.Make: b"Canon",
                piexif.ImageIFD.Model: b"Canon EOS R6",
                piexif.ImageIFD.Software: b"Firmware 1.8",
            },
            exif={
                piexif.ExifIFD.DateTimeOriginal: b"2023:06:15 14:30:00",
                piexif.ExifIFD.PixelXDimension: 6000,
                piexif.ExifIFD.PixelYDimension: 4000,
                piexif.ExifIFD.FNumber: (28, 10),
                piexif.ExifIFD.ExposureTime: (1, 250),
            },
            gps={
                piexif.GPSIFD.GPSLatitudeRef: b"N",
                piexif.GPSIFD.GPSLatitude: ((50, 1), (5, 1), (1464, 100)),
                piexif.GPSIFD.GPSLongitudeRef: b"E",
                piexif.GPSIFD.GPSLongitude: ((14, 1), (25, 1), (1416, 100)),
            },
        )

    return _make
