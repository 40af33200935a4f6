"""Exceptions for Photoshelf."""


class PhotoshelfError(Exception):
    """Base exception for Photoshelf."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(PhotoshelfError):
    """Malformed or missing required input."""

    status_code = 400


class NotFoundError(PhotoshelfError):
    """No photo (or image file) matches the given id or filename."""

    status_code = 404


class ConflictError(PhotoshelfError):
    """A photo with the same id already exists."""

    status_code = 409


class StorageError(PhotoshelfError):
    """Reading or writing the photo collection failed."""

    pass


class ExtractionError(PhotoshelfError):
    """EXIF data could not be read from an image file."""

    pass
