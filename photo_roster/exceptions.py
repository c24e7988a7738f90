"""Exception hierarchy for the photo roster service.

Routes translate these into HTTP responses:

- ``ValidationError`` -> 400
- ``NotFoundError`` -> 404
- ``StorageError`` (and subclasses) -> 500

``BlobDeleteError`` is only ever logged; blob cleanup failures never abort
the operation that removed the owning record.
"""


class PhotoRosterError(Exception):
    """Base exception for all service errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PhotoRosterError):
    """Required input is missing or malformed."""


class NotFoundError(PhotoRosterError):
    """A referenced client or photo does not exist."""


class StorageError(PhotoRosterError):
    """Base exception for storage-related errors."""


class ReadError(StorageError):
    """The document could not be read or parsed."""


class WriteError(StorageError):
    """The document could not be written."""


class BlobDeleteError(StorageError):
    """An uploaded file could not be removed from disk."""
