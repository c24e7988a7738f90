"""Blob store interface for uploaded photo files."""

from dataclasses import dataclass
from typing import BinaryIO, Protocol, runtime_checkable


@dataclass(frozen=True)
class BlobRef:
    """Reference to a finalized blob on disk."""

    filename: str
    size: int


@runtime_checkable
class BlobStore(Protocol):
    """Abstract interface for photo file storage.

    A blob is owned by exactly one photo record and is linked to it only
    through the record's url. Deletion is best-effort: failures are logged
    by the implementation and never raised to the caller.
    """

    def finalize(self, stream: BinaryIO, original_name: str) -> BlobRef:
        """Persist a staged upload under a new unique filename.

        Args:
            stream: Readable binary stream of the staged upload.
            original_name: Filename supplied by the client; only its
                extension is kept.

        Returns:
            BlobRef: Stored filename and byte size.

        Raises:
            StorageError: If the file cannot be written.
        """
        ...

    def delete(self, filename: str) -> None:
        """Remove a stored file, ignoring a file that is already gone.

        Args:
            filename: Stored filename (or a url ending in it).
        """
        ...

    def url_for(self, filename: str) -> str:
        """Public URL under which a stored file is served."""
        ...
