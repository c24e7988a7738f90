"""Local filesystem implementation of BlobStore."""
import logging
import random
import shutil
import time
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Optional

from config import get_settings
from photo_roster.exceptions import BlobDeleteError, StorageError

from .base import BlobRef, BlobStore

logger = logging.getLogger(__name__)


def filename_from_url(url: str) -> str:
    """Return the stored filename a photo url points to."""
    return PurePosixPath(url).name


class LocalBlobStore(BlobStore):
    """Local filesystem blob store.

    Stores uploads as files in a configurable directory. Filenames are built
    from the upload time in milliseconds plus a random suffix and the
    original extension, so concurrent uploads do not collide.
    """

    field_name = "photos"

    def __init__(
        self,
        uploads_root: Optional[str | Path] = None,
        url_prefix: Optional[str] = None,
    ):
        """Initialize local blob store.

        Args:
            uploads_root: Directory for uploaded files. Falls back to the
                configured uploads root.
            url_prefix: URL prefix the directory is served under. Falls back
                to the configured prefix.
        """
        settings = get_settings()

        if uploads_root is not None:
            self.uploads_root = Path(uploads_root)
        else:
            self.uploads_root = settings.uploads_root

        self.url_prefix = (url_prefix or settings.uploads_url_prefix).rstrip("/")

        self._ensure_uploads_dir()
        logger.info(f"Initialized LocalBlobStore with root: {self.uploads_root}")

    def _ensure_uploads_dir(self) -> None:
        """Ensure the uploads directory exists."""
        try:
            self.uploads_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create uploads directory: {e}")
            raise StorageError(f"Failed to create uploads directory: {e}")

    def _generate_filename(self, original_name: str) -> str:
        suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
        extension = PurePosixPath(original_name.replace("\\", "/")).suffix
        return f"{self.field_name}-{suffix}{extension}"

    def finalize(self, stream: BinaryIO, original_name: str) -> BlobRef:
        """Copy a staged upload into the uploads directory.

        Args:
            stream: Readable binary stream of the staged upload.
            original_name: Filename supplied by the client.

        Returns:
            BlobRef: Stored filename and number of bytes written.

        Raises:
            StorageError: If the file cannot be written.
        """
        while True:
            filename = self._generate_filename(original_name or "")
            file_path = self.uploads_root / filename
            try:
                out = open(file_path, "xb")
                break
            except FileExistsError:
                # Another upload owns this name; never touch its file
                logger.debug(f"Filename clash on {filename}, retrying")
            except OSError as e:
                logger.error(f"Failed to create file for upload {original_name!r}: {e}")
                raise StorageError(f"Failed to store uploaded file {original_name!r}")

        try:
            with out:
                shutil.copyfileobj(stream, out)
                size = out.tell()
        except OSError as e:
            logger.error(f"Failed to store upload {original_name!r}: {e}")
            file_path.unlink(missing_ok=True)
            raise StorageError(f"Failed to store uploaded file {original_name!r}")

        logger.debug(f"Stored upload {original_name!r} as {file_path} ({size} bytes)")
        return BlobRef(filename=filename, size=size)

    def delete(self, filename: str) -> None:
        """Best-effort removal of a stored file.

        Only the basename is used, so a photo url can be passed directly and
        nothing outside the uploads directory is touched.
        """
        file_path = self.uploads_root / filename_from_url(filename)
        try:
            file_path.unlink()
            logger.debug(f"Deleted photo file: {file_path}")
        except FileNotFoundError:
            logger.warning(f"Photo file already missing: {file_path}")
        except OSError as e:
            error = BlobDeleteError(f"Failed to delete photo file: {filename}")
            error.__cause__ = e
            logger.error(f"{error.message}: {e}", exc_info=error)

    def url_for(self, filename: str) -> str:
        return f"{self.url_prefix}/{filename}"
