"""Roster operations: clients, photos and their files.

Every operation follows the same shape: load the whole document, mutate it
in memory, optionally clean up files, then save the whole document. A
per-service lock serializes these sequences so overlapping requests in one
process cannot lose each other's updates. Separate processes sharing one
document file are not coordinated.
"""

import logging
import re
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import BinaryIO, Iterable, List, Optional

from photo_roster.exceptions import NotFoundError, StorageError, ValidationError
from photo_roster.repositories import DocumentStore
from photo_roster.schemas import Client, Document, Photo
from photo_roster.storage import BlobStore

logger = logging.getLogger(__name__)


@dataclass
class StagedUpload:
    """An uploaded file already staged by the transport layer."""

    stream: BinaryIO
    filename: str


def _utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a ``Z`` suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _next_id(ids: Iterable[int]) -> int:
    return max(ids, default=0) + 1


_INTEGER = re.compile(r"-?[0-9]+")


def _as_int(raw: object) -> Optional[int]:
    """Parse a plain decimal integer; no signs other than "-", no separators."""
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and _INTEGER.fullmatch(raw.strip()):
        return int(raw.strip())
    return None


def _parse_id(raw: object, kind: str) -> int:
    """Parse a path id; anything that is not an integer cannot exist."""
    parsed = _as_int(raw)
    if parsed is None:
        raise NotFoundError(f"{kind} not found")
    return parsed


class RosterService:
    """Load-mutate-save operations over the roster document."""

    def __init__(self, document_store: DocumentStore, blob_store: BlobStore):
        self.document_store = document_store
        self.blob_store = blob_store
        self._lock = threading.Lock()

    def _delete_blob(self, photo: Photo) -> None:
        if isinstance(photo.url, str) and photo.url:
            self.blob_store.delete(photo.url)
        else:
            logger.warning(f"Photo {photo.id} has no stored file to delete")

    def list_data(self) -> Document:
        """Return the whole document. Never writes."""
        with self._lock:
            return self.document_store.load()

    def create_client(
        self,
        name: Optional[str],
        email: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> Client:
        """Append a new client with the next free id.

        Raises:
            ValidationError: If ``name`` is missing or empty.
        """
        if not name:
            raise ValidationError("Client name is required")

        with self._lock:
            document = self.document_store.load()
            client = Client(
                id=_next_id(c.id for c in document.clients),
                name=name,
                email=email,
                phone=phone,
            )
            document.clients.append(client)
            self.document_store.save(document)

        logger.info(f"Created client {client.id} ({client.name})")
        return client

    def delete_client(self, client_id: object) -> None:
        """Remove a client and every photo that references it.

        Photo files are removed best-effort; the records are dropped even when
        a file cannot be deleted.

        Raises:
            NotFoundError: If no client has this id.
        """
        client_id = _parse_id(client_id, "Client")

        with self._lock:
            document = self.document_store.load()
            index = next(
                (i for i, c in enumerate(document.clients) if c.id == client_id),
                None,
            )
            if index is None:
                logger.warning(f"Client not found: {client_id}")
                raise NotFoundError("Client not found")

            del document.clients[index]

            owned = [p for p in document.photos if p.client_id == client_id]
            for photo in owned:
                self._delete_blob(photo)
            document.photos = [p for p in document.photos if p.client_id != client_id]

            self.document_store.save(document)

        logger.info(f"Deleted client {client_id} and {len(owned)} photos")

    def upload_photos(
        self,
        client_id: Optional[object],
        files: Optional[List[StagedUpload]],
    ) -> List[Photo]:
        """Store a batch of uploads and create one photo record per file.

        Ids continue from the current maximum in arrival order and every
        record in the batch shares one upload timestamp.

        Raises:
            ValidationError: If the client id is missing or not an integer,
                or no files were sent.
        """
        if client_id is None or str(client_id).strip() == "" or not files:
            raise ValidationError("Client ID and files are required")
        owner_id = _as_int(client_id)
        if owner_id is None:
            raise ValidationError("Client ID must be an integer")

        blobs = []
        try:
            for upload in files:
                blobs.append(self.blob_store.finalize(upload.stream, upload.filename))

            with self._lock:
                document = self.document_store.load()
                base_id = max((p.id for p in document.photos), default=0)
                uploaded = _utc_timestamp()

                photos = [
                    Photo(
                        id=base_id + i + 1,
                        client_id=owner_id,
                        name=upload.filename,
                        url=self.blob_store.url_for(blob.filename),
                        size=blob.size,
                        uploaded=uploaded,
                        favorite=False,
                    )
                    for i, (upload, blob) in enumerate(zip(files, blobs))
                ]

                document.photos.extend(photos)
                self.document_store.save(document)
        except StorageError:
            for blob in blobs:
                self.blob_store.delete(blob.filename)
            raise

        logger.info(f"Uploaded {len(photos)} photos for client {owner_id}")
        return photos

    def delete_photo(self, photo_id: object) -> None:
        """Remove a photo record and, best-effort, its file.

        Raises:
            NotFoundError: If no photo has this id.
        """
        photo_id = _parse_id(photo_id, "Photo")

        with self._lock:
            document = self.document_store.load()
            index = next(
                (i for i, p in enumerate(document.photos) if p.id == photo_id),
                None,
            )
            if index is None:
                logger.warning(f"Photo not found: {photo_id}")
                raise NotFoundError("Photo not found")

            photo = document.photos.pop(index)
            self._delete_blob(photo)

            self.document_store.save(document)

        logger.info(f"Deleted photo {photo_id}")

    def toggle_favorite(self, photo_id: object) -> Photo:
        """Flip the favorite flag of a photo.

        Raises:
            NotFoundError: If no photo has this id.
        """
        photo_id = _parse_id(photo_id, "Photo")

        with self._lock:
            document = self.document_store.load()
            photo = next((p for p in document.photos if p.id == photo_id), None)
            if photo is None:
                logger.warning(f"Photo not found: {photo_id}")
                raise NotFoundError("Photo not found")

            photo.favorite = not photo.favorite
            self.document_store.save(document)

        logger.debug(f"Photo {photo_id} favorite set to {photo.favorite}")
        return photo
