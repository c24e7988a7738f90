"""FastAPI dependency injection configuration."""

import logging
import threading

from fastapi import Depends

from config import get_settings
from photo_roster.repositories import (
    DocumentStore,
    InMemoryDocumentStore,
    JsonDocumentStore,
)
from photo_roster.services import RosterService
from photo_roster.storage import BlobStore, LocalBlobStore

logger = logging.getLogger(__name__)


# Process-wide instances; the roster service lock only serializes requests
# that share the same service object.
_document_store: DocumentStore | None = None
_blob_store: BlobStore | None = None
_roster_service: RosterService | None = None
_init_lock = threading.Lock()


def get_document_store() -> DocumentStore:
    """Get the document store selected by DOCUMENT_STORAGE.

    - "json": JsonDocumentStore backed by DOCUMENT_PATH
    - "memory": InMemoryDocumentStore (data lost on restart)
    """
    global _document_store

    with _init_lock:
        if _document_store is None:
            settings = get_settings()
            if settings.document_storage == "memory":
                _document_store = InMemoryDocumentStore()
            else:
                _document_store = JsonDocumentStore(settings.document_path)
            logger.info(f"Created document store (document_storage={settings.document_storage})")

    return _document_store


def get_blob_store() -> BlobStore:
    """Get the blob store for uploaded photo files.

    Only local filesystem storage is supported; STORAGE_TYPE is validated by
    the settings.
    """
    global _blob_store

    with _init_lock:
        if _blob_store is None:
            settings = get_settings()
            _blob_store = LocalBlobStore(settings.uploads_root, settings.uploads_url_prefix)

    return _blob_store


def get_roster_service(
    document_store: DocumentStore = Depends(get_document_store),
    blob_store: BlobStore = Depends(get_blob_store),
) -> RosterService:
    """Get the shared roster service for the configured stores.

    A new service is only built when the stores change, which in practice
    happens when tests override the store dependencies.
    """
    global _roster_service

    with _init_lock:
        if (
            _roster_service is None
            or _roster_service.document_store is not document_store
            or _roster_service.blob_store is not blob_store
        ):
            _roster_service = RosterService(document_store, blob_store)
            logger.debug("Created roster service")

    return _roster_service


def reset_dependencies() -> None:
    """Forget cached stores and service.

    This is mainly useful for testing purposes.
    """
    global _document_store, _blob_store, _roster_service
    _document_store = None
    _blob_store = None
    _roster_service = None
