"""Storage module for uploaded photo files."""

from .base import BlobRef, BlobStore
from .local import LocalBlobStore

__all__ = ["BlobRef", "BlobStore", "LocalBlobStore"]
