"""Repository implementations for data access."""

from .document import DocumentStore, InMemoryDocumentStore, JsonDocumentStore

__all__ = [
    "DocumentStore",
    "InMemoryDocumentStore",
    "JsonDocumentStore",
]
