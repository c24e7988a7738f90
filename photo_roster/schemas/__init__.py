"""Pydantic schemas for request/response validation."""

from .client import Client, ClientCreate
from .document import Document
from .message import ErrorResponse, MessageResponse
from .photo import Photo

__all__ = [
    "Client",
    "ClientCreate",
    "Photo",
    "Document",
    "MessageResponse",
    "ErrorResponse",
]
