"""Document store for the clients/photos aggregate."""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Optional, Protocol

from pydantic import ValidationError as PydanticValidationError

from config import get_settings
from photo_roster.exceptions import ReadError, WriteError
from photo_roster.schemas import Document

logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    """Interface for whole-document persistence.

    There is no partial update: callers load the entire document, mutate it
    in memory and save it back in one piece.
    """

    def load(self) -> Document:
        """Load the full document.

        Returns:
            Document: The stored document, or an empty one if nothing has
            been stored yet.

        Raises:
            ReadError: If the document exists but cannot be read or parsed.
        """
        ...

    def save(self, document: Document) -> None:
        """Replace the stored document.

        Args:
            document: The full document to persist.

        Raises:
            WriteError: If the document cannot be written.
        """
        ...


def _serialize(document: Document) -> dict[str, Any]:
    return document.model_dump(mode="json", by_alias=True)


class JsonDocumentStore(DocumentStore):
    """JSON file implementation of DocumentStore.

    The document is written to a sibling temporary file first and then moved
    over the target with ``os.replace``, so readers never observe a
    half-written file.
    """

    def __init__(self, path: Optional[str | Path] = None):
        """Initialize the store.

        Args:
            path: Location of the JSON file. Falls back to the configured
                document path.
        """
        if path is not None:
            self.path = Path(path)
        else:
            self.path = get_settings().document_path
        logger.info(f"Initialized JsonDocumentStore at {self.path}")

    def load(self) -> Document:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug(f"Document {self.path} not found, using empty document")
            return Document()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read document {self.path}: {e}")
            raise ReadError("Failed to read document")

        try:
            return Document.model_validate(json.loads(raw))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            logger.error(f"Malformed document {self.path}: {e}")
            raise ReadError("Failed to parse document")

    def save(self, document: Document) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(_serialize(document), f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Failed to write document {self.path}: {e}")
            tmp_path.unlink(missing_ok=True)
            raise WriteError("Failed to write document")

        logger.debug(
            f"Saved document with {len(document.clients)} clients "
            f"and {len(document.photos)} photos"
        )


class InMemoryDocumentStore(DocumentStore):
    """In-memory implementation of DocumentStore.

    Keeps the serialized document in a dict. Data is lost when the
    application restarts; suitable for development and testing.
    """

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: Optional[dict[str, Any]] = None
        if initial is not None:
            self._data = _serialize(Document.model_validate(initial))
        logger.info("Initialized InMemoryDocumentStore")

    def load(self) -> Document:
        if self._data is None:
            return Document()
        return Document.model_validate(copy.deepcopy(self._data))

    def save(self, document: Document) -> None:
        self._data = _serialize(document)

    def clear(self) -> None:
        """Drop the stored document.

        This is mainly useful for testing purposes.
        """
        self._data = None
