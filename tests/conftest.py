"""Shared fixtures for the photo roster test suite."""
import io
import os
import tempfile
from pathlib import Path

# Point the default stores at a throwaway directory before the app (and its
# cached settings) is imported by any test module.
_SESSION_DIR = Path(tempfile.mkdtemp(prefix="photo-roster-tests-"))
os.environ["UPLOADS_ROOT"] = str(_SESSION_DIR / "uploads")
os.environ["DOCUMENT_PATH"] = str(_SESSION_DIR / "db.json")
os.environ["DOCS_ROOT"] = str(_SESSION_DIR / "docs")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from PIL import Image  # noqa: E402

from config import get_settings  # noqa: E402

get_settings.cache_clear()

from photo_roster.dependencies import (  # noqa: E402
    get_blob_store,
    get_document_store,
    reset_dependencies,
)
from photo_roster.main import app  # noqa: E402
from photo_roster.repositories import JsonDocumentStore  # noqa: E402
from photo_roster.services import RosterService, StagedUpload  # noqa: E402
from photo_roster.storage import LocalBlobStore  # noqa: E402


def create_test_jpeg(width: int = 10, height: int = 10, seed: int = 0) -> bytes:
    """Create a small test JPEG image.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        seed: Seed for generating different colored images.

    Returns:
        bytes: JPEG image data.
    """
    color = ((seed * 50) % 256, (seed * 100) % 256, (seed * 150) % 256)
    img = Image.new("RGB", (width, height), color=color)

    img_bytes = io.BytesIO()
    img.save(img_bytes, format="JPEG")
    return img_bytes.getvalue()


@pytest.fixture
def jpeg():
    """Factory for small JPEG payloads."""
    return create_test_jpeg


@pytest.fixture
def document_store(tmp_path):
    """JSON document store in a temporary directory."""
    return JsonDocumentStore(tmp_path / "db.json")


@pytest.fixture
def blob_store(tmp_path):
    """Local blob store in a temporary directory."""
    return LocalBlobStore(uploads_root=tmp_path / "uploads", url_prefix="/uploads")


@pytest.fixture
def roster(document_store, blob_store):
    """Roster service wired to temporary stores."""
    return RosterService(document_store, blob_store)


@pytest.fixture
def staged(jpeg):
    """Factory for staged uploads carrying JPEG content."""
    def _staged(filename: str = "photo.jpg", seed: int = 0) -> StagedUpload:
        return StagedUpload(stream=io.BytesIO(jpeg(seed=seed)), filename=filename)
    return _staged


@pytest.fixture
def client(document_store, blob_store):
    """Test client with the store dependencies overridden."""
    app.dependency_overrides[get_document_store] = lambda: document_store
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    yield TestClient(app)
    app.dependency_overrides.clear()
    reset_dependencies()
