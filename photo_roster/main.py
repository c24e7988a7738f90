import logging
from contextlib import asynccontextmanager
from typing import Any, List, Optional

from fastapi import Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from config import get_settings
from photo_roster.dependencies import get_roster_service
from photo_roster.exceptions import NotFoundError, StorageError, ValidationError
from photo_roster.schemas import (
    Client,
    ClientCreate,
    Document,
    ErrorResponse,
    MessageResponse,
    Photo,
)
from photo_roster.services import RosterService, StagedUpload

# Get settings and configure logging before anything else
settings = get_settings()
settings.configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown."""
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"Document storage: {settings.document_storage} ({settings.document_path})")
    logger.info(f"Uploads root: {settings.uploads_root}")

    settings.uploads_root.mkdir(parents=True, exist_ok=True)
    settings.document_path.parent.mkdir(parents=True, exist_ok=True)

    yield

    logger.info("Shutting down application")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"message": exc.message})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Rejected request to {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"message": "Invalid request"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


def _storage_failure(message: str, exc: StorageError) -> JSONResponse:
    """Build a 500 response carrying only the sanitized storage error."""
    logger.error(f"{message}: {exc}")
    return JSONResponse(status_code=500, content={"message": message, "error": exc.message})


ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@app.get("/health")
def health_check() -> dict[str, str]:
    """Simple health-check endpoint."""
    return {
        "status": "ok",
        "environment": settings.environment,
        "version": settings.app_version,
    }


@app.get("/config")
def get_config() -> dict[str, Any]:
    """Get current configuration (non-sensitive values only)."""
    return {
        "app_name": settings.app_name,
        "app_version": settings.app_version,
        "environment": settings.environment,
        "debug": settings.debug,
        "api_prefix": settings.api_prefix,
        "storage_type": settings.storage_type,
        "document_storage": settings.document_storage,
        "uploads_url_prefix": settings.uploads_url_prefix,
        "log_level": settings.log_level,
        "log_json": settings.log_json,
    }


@app.get(f"{settings.api_prefix}/data", response_model=Document, responses=ERROR_RESPONSES)
def list_data(roster: RosterService = Depends(get_roster_service)):
    """Return every client and photo."""
    try:
        return roster.list_data()
    except StorageError as e:
        return _storage_failure("Error reading data", e)


@app.post(
    f"{settings.api_prefix}/clients",
    response_model=Client,
    status_code=201,
    responses=ERROR_RESPONSES,
)
def create_client(
    payload: ClientCreate,
    roster: RosterService = Depends(get_roster_service),
):
    """Create a client; only ``name`` is required."""
    try:
        return roster.create_client(payload.name, payload.email, payload.phone)
    except StorageError as e:
        return _storage_failure("Error creating client", e)


@app.delete(
    f"{settings.api_prefix}/clients/{{client_id}}",
    response_model=MessageResponse,
    responses=ERROR_RESPONSES,
)
def delete_client(
    client_id: str,
    roster: RosterService = Depends(get_roster_service),
):
    """Delete a client together with all of its photos."""
    try:
        roster.delete_client(client_id)
    except StorageError as e:
        return _storage_failure("Error deleting client", e)
    return MessageResponse(message="Client and associated photos deleted")


@app.post(
    f"{settings.api_prefix}/photos",
    response_model=List[Photo],
    status_code=201,
    responses=ERROR_RESPONSES,
)
def upload_photos(
    client_id: Optional[str] = Form(None, alias="clientId"),
    photos: Optional[List[UploadFile]] = File(None),
    roster: RosterService = Depends(get_roster_service),
):
    """Upload one or more photos for a client.

    Files are sent as multipart form data under the ``photos`` field together
    with a ``clientId`` field.
    """
    uploads = [StagedUpload(stream=f.file, filename=f.filename or "") for f in photos or []]
    try:
        return roster.upload_photos(client_id, uploads)
    except StorageError as e:
        return _storage_failure("Error uploading photos", e)


@app.delete(
    f"{settings.api_prefix}/photos/{{photo_id}}",
    response_model=MessageResponse,
    responses=ERROR_RESPONSES,
)
def delete_photo(
    photo_id: str,
    roster: RosterService = Depends(get_roster_service),
):
    """Delete a photo and its stored file."""
    try:
        roster.delete_photo(photo_id)
    except StorageError as e:
        return _storage_failure("Error deleting photo", e)
    return MessageResponse(message="Photo deleted")


@app.put(
    f"{settings.api_prefix}/photos/{{photo_id}}/favorite",
    response_model=Photo,
    responses=ERROR_RESPONSES,
)
def toggle_favorite(
    photo_id: str,
    roster: RosterService = Depends(get_roster_service),
):
    """Flip the favorite flag of a photo."""
    try:
        return roster.toggle_favorite(photo_id)
    except StorageError as e:
        return _storage_failure("Error updating photo", e)


# Static files: uploaded photos, then the optional docs bundle at the root.
# The root mount must stay last so it does not shadow the routes above.
app.mount(
    settings.uploads_url_prefix,
    StaticFiles(directory=settings.uploads_root, check_dir=False),
    name="uploads",
)

if settings.docs_root.is_dir():
    app.mount("/", StaticFiles(directory=settings.docs_root, html=True), name="docs")
