"""Photo-related Pydantic schemas."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class Photo(BaseModel):
    """Metadata record for one uploaded photo.

    The record is linked to its file on disk only through ``url``; the stored
    filename is independent of the photo id. Keys are serialized in camelCase
    (``clientId``) to keep the document format stable.

    Stored records are read leniently: only ``id`` is required, so documents
    written by older versions of the server (for example with a ``null``
    ``clientId``) still load.
    """

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "id": 1,
                    "clientId": 2,
                    "name": "beach.jpg",
                    "url": "/uploads/photos-1700000000000-123456789.jpg",
                    "size": 204800,
                    "uploaded": "2024-05-01T12:00:00.000Z",
                    "favorite": False,
                }
            ]
        }
    )

    id: int = Field(
        ...,
        description="Unique identifier of the photo"
    )

    client_id: Optional[int] = Field(
        None,
        alias="clientId",
        description="Id of the owning client (not checked for existence)"
    )

    name: Any = Field(
        None,
        description="Original filename as uploaded"
    )

    url: Optional[str] = Field(
        None,
        description="Relative URL of the stored file"
    )

    size: Optional[int] = Field(
        None,
        description="Size of the stored file in bytes"
    )

    uploaded: Optional[str] = Field(
        None,
        description="ISO-8601 UTC timestamp of the upload"
    )

    favorite: Optional[bool] = Field(
        False,
        description="Whether the photo is marked as a favorite"
    )
