"""Schema of the persisted clients/photos document."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from .client import Client
from .photo import Photo


class Document(BaseModel):
    """Root aggregate holding every client and photo.

    The whole document is the unit of persistence: it is loaded and saved
    in one piece on every operation.
    """

    model_config = ConfigDict(extra="allow")

    clients: List[Client] = Field(
        default_factory=list,
        description="All clients in insertion order"
    )

    photos: List[Photo] = Field(
        default_factory=list,
        description="All photos in insertion order"
    )
