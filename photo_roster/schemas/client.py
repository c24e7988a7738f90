"""Client-related Pydantic schemas."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ClientCreate(BaseModel):
    """Request body for creating a client.

    Every field is optional at the schema level so that a missing name is
    reported by the service as a validation failure with a readable message
    instead of a framework-generated error payload.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"name": "Alice", "email": "alice@example.com", "phone": "555-0100"},
                {"name": "Bob"},
            ]
        }
    )

    name: Optional[str] = Field(
        None,
        description="Display name of the client (required, non-empty)",
        examples=["Alice"]
    )

    email: Optional[str] = Field(
        None,
        description="Contact email address",
        examples=["alice@example.com"]
    )

    phone: Optional[str] = Field(
        None,
        description="Contact phone number",
        examples=["555-0100"]
    )


class Client(BaseModel):
    """A client of the roster as stored in the document.

    Only ``id`` is typed strictly; the other values are kept as they were
    stored, since request bodies are validated by ``ClientCreate``.
    """

    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={
            "examples": [
                {"id": 1, "name": "Alice", "email": "alice@example.com", "phone": None}
            ]
        }
    )

    id: int = Field(
        ...,
        description="Unique identifier, one more than the largest existing id"
    )

    name: Any = Field(
        None,
        description="Display name of the client"
    )

    email: Any = Field(
        None,
        description="Contact email address"
    )

    phone: Any = Field(
        None,
        description="Contact phone number"
    )
