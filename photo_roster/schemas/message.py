"""Plain message payloads used for confirmations and errors."""

from typing import Optional

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Human-readable confirmation."""

    message: str = Field(..., examples=["Photo deleted"])


class ErrorResponse(MessageResponse):
    """Error payload; ``error`` is only present for server-side failures."""

    error: Optional[str] = Field(
        None,
        description="Sanitized detail of a storage failure",
        examples=["Failed to read document"]
    )
