"""
HTMLVault Backend — Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the JSON contract of the content API.
How:   FastAPI parses request bodies into `ContentPayload`, serializes the
       response envelopes, and generates the OpenAPI docs from both.

Every success body is an envelope: `{success: true, data, ...}`.
Error bodies are `{error, details?}` and are built by the exception handlers
in main.py; `ErrorResponse` documents them.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class ContentPayload(BaseModel):
    """
    Body of POST /api/upload and PUT /api/content/{id}.

    Both fields are optional at the parsing stage so that an absent field
    and an empty one reach ContentService and get the same 400 message.
    A non-string value fails parsing instead (mapped to 400 by main.py).
    """
    title: Optional[str] = Field(default=None, description="Document title")
    html: Optional[str] = Field(default=None, description="HTML body")

    model_config = {"extra": "ignore"}


# ══════════════════════════════════════════════════════════════════════════
# Record Views
# ══════════════════════════════════════════════════════════════════════════


class UploadedContent(BaseModel):
    id: int
    title: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ContentSummary(BaseModel):
    """
    One row of the list endpoint. Carries the length of the HTML instead of
    the HTML itself so the list stays small no matter how big documents get.
    """
    id: int
    title: str
    created_at: datetime
    updated_at: datetime
    content_length: int = Field(description="Character length of the stored HTML")

    model_config = {"from_attributes": True}


class ContentDetail(BaseModel):
    id: int
    title: str
    html_content: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UpdatedContent(BaseModel):
    id: int
    title: str
    updated_at: datetime

    model_config = {"from_attributes": True}


class DeletedContent(BaseModel):
    id: int
    title: str

    model_config = {"from_attributes": True}


# ══════════════════════════════════════════════════════════════════════════
# Response Envelopes
# ══════════════════════════════════════════════════════════════════════════


class UploadResponse(BaseModel):
    success: bool = True
    message: str = "Data uploaded successfully"
    data: UploadedContent


class ContentListResponse(BaseModel):
    success: bool = True
    data: List[ContentSummary]
    count: int = Field(description="Number of items in data")


class ContentDetailResponse(BaseModel):
    success: bool = True
    data: ContentDetail


class UpdateResponse(BaseModel):
    success: bool = True
    message: str = "Data updated successfully"
    data: UpdatedContent


class DeleteResponse(BaseModel):
    success: bool = True
    message: str = "Data deleted successfully"
    data: DeletedContent


# ══════════════════════════════════════════════════════════════════════════
# Error & Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Error body returned by every failing request.

    Example (development):
        {"error": "Failed to save data to database", "details": "connection refused"}
    Example (production):
        {"error": "Failed to save data to database"}
    """
    error: str = Field(description="Human-readable error message")
    details: Optional[str] = Field(
        default=None,
        description="Debug message; omitted in production",
    )


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
