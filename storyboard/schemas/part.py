"""
Storyboard Backend — Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the API contract between client and backend.
How:   FastAPI uses these models to parse request bodies, serialize
       responses, and generate the OpenAPI document.
Who:   Route handlers (server side) and storyboard.client (client side).

Required-field checks for parts and logins live in the services, not here:
a missing title must produce the application's 400 `validation_error`
rather than a schema error, so those fields are Optional at this layer.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PartPayload(BaseModel):
    """
    Body of POST /api/parts and PUT /api/parts/{id}.

    title and content are required and non-empty (checked by PartService).
    """
    title: Optional[str] = Field(default=None, description="Part heading")
    image_path: Optional[str] = Field(
        default=None,
        description="Public path returned by POST /api/upload, or null",
    )
    movement_description: Optional[str] = Field(
        default=None,
        description="Stage/movement note shown under the image",
    )
    content: Optional[str] = Field(default=None, description="Body text")


# Range of the Integer columns (PostgreSQL INTEGER is 32-bit; SQLite allows more)
SQL_INTEGER_MIN = -(2**31)
SQL_INTEGER_MAX = 2**31 - 1


class ReorderItem(BaseModel):
    id: int = Field(ge=SQL_INTEGER_MIN, le=SQL_INTEGER_MAX, description="Part identifier")
    order_index: int = Field(
        ge=SQL_INTEGER_MIN, le=SQL_INTEGER_MAX, description="New display position"
    )


class ReorderRequest(BaseModel):
    """
    Body of PUT /api/parts/reorder.

    A body whose `parts` is not an array fails schema validation, which the
    global handler reports as a 400 `validation_error`.
    """
    parts: List[ReorderItem] = Field(description="Every part to reposition")


class LoginRequest(BaseModel):
    username: Optional[str] = Field(default=None)
    password: Optional[str] = Field(default=None)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PartResponse(BaseModel):
    """Full representation of a part, as stored."""
    id: int = Field(description="Unique part identifier")
    order_index: int = Field(description="Display position (ascending)")
    title: str
    image_path: Optional[str] = Field(default=None, description="Public image URL or null")
    movement_description: Optional[str] = Field(default="")
    content: str
    created_at: datetime = Field(description="Creation timestamp (UTC)")
    updated_at: datetime = Field(description="Last edit timestamp (UTC)")

    model_config = {"from_attributes": True}


class DeleteResponse(BaseModel):
    success: bool = True
    message: str = "Part deleted successfully"


class UploadResponse(BaseModel):
    path: str = Field(description="Public path of the stored image, e.g. /uploads/<name>.png")


class AuthResponse(BaseModel):
    success: bool = True
    message: str


class AuthStatusResponse(BaseModel):
    authenticated: bool
    username: Optional[str] = None


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "error": "authentication_required",
            "message": "Authentication required",
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
