"""
Bookshelf — Pydantic Request/Response Schemas
==============================================

What:  Pydantic models defining the HTTP contract of the books API.
How:   FastAPI decodes request bodies into BookPayload and documents the
       response models in the OpenAPI schema; BookResponse is also what the
       response encoder serializes.

Schemas are kept separate from the SQLAlchemy model so that the wire format
(RFC3339 timestamps, field set) is controlled here and not by the table.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_serializer


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class BookPayload(BaseModel):
    """
    Body of POST /books and PUT /books/{id}.

    Both fields are required and must be non-empty strings. Unknown fields
    are ignored. A PUT replaces both fields; there is no partial update.
    """
    title: str = Field(min_length=1, description="Book title (non-empty)")
    author: str = Field(min_length=1, description="Book author (non-empty)")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class BookResponse(BaseModel):
    """Full representation of a stored book."""
    id: int = Field(description="Server-assigned identifier")
    title: str
    author: str
    created_at: datetime = Field(description="Insert time (RFC3339)")
    updated_at: datetime = Field(description="Last update time (RFC3339)")

    model_config = {"from_attributes": True}

    @field_serializer("created_at", "updated_at")
    def serialize_timestamp(self, value: datetime) -> str:
        # Some drivers hand back naive values; the column stores UTC.
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()


class ErrorResponse(BaseModel):
    """
    Error envelope shared by every non-2xx response.

    Example:
        {"error": "title and author are required"}
    """
    error: str = Field(description="Human-readable error message")


class HealthResponse(BaseModel):
    """Returned by GET /health for probes and load balancers."""
    status: str = Field(description="healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="connected or disconnected")
