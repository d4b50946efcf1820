"""Error page schemas for consistent error handling."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ErrorType(str, Enum):
    """Categories of errors a visitor can run into."""

    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"
    METHOD_NOT_ALLOWED = "method_not_allowed"
    INTERNAL_ERROR = "internal_error"


class ErrorPage(BaseModel):
    """Everything the error template needs, and nothing from the catalog or favorites."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error_type": "bad_request",
                "title": "400 Bad Request - The Best Goats",
                "message": "Invalid id parameter",
                "status_code": 400,
                "timestamp": "2025-11-03T10:30:00Z",
                "request_id": "0b6f7f3e-6a55-4c36-9a3b-2d3c1b8e8f10",
                "path": "/add-favorite",
            }
        }
    )

    error_type: ErrorType = Field(..., description="Category of error")
    title: str = Field(..., description="Document title shown in the browser tab")
    message: str = Field(..., description="Human-readable error message")
    status_code: int = Field(..., description="HTTP status code")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="When the error occurred"
    )
    request_id: str | None = Field(None, description="Unique request identifier for tracking")
    path: str | None = Field(None, description="Request path that caused the error")
    show_favorites: bool = Field(
        False, description="Error pages never show the favorites counter"
    )
