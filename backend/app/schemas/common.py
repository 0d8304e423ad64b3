"""
Common API Response Schemas

Standardized error and message responses for consistent API behavior.
"""
from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


# ============================================================================
# Error Response Models
# ============================================================================

class ErrorResponse(BaseModel):
    """
    Standardized error response for all API errors.

    Error Codes:
        - VALIDATION_ERROR: Required fields missing or request validation failed (400/422)
        - OUT_OF_RANGE: Step position outside the routing (400)
        - INVALID_REFERENCE: Routing, step, process or category not found (404)
        - UNRESOLVED_CATEGORY: Category name matches no category (422)
        - DATABASE_ERROR: Database operation failed (500)
        - INTERNAL_ERROR: Unexpected internal error (500)

    Example:
        {
            "error": "INVALID_REFERENCE",
            "message": "Process with ID 6f1c... not found",
            "details": {
                "resource": "Process",
                "resource_id": "6f1c..."
            },
            "timestamp": "2025-12-23T10:30:00Z"
        }
    """
    error: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(
        None,
        description="Additional error context for debugging"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the error occurred (UTC)"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "error": "VALIDATION_ERROR",
                "message": "Missing required fields: description, category",
                "details": {
                    "missing_fields": ["description", "category"]
                },
                "timestamp": "2025-12-23T10:30:00Z"
            }
        }


class StatusResponse(BaseModel):
    """
    Status response for health checks and similar endpoints.
    """
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="Status check timestamp (UTC)"
    )


# Shared `responses=` mapping for routes that raise domain errors
ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Validation or range error"},
    404: {"model": ErrorResponse, "description": "Referenced id not found"},
    422: {"model": ErrorResponse, "description": "Unresolved category or invalid request"},
}
