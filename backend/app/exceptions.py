"""
FabQuote - Custom Exception Hierarchy

Provides structured, typed exceptions with error codes for consistent
error handling across the application.

Usage:
    from app.exceptions import InvalidReferenceError, ValidationError

    # In a service
    raise InvalidReferenceError("Process", process_id)

    # Missing fields at save time
    raise ValidationError(missing_fields=["name", "category"])
"""
from typing import Any, Dict, List, Optional


class FabQuoteException(Exception):
    """
    Base exception for all FabQuote errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code (e.g., "INVALID_REFERENCE")
        status_code: HTTP status code to return
        details: Additional context for debugging
    """

    error_code: str = "FABQUOTE_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API response."""
        result = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# ===================
# 400 Bad Request Errors
# ===================


class ValidationError(FabQuoteException):
    """Raised when required fields are missing or a field is not accepted."""

    error_code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        missing_fields: Optional[List[str]] = None,
        field: Optional[str] = None,
        value: Any = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        self.missing_fields = list(missing_fields or [])
        if self.missing_fields:
            details["missing_fields"] = self.missing_fields
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        if message is None:
            if self.missing_fields:
                message = f"Missing required fields: {', '.join(self.missing_fields)}"
            else:
                message = "Validation failed"
        super().__init__(message, details=details)


class OutOfRangeError(FabQuoteException):
    """Raised when a step position is outside the routing's step list."""

    error_code = "OUT_OF_RANGE"
    status_code = 400

    def __init__(
        self,
        index: int,
        *,
        lower: int = 0,
        upper: int,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        details["index"] = index
        details["lower"] = lower
        details["upper"] = upper
        self.index = index
        if upper < lower:
            message = f"Index {index} is out of range: routing has no steps"
        else:
            message = f"Index {index} is out of range [{lower}, {upper}]"
        super().__init__(message, details=details)


# ===================
# 404 Not Found Errors
# ===================


class InvalidReferenceError(FabQuoteException):
    """Raised when an id does not resolve to a routing, step, process or category."""

    error_code = "INVALID_REFERENCE"
    status_code = 404

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Any = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        details["resource"] = resource
        if resource_id is not None:
            details["resource_id"] = str(resource_id)
        self.resource = resource
        self.resource_id = resource_id
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(message, details=details)


# ===================
# 422 Unprocessable Entity Errors
# ===================


class UnresolvedCategoryError(FabQuoteException):
    """Raised when a category name does not match any known category."""

    error_code = "UNRESOLVED_CATEGORY"
    status_code = 422

    def __init__(
        self,
        name: str,
        *,
        category_type: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        details["category"] = name
        if category_type:
            details["category_type"] = category_type
        self.name = name
        message = f"Category '{name}' could not be resolved"
        if category_type:
            message = f"{category_type.capitalize()} category '{name}' could not be resolved"
        super().__init__(message, details=details)


# ===================
# 500 Internal Server Errors
# ===================


class DatabaseError(FabQuoteException):
    """Raised when a database operation fails."""

    error_code = "DATABASE_ERROR"
    status_code = 500

    def __init__(
        self,
        message: str = "Database operation failed",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)
