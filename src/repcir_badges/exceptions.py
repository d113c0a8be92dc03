"""
Custom exceptions for the Repcir badge engine.

This module defines a hierarchy of exceptions used across the engine. Each
exception includes:
- A descriptive message
- An error code for API responses
- HTTP status code mapping
- Optional details for debugging

Only the featured-slot limit is raised to direct callers of the award
service; evaluation faults are logged and absorbed.
"""

from typing import Any, Dict, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for consistent API error responses."""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    UNAUTHORIZED = "UNAUTHORIZED"

    # Badge errors
    BADGE_NOT_FOUND = "BADGE_NOT_FOUND"
    USER_BADGE_NOT_FOUND = "USER_BADGE_NOT_FOUND"
    BADGE_ALREADY_EARNED = "BADGE_ALREADY_EARNED"
    FEATURED_BADGE_LIMIT = "FEATURED_BADGE_LIMIT"

    # Data/Database errors
    DATABASE_ERROR = "DATABASE_ERROR"


class BadgeEngineError(Exception):
    """
    Base exception for all badge engine errors.

    Attributes:
        message: Human-readable error message
        code: Error code from ErrorCode enum
        status_code: HTTP status code for API responses
        details: Optional dictionary with additional error details
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API response."""
        result: Dict[str, Any] = {
            "error": {
                "code": self.code.value,
                "message": self.message,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


# ============================================================================
# Validation Errors (400)
# ============================================================================

class ValidationError(BadgeEngineError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=error_details,
        )


# ============================================================================
# Not Found Errors (404)
# ============================================================================

class NotFoundError(BadgeEngineError):
    """Raised when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        message = f"{resource_type} with ID '{resource_id}' not found"
        error_details = details or {}
        error_details["resource_type"] = resource_type
        error_details["resource_id"] = resource_id
        super().__init__(
            message=message,
            code=ErrorCode.NOT_FOUND,
            status_code=404,
            details=error_details,
        )


class BadgeNotFoundError(NotFoundError):
    """Raised when a badge definition is not found."""

    def __init__(self, badge_id: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            resource_type="Badge",
            resource_id=badge_id,
            details=details,
        )
        self.code = ErrorCode.BADGE_NOT_FOUND


class UserBadgeNotFoundError(NotFoundError):
    """Raised when a user has not earned the requested badge."""

    def __init__(
        self,
        user_id: str,
        badge_id: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        error_details["user_id"] = user_id
        super().__init__(
            resource_type="Earned badge",
            resource_id=badge_id,
            details=error_details,
        )
        self.code = ErrorCode.USER_BADGE_NOT_FOUND


# ============================================================================
# Conflict Errors (409)
# ============================================================================

class ConflictError(BadgeEngineError):
    """Raised when there's a conflict with existing data."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.CONFLICT,
            status_code=409,
            details=details,
        )


class BadgeAlreadyEarnedError(ConflictError):
    """Raised by storage when the (user, badge) unique constraint rejects an insert."""

    def __init__(self, user_id: str, badge_id: str) -> None:
        super().__init__(
            message=f"Badge '{badge_id}' already earned by user '{user_id}'",
            details={"user_id": user_id, "badge_id": badge_id},
        )
        self.code = ErrorCode.BADGE_ALREADY_EARNED


class FeaturedBadgeLimitError(ConflictError):
    """Raised when featuring a badge would exceed the featured-slot cap."""

    def __init__(self, limit: int, details: Optional[Dict[str, Any]] = None) -> None:
        error_details = details or {}
        error_details["limit"] = limit
        super().__init__(
            message=f"Maximum of {limit} featured badges allowed",
            details=error_details,
        )
        self.code = ErrorCode.FEATURED_BADGE_LIMIT


# ============================================================================
# Database Errors (500)
# ============================================================================

class DatabaseError(BadgeEngineError):
    """Raised when a database operation fails."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if operation:
            error_details["operation"] = operation
        super().__init__(
            message=message,
            code=ErrorCode.DATABASE_ERROR,
            status_code=500,
            details=error_details,
        )
