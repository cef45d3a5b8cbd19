"""Custom exception hierarchy for SiteCraft."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Project errors
    PROJECT_NOT_FOUND = "PROJECT_NOT_FOUND"

    # Version errors
    VERSION_NOT_FOUND = "VERSION_NOT_FOUND"

    # Credit errors
    INSUFFICIENT_CREDITS = "INSUFFICIENT_CREDITS"

    # Generation errors
    GENERATION_FAILED = "GENERATION_FAILED"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Auth & rate limiting
    UNAUTHORIZED = "UNAUTHORIZED"
    RATE_LIMITED = "RATE_LIMITED"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class SiteCraftException(Exception):
    """
    Base exception for all SiteCraft errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for JSON response.

        Returns:
            Dictionary with error, message, and details fields
        """
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class ProjectNotFoundError(SiteCraftException):
    """Project does not exist or is not owned by the caller."""

    def __init__(self, project_id: str):
        super().__init__(
            f"Project not found: {project_id}",
            ErrorCode.PROJECT_NOT_FOUND,
            status_code=404,
            details={"project_id": project_id}
        )


class VersionNotFoundError(SiteCraftException):
    """Version does not exist within the given project."""

    def __init__(self, version_id: str):
        super().__init__(
            f"Version not found: {version_id}",
            ErrorCode.VERSION_NOT_FOUND,
            status_code=404,
            details={"version_id": version_id}
        )


class ValidationError(SiteCraftException):
    """Validation failed for user input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class InsufficientCreditsError(SiteCraftException):
    """Balance is below the cost of the requested operation. Nothing was debited."""

    def __init__(self, user_id: str, required: int):
        super().__init__(
            "Insufficient credits",
            ErrorCode.INSUFFICIENT_CREDITS,
            status_code=403,
            details={"required": required}
        )
        self.user_id = user_id
        self.required = required


class GenerationFailedError(SiteCraftException):
    """Mandatory code generation produced nothing usable. The debit was refunded."""

    def __init__(self, message: str = "Unable to generate website changes. Please try again."):
        super().__init__(
            message,
            ErrorCode.GENERATION_FAILED,
            status_code=502,
        )


class AuthenticationError(SiteCraftException):
    """Request lacks valid authentication credentials."""

    def __init__(self, message: str = "Invalid or missing authentication token"):
        super().__init__(
            message,
            ErrorCode.UNAUTHORIZED,
            status_code=401,
        )


class InternalError(SiteCraftException):
    """Unexpected persistence or logic fault. Detail stays in the server log."""

    def __init__(self, message: str = "Internal Server Error"):
        super().__init__(
            message,
            ErrorCode.INTERNAL_ERROR,
            status_code=500,
        )
