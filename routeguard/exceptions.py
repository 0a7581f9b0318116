"""Custom exception hierarchy for routeguard."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Configuration errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Lookup errors
    USER_NOT_FOUND = "USER_NOT_FOUND"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Auth
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class RightsException(Exception):
    """
    Base exception for all routeguard errors.

    Carries a human-readable message, a machine-readable error code,
    the HTTP status to answer with and optional details.
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
        """Convert exception to dictionary for JSON response."""
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class ConfigurationError(RightsException):
    """A settings value, route table or menu definition is unusable."""

    def __init__(self, message: str, source: Optional[str] = None):
        details = {"source": source} if source else {}
        super().__init__(
            message,
            ErrorCode.CONFIGURATION_ERROR,
            status_code=500,
            details=details
        )


class UserNotFoundError(RightsException):
    """User not found in database."""

    def __init__(self, user_id: str):
        super().__init__(
            f"User not found: {user_id}",
            ErrorCode.USER_NOT_FOUND,
            status_code=404,
            details={"user_id": user_id}
        )


class ValidationError(RightsException):
    """Validation failed for caller input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class AuthenticationError(RightsException):
    """Request lacks an authenticated principal."""

    def __init__(self, message: str = "Invalid or missing authentication token"):
        super().__init__(
            message,
            ErrorCode.UNAUTHORIZED,
            status_code=401,
        )


class ForbiddenError(RightsException):
    """Authenticated principal is not allowed on the requested route."""

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        path: Optional[str] = None,
        method: Optional[str] = None,
    ):
        details = {}
        if path:
            details["path"] = path
        if method:
            details["method"] = method
        super().__init__(
            message,
            ErrorCode.FORBIDDEN,
            status_code=403,
            details=details,
        )
