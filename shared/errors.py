"""
Shared error handling for the ReqRes Access Layer.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel

from shared.logging import request_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class AccessLayerException(Exception):
    """Base exception for Access Layer services."""

    status_code: int = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class ConfigurationError(AccessLayerException):
    """Invalid or missing configuration, raised at startup."""

    status_code = 500

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class ExternalServiceError(AccessLayerException):
    """External service errors."""

    status_code = 502

    def __init__(self, service: str, message: str = "External service error", details: Optional[Dict[str, Any]] = None):
        self.service = service
        super().__init__("EXTERNAL_SERVICE_ERROR", f"{service}: {message}", details)


class ExternalServiceTimeoutError(ExternalServiceError):
    """External service did not answer within the configured timeout."""

    status_code = 504

    def __init__(self, service: str, message: str = "Request timed out", details: Optional[Dict[str, Any]] = None):
        super().__init__(service, message, details)
        self.code = "EXTERNAL_SERVICE_TIMEOUT"


class UserNotFoundError(AccessLayerException):
    """The remote user directory has no user with the requested id."""

    status_code = 404

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(
            "USER_NOT_FOUND",
            f"User with ID {user_id} was not found.",
            {"user_id": user_id}
        )
