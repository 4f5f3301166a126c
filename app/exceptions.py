from typing import Any, Mapping, Optional


class ServiceError(Exception):
    """Base class for errors raised by the service layer.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context (field errors, validation info)
        code: optional machine-readable error code
        http_status: suggested HTTP status code for handlers
    """

    http_status = 500
    default_message = "Server error"

    def __init__(self, message: Optional[str] = None, details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"error": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


class ServiceValidationError(ServiceError):
    """Raised when input data is invalid or a precondition for a service call is not met."""

    http_status = 400
    default_message = "Invalid input"


class UnauthorizedError(ServiceError):
    """Raised when authentication fails (missing, invalid or expired credentials)."""

    http_status = 401
    default_message = "Unauthorized"


class ForbiddenError(ServiceError):
    """Raised when a caller is authenticated but not allowed to perform the action,
    or presents a QR token that does not grant access."""

    http_status = 403
    default_message = "Forbidden"


class NotFoundError(ServiceError):
    """Raised when a requested resource was not found."""

    http_status = 404
    default_message = "Not found"


class ConflictError(ServiceError):
    """Raised when a resource conflict occurs (e.g., duplicate slug)."""

    http_status = 409
    default_message = "Unique constraint failed"


class ConfigurationError(ServiceError):
    """Raised when a required server setting (secret, password hash) is missing."""

    http_status = 500
    default_message = "Server configuration error"
