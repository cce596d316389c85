"""
Custom exceptions for FileKid.

All exceptions inherit from FileKidError and carry an HTTP status code and
error details, so the web layer can map them to responses without
inspecting the storage layer.
"""

from typing import Any


class FileKidError(Exception):
    """Base exception for all FileKid errors."""

    status_code: int = 500
    error_code: str = "GENERIC_ERROR"
    message: str = "An internal error occurred"

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
        status_code: int | None = None,
        error_code: str | None = None,
    ) -> None:
        self.message = message or self.message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API response."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(FileKidError):
    """Raised when a configuration file or server path descriptor is invalid."""

    status_code = 500
    error_code = "CONFIGURATION_ERROR"
    message = "Invalid configuration"


# =============================================================================
# Request Errors
# =============================================================================


class NotFoundError(FileKidError):
    """Raised when a file, directory or server path is not found."""

    status_code = 404
    error_code = "NOT_FOUND"
    message = "Resource not found"


class NotAuthorizedError(FileKidError):
    """Raised when a path resolves outside of its server path root."""

    status_code = 403
    error_code = "NOT_AUTHORIZED"
    message = "Path is outside of base path"

    def __init__(self, key: str, reason: str | None = None) -> None:
        details: dict[str, Any] = {"key": key}
        if reason:
            details["reason"] = reason
        super().__init__(
            message=f"Path '{key}' is outside of base path",
            details=details,
        )


class BadRequestError(FileKidError):
    """Raised when an operation is used against the wrong kind of path."""

    status_code = 400
    error_code = "BAD_REQUEST"
    message = "Bad request"


class InvalidFileTypeError(BadRequestError):
    """Raised when a file type can't be handled."""

    error_code = "INVALID_FILE_TYPE"
    message = "Invalid file type"


# =============================================================================
# Storage Errors
# =============================================================================


class StorageIOError(FileKidError):
    """Raised when an underlying filesystem operation fails."""

    status_code = 500
    error_code = "IO_ERROR"
    message = "Storage operation failed"


class InternalServerError(FileKidError):
    """Raised on an unexpected internal inconsistency."""

    status_code = 500
    error_code = "INTERNAL_SERVER_ERROR"
    message = "Internal server error"
