"""Application exceptions and the JSON error envelope."""

from typing import Any

from fastapi import HTTPException, status


def error_envelope(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Body of every error response: {"success": false, "error": {...}}."""
    return {
        "success": False,
        "error": {"code": code, "message": message, "details": details or {}},
    }


class AppException(HTTPException):
    """Base application exception.

    Subclasses fix the HTTP status and error code; callers supply the
    message and optional details.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(
            status_code=type(self).status_code,
            detail=error_envelope(self.code, self.message, self.details),
        )


class InternalError(AppException):
    """Unexpected failure."""


class ValidationError(AppException):
    """A value failed validation; also raised for a bad cell in an imported row."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "VALIDATION_ERROR"
    default_message = "Validation error"


class UploadError(AppException):
    """Upload rejected before decoding (missing file, extension, size)."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "UPLOAD_FAILED"
    default_message = "Upload failed"


class DecodeError(AppException):
    """Uploaded file is unreadable or not a spreadsheet."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "IMPORT_DECODE_FAILED"
    default_message = "Failed to read spreadsheet"


class EmptyImportError(AppException):
    """Spreadsheet was readable but held no valid data rows."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "IMPORT_NO_VALID_ROWS"
    default_message = "No valid data rows found in the spreadsheet"


class ConflictError(AppException):
    """Resource conflicts with an existing one."""

    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    default_message = "Conflict"


class NotFoundError(AppException):
    """Resource not found."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource", identifier: str | None = None):
        details = {"identifier": identifier} if identifier else None
        super().__init__(f"{resource} not found", details)
