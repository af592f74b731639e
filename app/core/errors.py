from typing import Iterable


class AppError(Exception):
    """Base class for errors that are reported to the client as-is."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, errors: Iterable | None = None):
        self.message = message or self.default_message
        # list of (field, message) pairs
        self.errors = list(errors or [])
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"success": False, "message": self.message}
        if self.errors:
            body["errors"] = [
                {"field": field, "message": message} for field, message in self.errors
            ]
        return body


class ValidationError(AppError):
    status_code = 400
    default_message = "Validation error"


class AuthError(AppError):
    status_code = 401
    default_message = "Access denied."


class ForbiddenError(AppError):
    status_code = 403
    default_message = "Access denied. Insufficient permissions."


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class ConflictError(AppError):
    status_code = 400
    default_message = "Duplicate field value"


class FileRejected(AppError):
    status_code = 400
    default_message = "File upload error"


class RejectedFileType(FileRejected):
    default_message = "File type not allowed"


class RejectedFileSize(FileRejected):
    default_message = "File too large"


class StorageFailure(AppError):
    status_code = 500
    default_message = "Failed to upload file to cloud storage"


class InternalError(AppError):
    status_code = 500
