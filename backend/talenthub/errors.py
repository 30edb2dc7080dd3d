"""Application error types and how each one is rendered as a JSON response."""

from fastapi import status


class AppError(Exception):
    """Base class for errors that map directly onto an HTTP response."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"status": "error", "message": self.message}


class ValidationFailed(AppError):
    """Client input failed validation; carries per-field details."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"

    def __init__(self, errors: list[dict]):
        super().__init__()
        self.errors = errors

    def to_dict(self) -> dict:
        return {"status": "error", "errors": self.errors}


class DuplicateKeyError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Record with this email already exists"


class AuthFailure(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class UnexpectedError(AppError):
    pass
