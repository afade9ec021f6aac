"""Domain error taxonomy. Each class maps to one HTTP status in app.main."""


class AppError(Exception):
    """Base exception for all application errors."""

    status_code = 500


class ValidationError(AppError):
    """Raised when input is malformed or violates a business rule."""

    status_code = 400


class AuthenticationError(AppError):
    """Raised when the caller cannot be authenticated."""

    status_code = 401


class NotFoundError(AppError):
    """Raised when a referenced entity does not exist."""

    status_code = 404


class ConflictError(AppError):
    """Raised when a uniqueness constraint would be violated."""

    status_code = 409
