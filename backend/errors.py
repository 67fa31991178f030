"""
errors.py — Application error taxonomy.
Every error carries the HTTP status it maps to and the message shown to the user.
"""


class AppError(Exception):
    status_code = 500
    default_message = "Internal server error."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid input data."


class AuthenticationError(AppError):
    status_code = 401
    default_message = "Invalid or expired token."


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found."


class ConflictError(AppError):
    status_code = 409
    default_message = "Resource already exists."


class NotImplementedTransition(AppError):
    status_code = 501
    default_message = "This transition is not implemented."


class UpstreamError(AppError):
    """Data Store or Identity Provider failure."""

    status_code = 500
    default_message = "Upstream service failure."
