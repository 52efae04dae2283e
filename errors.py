"""Application error types carrying an HTTP status and a user-facing message."""


class AppError(Exception):
    """Base error rendered by the centralized error page handler."""
    status_code = 500
    default_message = "Something went wrong!"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class BadRequest(AppError):
    """Malformed or invalid input."""
    status_code = 400
    default_message = "Bad request"


class Unauthorized(AppError):
    """Bad credentials."""
    status_code = 401
    default_message = "Invalid username or password"


class NotFound(AppError):
    """Missing resource or route."""
    status_code = 404
    default_message = "Page Not Found!"


class ValidationError(BadRequest):
    """Data-layer schema violation."""

    def __init__(self, detail: str):
        super().__init__(f"Validation Error: {detail}")


class CastError(BadRequest):
    """Identifier that cannot be converted to the stored id type."""
    default_message = "Invalid ID format"


class RedirectRequired(Exception):
    """Soft denial: the request is answered with a redirect instead of an error page."""

    def __init__(self, location: str):
        self.location = location
        super().__init__(location)
