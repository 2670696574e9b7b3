"""
Domain Exceptions

Services raise these; the FastAPI app turns them into JSON error responses
with the matching HTTP status (see ``caffio.main``).
"""


class CaffioError(Exception):
    """Base class for all errors surfaced to API clients."""

    status_code: int = 500
    error: str = "InternalError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        """Convert to the error response body."""
        return {
            "success": False,
            "error": self.error,
            "detail": self.message,
        }


class NotFoundError(CaffioError):
    """Referenced entity is absent (customer, cafe, menu item, order)."""
    status_code = 404
    error = "NotFound"


class ConflictError(CaffioError):
    """Duplicate unique key, e.g. an email that is already registered."""
    status_code = 409
    error = "Conflict"


class UnauthorizedError(CaffioError):
    """Bad credentials on login."""
    status_code = 401
    error = "Unauthorized"


class InvalidArgumentError(CaffioError):
    """Malformed input such as an unknown order status."""
    status_code = 400
    error = "InvalidArgument"


class UpstreamFailureError(CaffioError):
    """Payment processor or geocoding call failed."""
    status_code = 502
    error = "UpstreamFailure"
