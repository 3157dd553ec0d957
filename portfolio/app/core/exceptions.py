"""
Error taxonomy shared by the stores and the HTTP layer.

Stores raise ValidationError / NotFoundError / StorageError; route handlers
translate them into APIError, which the app renders as
{"message": ..., "error": ...}.
"""
from fastapi import status


class PortfolioError(Exception):
    """Base class for store-level failures."""

    def __init__(self, message: str, detail: str | None = None) -> None:
        self.message = message
        self.detail = detail
        super().__init__(message)


class ValidationError(PortfolioError):
    """Malformed or missing input, or a rejected upload."""


class NotFoundError(PortfolioError):
    """The operation targets an id that does not exist."""


class StorageError(PortfolioError):
    """Underlying I/O or serialization failure."""


class APIError(Exception):
    """Error returned to the client with a status code and a human-readable message.

    Args:
        message: Message shown to the client.
        status_code: HTTP status code to return.
        error: Underlying error text; dropped from the response in production.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error: str | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.error = error
        super().__init__(message)


def error_body(message: str, error: str | None, is_production: bool) -> dict:
    """Build the JSON error body; error detail is only exposed outside production."""
    body = {"message": message}
    if error and not is_production:
        body["error"] = error
    return body
