"""API error types; each maps to one HTTP status and renders as {"error": ...}."""

from fastapi import status


class ApiError(Exception):
    """Base error carrying the HTTP status and client-facing message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str | list[str]) -> None:
        self.message = message
        super().__init__(message if isinstance(message, str) else "; ".join(message))


class BadRequestError(ApiError):
    """Request failed validation; message is the list of violations."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, errors: list[str]) -> None:
        super().__init__(list(errors))


class AuthenticationError(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(ApiError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ApiError):
    status_code = status.HTTP_409_CONFLICT
