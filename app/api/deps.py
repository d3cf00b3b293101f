"""Request-scoped dependencies reading the objects create_app stores on app.state."""

from fastapi import Request

from app.core.config import Settings
from app.core.exceptions import AuthenticationError
from app.core.tokens import TokenCodec
from app.schemas.auth import CurrentUser


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.token_codec


def get_current_user(request: Request) -> CurrentUser:
    """Identity attached by the token middleware. Raises 401 if none is attached."""
    user = getattr(request.state, "user", None)
    if user is None:
        raise AuthenticationError("Not authenticated")
    return user
