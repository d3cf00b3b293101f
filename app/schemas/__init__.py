"""Pydantic request/response schemas."""

from app.schemas.auth import AuthenticateRequest, CurrentUser, TokenPairResponse
from app.schemas.health import HealthcheckResponse, HealthResponse
from app.schemas.system import SeedResponse
from app.schemas.users import (
    ResultResponse,
    UserCreate,
    UserDetail,
    UserDetailResponse,
    UserPublic,
    UserResponse,
    UsersPage,
    UserUpdate,
)

__all__ = [
    "AuthenticateRequest",
    "CurrentUser",
    "HealthResponse",
    "HealthcheckResponse",
    "ResultResponse",
    "SeedResponse",
    "TokenPairResponse",
    "UserCreate",
    "UserDetail",
    "UserDetailResponse",
    "UserPublic",
    "UserResponse",
    "UsersPage",
    "UserUpdate",
]
