"""Request/response schemas for the user resource."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)


class UserCreate(BaseModel):
    """Body for POST /users/."""

    model_config = ConfigDict(extra="forbid")

    firstname: str = Field(..., min_length=1, max_length=255)
    lastname: str | None = Field(default=None, max_length=255)
    username: str = Field(..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN)
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    role: str = Field(..., min_length=1, max_length=32)


class UserUpdate(BaseModel):
    """Body for PATCH /users/{idOrUsername}; only the keys sent are applied."""

    model_config = ConfigDict(extra="forbid")

    firstname: str = Field(default=None, min_length=1, max_length=255)
    lastname: str | None = Field(default=None, max_length=255)
    username: str = Field(default=None, min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN)
    password: str = Field(default=None, min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    role: str = Field(default=None, min_length=1, max_length=32)


class UserPublic(BaseModel):
    """Projected user fields (no password or token)."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: UUID
    firstname: str
    lastname: str | None = None
    username: str
    role: str


class UserDetail(UserPublic):
    """Projection plus timestamps, returned after writes."""

    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserResponse(BaseModel):
    result: str = "ok"
    user: UserPublic


class UserDetailResponse(BaseModel):
    result: str = "ok"
    user: UserDetail


class ResultResponse(BaseModel):
    result: str = "ok"


class UsersPage(BaseModel):
    """Paginated user list; field names follow the mongoose-paginate response shape."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    result: str = "ok"
    docs: list[UserPublic]
    total_docs: int = Field(..., ge=0)
    limit: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=1)
    paging_counter: int = Field(..., ge=1)
    has_prev_page: bool
    has_next_page: bool
    prev_page: int | None = None
    next_page: int | None = None
