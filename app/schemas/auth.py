"""Request/response schemas for authentication and the request identity."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AuthenticateRequest(BaseModel):
    """Credentials for login."""

    model_config = ConfigDict(extra="forbid")

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class TokenPairResponse(BaseModel):
    """Access and refresh tokens returned after successful login."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    result: str = "ok"
    access_token: str = Field(..., description="Signed access token (send as x-access-token)")
    refresh_token: str = Field(..., description="Signed refresh token (send as x-refresh-token)")


class CurrentUser(BaseModel):
    """Identity decoded from a credential payload and attached to the request."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    user_id: str
    username: str = Field(..., min_length=1)
    role: str
    firstname: str | None = None
    lastname: str | None = None
