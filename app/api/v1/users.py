"""User resource: login, create, list, read, update and delete."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_app_settings, get_current_user, get_token_codec
from app.core.config import Settings
from app.core.database import get_db
from app.core.exceptions import BadRequestError
from app.core.tokens import TokenCodec
from app.core.validation import validate_body
from app.schemas.auth import AuthenticateRequest, CurrentUser, TokenPairResponse
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
from app.services import users as users_service

router = APIRouter()


@router.post("/authenticate", response_model=TokenPairResponse)
def authenticate(
    body: Annotated[AuthenticateRequest, Depends(validate_body(AuthenticateRequest))],
    db: Annotated[Session, Depends(get_db)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
) -> TokenPairResponse:
    """
    Authenticate with username and password; returns an access and a refresh token.
    Send them on later requests as the x-access-token and x-refresh-token headers.
    """
    pair = users_service.authenticate(db, codec, body.username, body.password)
    return TokenPairResponse(access_token=pair.access_token, refresh_token=pair.refresh_token)


@router.post("/", response_model=UserDetailResponse)
def create_user(
    body: Annotated[UserCreate, Depends(validate_body(UserCreate))],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    _user: Annotated[CurrentUser, Depends(get_current_user)],
) -> UserDetailResponse:
    user = users_service.create_user(db, body, salt_rounds=settings.PASSWORD_SALT_ROUNDS)
    return UserDetailResponse(user=UserDetail.model_validate(user))


@router.get("/", response_model=UsersPage)
def list_users(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    page_num: Annotated[int, Query(alias="pageNum")] = 1,
) -> UsersPage:
    """List users newest first, USERS_PAGE_SIZE per page. pageNum=-1 returns every user."""
    if page_num < 1 and page_num != -1:
        raise BadRequestError(['"pageNum" must be a positive integer or -1'])
    return users_service.paginate_users(db, page_num, settings.USERS_PAGE_SIZE)


@router.get("/{id_or_username}", response_model=UserResponse)
def get_user(
    id_or_username: str,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[CurrentUser, Depends(get_current_user)],
) -> UserResponse:
    user = users_service.require_user(db, id_or_username)
    return UserResponse(user=UserPublic.model_validate(user))


@router.patch("/{id_or_username}", response_model=UserDetailResponse)
def update_user(
    id_or_username: str,
    body: Annotated[UserUpdate, Depends(validate_body(UserUpdate))],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    _user: Annotated[CurrentUser, Depends(get_current_user)],
) -> UserDetailResponse:
    """Partial update; only the fields sent are changed. A new password is re-hashed."""
    user = users_service.update_user(
        db, id_or_username, body, salt_rounds=settings.PASSWORD_SALT_ROUNDS
    )
    return UserDetailResponse(user=UserDetail.model_validate(user))


@router.delete("/{id_or_username}", response_model=ResultResponse)
def delete_user(
    id_or_username: str,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ResultResponse:
    users_service.delete_user(db, id_or_username)
    return ResultResponse()
