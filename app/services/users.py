"""User store operations: lookup, CRUD, login and refresh-token rotation."""

import logging
import math
import uuid
from typing import TYPE_CHECKING, Any

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import AuthenticationError, ConflictError, NotFoundError
from app.core.security import hash_password, verify_password
from app.core.tokens import TokenCodec, TokenKind, TokenPair
from app.models import User
from app.schemas.users import UserCreate, UserPublic, UsersPage, UserUpdate

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found"


def _parse_uuid(value: Any) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str):
        return None
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


def get_user_by_id(db: Session, user_id: Any) -> User | None:
    """Return the user with this id, or None (also for ids that are not UUIDs)."""
    parsed = _parse_uuid(user_id)
    if parsed is None:
        return None
    return db.get(User, parsed)


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()


def find_user(db: Session, id_or_username: str) -> User | None:
    """UUID-shaped keys are looked up by id; anything else by username."""
    parsed = _parse_uuid(id_or_username)
    if parsed is not None:
        return db.get(User, parsed)
    return get_user_by_username(db, id_or_username)


def require_user(db: Session, id_or_username: str) -> User:
    user = find_user(db, id_or_username)
    if user is None:
        raise NotFoundError(USER_NOT_FOUND)
    return user


def build_credential_payload(user: User) -> dict[str, Any]:
    """Claims embedded in the tokens issued for ``user``."""
    return {
        "userId": str(user.id),
        "role": user.role,
        "username": user.username,
        "firstname": user.firstname,
        "lastname": user.lastname,
    }


def authenticate(db: Session, codec: TokenCodec, username: str, password: str) -> TokenPair:
    """
    Check credentials and issue a new token pair; the refresh token is stored
    on the user row.

    Raises AuthenticationError for an unknown username or a wrong password.
    """
    user = get_user_by_username(db, username)
    if user is None:
        raise AuthenticationError("User does not exist")
    if not verify_password(password, user.password_hash):
        raise AuthenticationError("Failed to authenticate")

    payload = build_credential_payload(user)
    access_token = codec.issue(payload, TokenKind.ACCESS)
    refresh_token = codec.issue(payload, TokenKind.REFRESH)
    user.refresh_token = refresh_token
    db.commit()
    logger.info("User authenticated: user_id=%s", user.id)
    return TokenPair(access_token=access_token, refresh_token=refresh_token)


def _refresh_token_owner(
    db: Session, refresh_token: str, refresh_payload: dict[str, Any], reuse_detection: bool
) -> User | None:
    user = get_user_by_id(db, refresh_payload.get("userId"))
    if user is None:
        logger.info("Refresh rejected: user_id=%s not found", refresh_payload.get("userId"))
        return None
    if reuse_detection and user.refresh_token != refresh_token:
        logger.warning("Refresh rejected: stale or reused refresh token for user_id=%s", user.id)
        return None
    return user


def check_refresh_token(
    db: Session,
    refresh_token: str,
    refresh_payload: dict[str, Any],
    reuse_detection: bool = True,
) -> dict[str, Any] | None:
    """
    Current credential claims for the owner of a verified refresh token, or
    None when it would be rejected by rotate_refresh_token. Nothing is written.
    """
    user = _refresh_token_owner(db, refresh_token, refresh_payload, reuse_detection)
    if user is None:
        return None
    return build_credential_payload(user)


def rotate_refresh_token(
    db: Session,
    codec: TokenCodec,
    refresh_token: str,
    refresh_payload: dict[str, Any],
    reuse_detection: bool = True,
) -> tuple[dict[str, Any], TokenPair] | None:
    """
    Renew the token pair for the user named by a verified refresh payload.

    Claims are rebuilt from the current user row rather than copied from the
    old token. Returns (fresh payload, new pair), or None when the user no
    longer exists or, with reuse_detection, when ``refresh_token`` is not the
    one last issued to that user.

    With reuse_detection the new token is stored by a single conditional
    UPDATE on the old one, so of two concurrent rotations of the same token
    exactly one succeeds.
    """
    user = _refresh_token_owner(db, refresh_token, refresh_payload, reuse_detection)
    if user is None:
        return None
    user_id = user.id

    payload = build_credential_payload(user)
    pair = codec.renew_pair(payload)

    criteria = [User.id == user_id]
    if reuse_detection:
        criteria.append(User.refresh_token == refresh_token)
    result = db.execute(
        update(User)
        .where(*criteria)
        .values(refresh_token=pair.refresh_token)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    if result.rowcount != 1:
        logger.warning("Refresh rejected: token for user_id=%s rotated concurrently", user_id)
        return None
    logger.info("Tokens rotated: user_id=%s", user_id)
    return payload, pair


def _commit_or_conflict(db: Session, username: str) -> None:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError(f"Username '{username}' already exists") from e


def create_user(db: Session, data: UserCreate, salt_rounds: int) -> User:
    if get_user_by_username(db, data.username) is not None:
        raise ConflictError(f"Username '{data.username}' already exists")
    user = User(
        firstname=data.firstname,
        lastname=data.lastname,
        username=data.username,
        password_hash=hash_password(data.password, rounds=salt_rounds),
        role=data.role,
    )
    db.add(user)
    _commit_or_conflict(db, data.username)
    db.refresh(user)
    logger.info("User created: user_id=%s username=%s", user.id, user.username)
    return user


def update_user(db: Session, id_or_username: str, data: UserUpdate, salt_rounds: int) -> User:
    """Apply the fields present in ``data``; a new password is re-hashed."""
    user = require_user(db, id_or_username)
    changes = data.model_dump(exclude_unset=True)

    new_username = changes.get("username")
    if new_username is not None and new_username != user.username:
        if get_user_by_username(db, new_username) is not None:
            raise ConflictError(f"Username '{new_username}' already exists")

    password = changes.pop("password", None)
    if password:
        user.password_hash = hash_password(password, rounds=salt_rounds)
    for field, value in changes.items():
        setattr(user, field, value)

    _commit_or_conflict(db, new_username or user.username)
    db.refresh(user)
    logger.info("User updated: user_id=%s fields=%s", user.id, sorted(data.model_fields_set))
    return user


def delete_user(db: Session, id_or_username: str) -> None:
    user = require_user(db, id_or_username)
    user_id = user.id
    db.delete(user)
    db.commit()
    logger.info("User deleted: user_id=%s", user_id)


def paginate_users(db: Session, page_num: int, page_size: int) -> UsersPage:
    """
    Return one page of users, newest first.

    page_num -1 disables pagination and returns every user as a single page.
    """
    query = db.query(User).order_by(User.created_at.desc(), User.id)
    total = query.count()

    if page_num == -1:
        users = query.all()
        limit = total
        page = 1
        total_pages = 1
    else:
        limit = page_size
        page = page_num
        total_pages = max(1, math.ceil(total / limit))
        users = query.offset((page - 1) * limit).limit(limit).all()

    return UsersPage(
        docs=[UserPublic.model_validate(u) for u in users],
        total_docs=total,
        limit=limit,
        page=page,
        total_pages=total_pages,
        paging_counter=(page - 1) * limit + 1,
        has_prev_page=page > 1,
        has_next_page=page < total_pages,
        prev_page=page - 1 if page > 1 else None,
        next_page=page + 1 if page < total_pages else None,
    )


def seed_admin_user(db: Session, settings: "Settings") -> bool:
    """Create the configured admin account if missing; return True when created."""
    username = settings.SEED_ADMIN_USERNAME
    if get_user_by_username(db, username) is not None:
        logger.info("Seed skipped: user '%s' already exists", username)
        return False
    password = settings.SEED_ADMIN_PASSWORD.get_secret_value()
    user = User(
        username=username,
        password_hash=hash_password(password, rounds=settings.PASSWORD_SALT_ROUNDS),
        firstname=settings.SEED_ADMIN_FIRSTNAME,
        role="admin",
    )
    db.add(user)
    _commit_or_conflict(db, username)
    logger.info("Seeded admin user '%s'", username)
    return True
