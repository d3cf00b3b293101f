"""ORM model for application users (auth and profile)."""

import uuid

from sqlalchemy import Column, DateTime, String, Text, Uuid, func

from app.models.base import Base


class User(Base):
    """
    User account for token authentication.

    refresh_token holds the last refresh token issued to this user; it is
    overwritten on every login and every token renewal.
    """

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    firstname = Column(String(255), nullable=False)
    lastname = Column(String(255), nullable=True)
    role = Column(String(32), nullable=False, default="user")
    refresh_token = Column(Text, nullable=False, default="")
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
