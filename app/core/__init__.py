"""Core app configuration, database and credential handling."""

from app.core.config import Settings, get_settings
from app.core.database import create_db_engine, create_session_factory, get_db
from app.core.tokens import TokenCodec, TokenKind, TokenPair

__all__ = [
    "Settings",
    "TokenCodec",
    "TokenKind",
    "TokenPair",
    "create_db_engine",
    "create_session_factory",
    "get_db",
    "get_settings",
]
