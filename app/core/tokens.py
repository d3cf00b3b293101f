"""
Signed credential codec: issue, verify and renew access/refresh JWTs.

Access tokens carry an ``exp`` claim; refresh tokens do not and stay valid
until the stored copy on the user row is rotated. Every token also carries
``iat``, a unique ``jti`` and a ``kind`` claim, so two tokens issued from the
same payload never compare equal.
"""

import logging
import uuid
from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Any, NamedTuple

import jwt

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

# Claims set by the codec itself; stripped from input payloads before signing.
RESERVED_CLAIMS = frozenset({"exp", "iat", "jti", "kind"})


class TokenKind(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


class TokenPair(NamedTuple):
    access_token: str
    refresh_token: str


class TokenCodecError(Exception):
    """Raised when a token cannot be issued from the given arguments."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class PayloadMissingError(TokenCodecError):
    def __init__(self) -> None:
        super().__init__("payload is not specified")


class PayloadInvalidTypeError(TokenCodecError):
    def __init__(self) -> None:
        super().__init__("payload must be a mapping of claims")


class KindMissingError(TokenCodecError):
    def __init__(self) -> None:
        super().__init__("token kind is not specified")


class KindInvalidTypeError(TokenCodecError):
    def __init__(self) -> None:
        super().__init__("token kind must be a string")


class KindInvalidValueError(TokenCodecError):
    def __init__(self, kind: str) -> None:
        super().__init__(
            f"token kind must be {TokenKind.ACCESS.value!r} or {TokenKind.REFRESH.value!r}, got {kind!r}"
        )


class TokenCodec:
    """Issues and verifies HMAC-signed JWTs with a shared secret."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        access_token_ttl: timedelta = timedelta(minutes=60),
    ) -> None:
        self._secret = secret
        self.algorithm = algorithm
        self.access_token_ttl = access_token_ttl

    @classmethod
    def from_settings(cls, settings: "Settings") -> "TokenCodec":
        return cls(
            secret=settings.JWT_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
            access_token_ttl=timedelta(minutes=settings.JWT_ACCESS_EXPIRE_MINUTES),
        )

    def issue(self, payload: Mapping[str, Any] | None, kind: TokenKind | str | None) -> str:
        """
        Sign ``payload`` as an access or refresh token.

        Raises a TokenCodecError subclass when the payload is missing or not a
        mapping, or when kind is missing, not a string, or not a known kind.
        """
        if payload is None:
            raise PayloadMissingError()
        if kind is None or kind == "":
            raise KindMissingError()
        if not isinstance(payload, Mapping):
            raise PayloadInvalidTypeError()
        if not isinstance(kind, str):
            raise KindInvalidTypeError()
        try:
            token_kind = TokenKind(kind)
        except ValueError:
            raise KindInvalidValueError(kind) from None

        now = datetime.now(UTC)
        claims: dict[str, Any] = {
            k: v for k, v in payload.items() if k not in RESERVED_CLAIMS
        }
        claims["iat"] = now
        claims["jti"] = uuid.uuid4().hex
        claims["kind"] = token_kind.value
        if token_kind is TokenKind.ACCESS:
            claims["exp"] = now + self.access_token_ttl
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def verify(self, token: str | None, kind: TokenKind | str | None = None) -> dict[str, Any] | None:
        """
        Decode ``token`` and return its claims, or None if it is missing,
        malformed, expired, badly signed, or not of the requested kind.
        An unknown ``kind`` matches no token. Never raises.
        """
        if not token or not token.strip():
            return None
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except jwt.PyJWTError as e:
            logger.debug("Token rejected: %s", e)
            return None
        if not claims:
            return None
        # TokenKind is a str enum, so members and their plain values compare equal
        if kind is not None and claims.get("kind") != kind:
            return None
        return claims

    def renew_pair(self, refresh_payload: Mapping[str, Any] | None) -> TokenPair:
        """Issue a fresh access/refresh pair from the same payload."""
        if refresh_payload is None:
            raise PayloadMissingError()
        refresh_token = self.issue(refresh_payload, TokenKind.REFRESH)
        access_token = self.issue(refresh_payload, TokenKind.ACCESS)
        return TokenPair(access_token=access_token, refresh_token=refresh_token)
