"""
Token middleware: resolves the request identity from x-access-token, renewing
it from x-refresh-token when the access token is missing or no longer valid.

Outcomes per request:
- valid access token: identity attached, request continues;
- invalid access token on a public path: request continues without identity;
- no refresh token: 401 "Refresh token not found";
- refresh token invalid, unknown user, or not the last one issued: 401
  "Invalid refresh token";
- valid refresh token: identity attached and request continues; once the
  response is ready a new pair is issued and stored and returned in response
  headers. Redirects and unhandled errors leave the stored token unrotated.
  Losing a concurrent rotation of the same token yields 401 "Invalid refresh
  token".
"""

import logging
from collections.abc import Iterable

from fastapi import Request, status
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError
from sqlalchemy.orm import Session, sessionmaker
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from app.core.tokens import TokenCodec, TokenKind, TokenPair
from app.schemas.auth import CurrentUser
from app.services.users import check_refresh_token, rotate_refresh_token

logger = logging.getLogger(__name__)

ACCESS_TOKEN_HEADER = "x-access-token"
REFRESH_TOKEN_HEADER = "x-refresh-token"
EXPOSED_TOKEN_HEADERS = f"{ACCESS_TOKEN_HEADER}, {REFRESH_TOKEN_HEADER}"

REFRESH_TOKEN_NOT_FOUND = "Refresh token not found"
INVALID_REFRESH_TOKEN = "Invalid refresh token"


def _unauthorized(message: str) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"error": message})


class TokenAuthMiddleware(BaseHTTPMiddleware):
    """Attach ``request.state.user`` (a CurrentUser or None) to every request."""

    def __init__(
        self,
        app: ASGIApp,
        codec: TokenCodec,
        session_factory: sessionmaker[Session],
        public_paths: Iterable[str],
        reuse_detection: bool = True,
    ) -> None:
        super().__init__(app)
        self.codec = codec
        self.session_factory = session_factory
        self.public_paths = frozenset(public_paths)
        self.reuse_detection = reuse_detection

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        access_token = request.headers.get(ACCESS_TOKEN_HEADER, "")
        refresh_token = request.headers.get(REFRESH_TOKEN_HEADER, "")
        request.state.user = None

        identity = self._identity_from_access_token(access_token)
        if identity is not None:
            request.state.user = identity
            return await call_next(request)

        if request.url.path in self.public_paths:
            return await call_next(request)

        if not refresh_token:
            return _unauthorized(REFRESH_TOKEN_NOT_FOUND)

        refresh_payload = self.codec.verify(refresh_token, TokenKind.REFRESH)
        if not refresh_payload:
            return _unauthorized(INVALID_REFRESH_TOKEN)

        identity = await run_in_threadpool(self._check_refresh, refresh_token, refresh_payload)
        if identity is None:
            return _unauthorized(INVALID_REFRESH_TOKEN)

        request.state.user = identity
        # An unhandled error propagates before rotation, leaving the submitted
        # refresh token valid for a retry.
        response = await call_next(request)
        # Clients re-send the same headers when following a redirect.
        if 300 <= response.status_code < 400:
            return response

        pair = await run_in_threadpool(self._rotate, refresh_token, refresh_payload)
        if pair is None:
            return _unauthorized(INVALID_REFRESH_TOKEN)
        response.headers["Access-Control-Expose-Headers"] = EXPOSED_TOKEN_HEADERS
        response.headers[ACCESS_TOKEN_HEADER] = pair.access_token
        response.headers[REFRESH_TOKEN_HEADER] = pair.refresh_token
        return response

    def _identity_from_access_token(self, token: str) -> CurrentUser | None:
        payload = self.codec.verify(token, TokenKind.ACCESS)
        if not payload or not payload.get("username"):
            return None
        try:
            return CurrentUser.model_validate(payload)
        except ValidationError:
            logger.info("Access token accepted by signature but payload is malformed")
            return None

    def _check_refresh(self, refresh_token: str, refresh_payload: dict) -> CurrentUser | None:
        with self.session_factory() as db:
            payload = check_refresh_token(
                db, refresh_token, refresh_payload, reuse_detection=self.reuse_detection
            )
        if payload is None:
            return None
        return CurrentUser.model_validate(payload)

    def _rotate(self, refresh_token: str, refresh_payload: dict) -> TokenPair | None:
        with self.session_factory() as db:
            rotated = rotate_refresh_token(
                db,
                self.codec,
                refresh_token,
                refresh_payload,
                reuse_detection=self.reuse_detection,
            )
        return rotated[1] if rotated is not None else None
