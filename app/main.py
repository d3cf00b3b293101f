"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.api.middleware import (
    EXPOSED_TOKEN_HEADERS,
    TokenAuthMiddleware,
    access_log_middleware,
    api_error_handler,
    error_handler_middleware,
    request_validation_error_handler,
)
from app.api.v1 import router as v1_router
from app.core.config import Settings, get_settings
from app.core.database import create_db_engine, create_session_factory
from app.core.exceptions import ApiError
from app.core.log_config import configure_logging
from app.core.tokens import TokenCodec
from app.models import Base
from app.schemas.health import HealthcheckResponse

logger = logging.getLogger(__name__)

ALLOWED_METHODS = ["GET", "HEAD", "PATCH", "POST", "DELETE"]
DOCS_PATHS = ("/docs", "/docs/oauth2-redirect", "/redoc", "/openapi.json")


def public_paths(settings: Settings) -> list[str]:
    """Paths served without credentials when the access token is missing or invalid."""
    prefix = settings.API_V1_PREFIX
    return [
        "/healthcheck",
        f"{prefix}/users/authenticate",
        f"{prefix}/system/seed-data",
        f"{prefix}/health",
        f"{prefix}/health/",
        *DOCS_PATHS,
    ]


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application around an explicit Settings object."""
    settings = settings or get_settings()
    configure_logging(settings)

    engine = create_db_engine(settings)
    session_factory = create_session_factory(engine)
    token_codec = TokenCodec.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        env = settings.APP_ENV.upper()
        if settings.DB_CREATE_TABLES:
            Base.metadata.create_all(engine)
            logger.info("[%s] Database tables ensured", env)
        logger.info(
            "[%s] Database: %s", env, engine.url.render_as_string(hide_password=True)
        )
        logger.info(
            "[%s] Server at http://%s:%s (health check: /healthcheck)",
            env,
            settings.SERVER_HOST,
            settings.SERVER_PORT,
        )
        logger.info("[%s] Whitelisted origin(s): %s", env, ", ".join(settings.cors_origins) or "-")
        logger.info("[%s] Whitelisted HTTP method(s): %s", env, ",".join(ALLOWED_METHODS))
        yield
        engine.dispose()

    app = FastAPI(
        title="User API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.token_codec = token_codec

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)

    # Added innermost first: auth, error conversion, access log, CORS.
    app.add_middleware(
        TokenAuthMiddleware,
        codec=token_codec,
        session_factory=session_factory,
        public_paths=public_paths(settings),
        reuse_detection=settings.REFRESH_TOKEN_REUSE_DETECTION,
    )
    app.middleware("http")(error_handler_middleware)
    app.middleware("http")(access_log_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=ALLOWED_METHODS,
        allow_headers=["*"],
        expose_headers=[h.strip() for h in EXPOSED_TOKEN_HEADERS.split(",")],
    )

    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    @app.get("/healthcheck", response_model=HealthcheckResponse)
    def healthcheck() -> HealthcheckResponse:
        """Liveness probe for service discovery; always unauthenticated."""
        return HealthcheckResponse()

    return app


app = create_app()
