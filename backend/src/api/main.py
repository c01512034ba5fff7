"""FastAPI application entry point."""
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.sessions import SessionMiddleware

from api.routers import auth, folders, health, me, mnemonics, tokens
from core.config import Settings, get_settings
from core.logging_config import configure_logging
from core.rate_limit_config import RateLimitExceededError
from core.redis import RedisClient, get_redis_client, set_redis_client
from db.session import create_engine, create_session_factory
from services.exceptions import ServiceError

logger = logging.getLogger(__name__)

SESSION_COOKIE = "mnemonics_session"
SESSION_MAX_AGE = 30 * 24 * 60 * 60


def _error(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


def _validation_message(exc: RequestValidationError) -> str:
    """Render the first validation error as 'field: message'."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    ctx_error = first.get("ctx", {}).get("error")
    message = str(ctx_error) if ctx_error is not None else first.get("msg", "Invalid value")
    return f"{field}: {message}" if field else message


def register_exception_handlers(app: FastAPI) -> None:
    """Translate errors into the {"success": false, "error": ...} envelope."""

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:  # noqa: ARG001
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,  # noqa: ARG001
    ) -> JSONResponse:
        return _error(400, _validation_message(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException,  # noqa: ARG001
    ) -> JSONResponse:
        return _error(exc.status_code, str(exc.detail), headers=exc.headers)

    @app.exception_handler(RateLimitExceededError)
    async def rate_limit_handler(
        request: Request, exc: RateLimitExceededError,  # noqa: ARG001
    ) -> JSONResponse:
        result = exc.result
        return _error(
            429,
            "Rate limit exceeded. Please try again later.",
            headers={
                "Retry-After": str(result.retry_after),
                "X-RateLimit-Limit": str(result.limit),
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-Reset": str(result.reset),
            },
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "unhandled_error",
            extra={"method": request.method, "path": request.url.path},
            exc_info=exc,
        )
        return _error(500, "Internal server error")


class RateLimitHeadersMiddleware(BaseHTTPMiddleware):
    """Copy the rate limit result stored by the auth dependency onto the response."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        response = await call_next(request)
        info = getattr(request.state, "rate_limit_info", None)
        if info:
            response.headers["X-RateLimit-Limit"] = str(info["limit"])
            response.headers["X-RateLimit-Remaining"] = str(info["remaining"])
            response.headers["X-RateLimit-Reset"] = str(info["reset"])
        return response


def create_app(settings: Settings | None = None, engine: AsyncEngine | None = None) -> FastAPI:
    """
    Build the application.

    The database engine and session factory are created here, once, and held
    on `app.state`. Redis is connected in the lifespan and is optional.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    engine = engine or create_engine(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:  # noqa: ARG001
        redis_client = RedisClient(settings.redis_url, enabled=settings.redis_enabled)
        await redis_client.connect()
        set_redis_client(redis_client)
        try:
            yield
        finally:
            if get_redis_client() is redis_client:
                set_redis_client(None)
            await redis_client.close()
            await engine.dispose()

    app = FastAPI(
        title="Mnemonics API",
        description="Folders of named shell-command mnemonics for the web portal and CLI.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    # Added last = outermost; sessions must wrap everything that reads them
    app.add_middleware(RateLimitHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=SESSION_COOKIE,
        max_age=SESSION_MAX_AGE,
        same_site="lax",
        https_only=not settings.dev_mode,
    )

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(me.router)
    app.include_router(tokens.router)
    app.include_router(folders.router)
    app.include_router(mnemonics.router)
    return app
