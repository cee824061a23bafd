"""Main FastAPI application."""
import asyncio
import json
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from oomf.settings import settings
from oomf.api.compliments import router as compliments_router
from oomf.api.notifications import router as notifications_router
from oomf.api.realtime import router as realtime_router
from oomf.api.secret_admirer import router as secret_admirer_router
from oomf.api.streaks import router as streaks_router
from oomf.api.tokens import router as tokens_router
from oomf.domain.common.errors import (
    AuthorizationError,
    ConflictError,
    DomainError,
    InsufficientTokensError,
    NotFoundError,
    RateLimitedError,
    ValidationError,
)
from oomf.infra.db.base import Base, dispose_engine, get_engine
# Import all models to ensure they're registered with Base
from oomf.infra.db import models  # noqa: F401
from oomf.infra.messaging.redis_bus import redis_bus

# Configure logging
logging.basicConfig(
    level=getattr(logging, str(settings.log_level).upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    try:
        async with get_engine().begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except Exception as e:
        # Database might not be ready yet; migrations own the schema in production
        logger.warning("Could not connect to database during startup: %s", e)

    try:
        await redis_bus.connect()
    except Exception as e:
        logger.warning("Could not connect to Redis during startup: %s", e)

    yield

    # Shutdown
    try:
        await redis_bus.disconnect()
        await dispose_engine()
    except asyncio.CancelledError:
        logger.info("Lifespan shutdown cancelled (e.g. Ctrl+C); cleanup attempted.")
        raise


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=settings.cors_origin_regex,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"],
    allow_headers=["*"],
    expose_headers=["*"],
    max_age=3600,
)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all requests and responses."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        logger.info("[SERVER REQUEST] %s %s", request.method, request.url.path)
        logger.debug("   Query params: %s", dict(request.query_params))

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            "[SERVER RESPONSE] %s %s - %s (%.3fs)",
            request.method,
            request.url.path,
            response.status_code,
            process_time,
        )
        return response


# Add logging middleware AFTER CORS (CORS must be first)
app.add_middleware(LoggingMiddleware)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors with detailed logging."""
    errors = exc.errors()
    logger.error("[VALIDATION ERROR] %s %s", request.method, request.url.path)
    for i, error in enumerate(errors, 1):
        logger.error("   Error %s: %s", i, json.dumps(error, default=str))
    return JSONResponse(status_code=422, content={"detail": errors})


# Domain error handlers: map domain exceptions to HTTP status codes.
# Subclasses of ConflictError (already revealed, out of guesses, hint order)
# resolve to 409 through the MRO.
_DOMAIN_STATUS = {
    NotFoundError: 404,
    AuthorizationError: 403,
    ValidationError: 422,
    InsufficientTokensError: 402,
    RateLimitedError: 429,
    ConflictError: 409,
}


def _domain_error_response(exc: DomainError, status_code: int) -> JSONResponse:
    headers = None
    if isinstance(exc, RateLimitedError) and exc.retry_after:
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.code},
        headers=headers,
    )


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    for error_type in type(exc).__mro__:
        status_code = _DOMAIN_STATUS.get(error_type)
        if status_code is not None:
            break
    else:
        status_code = 400
    if status_code >= 409:
        logger.info("[DOMAIN ERROR] %s %s -> %s %s", request.method, request.url.path, status_code, exc.code)
    return _domain_error_response(exc, status_code)


# Health check (root and under /v1 so GET /v1/health works behind a /v1 proxy)
@app.get("/health")
@app.get(f"{settings.api_v1_prefix}/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "version": settings.app_version}


# API v1 routes
app.include_router(compliments_router, prefix=settings.api_v1_prefix)
app.include_router(tokens_router, prefix=settings.api_v1_prefix)
app.include_router(secret_admirer_router, prefix=settings.api_v1_prefix)
app.include_router(streaks_router, prefix=settings.api_v1_prefix)
app.include_router(notifications_router, prefix=settings.api_v1_prefix)
app.include_router(realtime_router, prefix=settings.api_v1_prefix)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("oomf.main:app", host="0.0.0.0", port=8000, reload=True)
