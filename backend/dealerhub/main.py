"""Main module of the FastAPI application.

This module sets up the FastAPI application and the middleware to log incoming requests
and unhandled exceptions.
"""

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from dealerhub.api.v1.api import api_router
from dealerhub.core.config import settings
from dealerhub.core.exceptions import (
    DealerHubException,
    DuplicateKeyException,
    InsufficientPermissionsException,
    InvalidStateError,
    NotFoundException,
    OrganizationRequiredException,
    UnauthenticatedException,
    UpstreamUnavailableException,
)
from dealerhub.core.logging import logger
from dealerhub.core.redis_client import redis_client

EXCEPTION_STATUS_CODES = {
    UnauthenticatedException: 401,
    OrganizationRequiredException: 403,
    InsufficientPermissionsException: 403,
    DuplicateKeyException: 400,
    NotFoundException: 404,
    InvalidStateError: 400,
    UpstreamUnavailableException: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Close shared connections on shutdown."""
    logger.info(f"{settings.PROJECT_NAME} starting")
    yield
    await redis_client.close()
    logger.info(f"{settings.PROJECT_NAME} stopped")


app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)


def _error_response(status_code: int, error: str, detail, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "detail": detail},
        headers=headers,
    )


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Attach a request id to the request state and the response headers."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(DealerHubException)
async def dealerhub_exception_handler(request: Request, exc: DealerHubException) -> JSONResponse:
    """Map service exceptions to their HTTP status."""
    status_code = next(
        (code for cls, code in EXCEPTION_STATUS_CODES.items() if isinstance(exc, cls)), 500
    )
    request_id = getattr(request.state, "request_id", None)
    if status_code >= 500:
        logger.with_context(request_id=request_id).error(
            f"{exc.code} on {request.method} {request.url.path}: {exc.message}"
        )
    else:
        logger.with_context(request_id=request_id).info(
            f"{exc.code} on {request.method} {request.url.path}: {exc.message}"
        )
    return _error_response(status_code, exc.code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report request validation failures as 400 with field details."""
    errors = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]
    return _error_response(400, "ValidationError", errors)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors raised by endpoints in the shared error shape."""
    error = "BadRequest" if exc.status_code == 400 else "HTTPError"
    return _error_response(exc.status_code, error, exc.detail, getattr(exc, "headers", None))


@app.exception_handler(OperationalError)
async def database_unavailable_handler(request: Request, exc: OperationalError) -> JSONResponse:
    """Report an unreachable database as 503."""
    logger.error(f"Database unavailable on {request.method} {request.url.path}: {exc}")
    return _error_response(503, UpstreamUnavailableException.code, "Database unavailable")


@app.get("/health")
async def health() -> dict:
    """Liveness check with the Redis connection state."""
    return {"status": "ok", "redis": await redis_client.ping()}


app.include_router(api_router, prefix=settings.API_V1_STR)
