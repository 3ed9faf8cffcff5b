"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.tracker.config import settings
from src.tracker.exceptions import ApiError, UnknownError, ValidationError
from src.tracker.features.auth import router as auth_router
from src.tracker.features.profile import router as profile_router
from src.tracker.middleware.security import SecurityHeadersMiddleware
from src.tracker.services.auth import TokenIssuer, resolve_signing_secret

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle (startup and shutdown)."""
    # Startup fails here in production when JWT_SECRET is missing
    app.state.token_issuer = TokenIssuer(
        secret=resolve_signing_secret(settings),
        leeway=settings.jwt_leeway_seconds,
    )
    logger.info(
        "Token issuer initialized",
        extra={"environment": settings.environment, "secret_configured": bool(settings.jwt_secret)},
    )

    yield

    app.state.token_issuer = None


app = FastAPI(
    title="Sports Tracking API",
    description="Authentication and user profiles for the sports tracking app",
    version="0.1.0",
    debug=settings.debug,
    lifespan=lifespan,
)

origins = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]
logger.info(f"Origins : {origins}")

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=["Content-Type", "Authorization"],
)


def _error_response(error: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content={"message": error.message, "error": error.code},
        headers=error.headers,
    )


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Render taxonomy errors as ``{message, error}``."""
    return _error_response(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request parsing failures as 400 ``ValidationError``."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(
            part for part in first.get("loc", ()) if isinstance(part, str) and part != "body"
        )
        detail = str(first.get("msg", "")).removeprefix("Value error, ")
        message = f"{field}: {detail}" if field else detail
    else:
        message = None
    logger.info(f"Request validation failed: {message}", extra={"path": request.url.path})
    return _error_response(ValidationError(message))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework HTTP errors (404, 405, ...) in the same JSON shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: log the failure and return a generic 500 without internals."""
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}: {exc}",
        exc_info=True,
        extra={"error_type": "unhandled_exception"},
    )
    return _error_response(UnknownError())


app.include_router(auth_router)
app.include_router(profile_router)


class MessageResponse(BaseModel):
    """Root banner response."""

    message: str


class HealthCheckResponse(BaseModel):
    """Health check response."""

    status: str


@app.get("/", response_model=MessageResponse)
async def root() -> MessageResponse:
    """Root banner."""
    return MessageResponse(message="Sports Tracking API is running!")


@app.get("/health", response_model=HealthCheckResponse, status_code=status.HTTP_200_OK)
async def health_check() -> HealthCheckResponse:
    """Health check endpoint."""
    return HealthCheckResponse(status="healthy")
