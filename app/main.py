"""Viral Cut - FastAPI Application Entry Point.

Includes:
- Rate limiting on job-initiating endpoints
- Request ID tracking
- Request logging
- Error sanitization
- Delayed artifact cleanup that survives the request
"""

from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings, configure_logging, logger
from app.core import clipper
from app.core.artifacts import ArtifactStore
from app.core.gemini import HighlightClient
from app.core.security import RATE_LIMITED_PATHS, RateLimiter
from app.core.transcription import TranscriptionClient
from app.core.workflow import PipelineServices
from app.middleware import (
    ErrorSanitizationMiddleware,
    RateLimitMiddleware,
    RequestIDMiddleware,
    RequestLoggingMiddleware,
)
from app.routers import downloads, processing
from app.version import __version__
from app.schemas import HealthResponse, ReadinessResponse

REQUIRED_TOOLS = ("yt-dlp", "ffmpeg")


def build_services(settings: Settings) -> PipelineServices:
    """Construct the pipeline collaborators from settings."""
    return PipelineServices(
        settings=settings,
        artifacts=ArtifactStore(settings.artifacts_dir),
        transcriber=TranscriptionClient(settings),
        highlighter=HighlightClient(settings),
    )


# -----------------------------------------------------------------------------
# Application Lifespan
# -----------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    logger.info("Starting Viral Cut v%s", __version__)
    yield
    await app.state.services.artifacts.shutdown()
    logger.info("Shutting down Viral Cut")


# -----------------------------------------------------------------------------
# Application Factory
# -----------------------------------------------------------------------------

def create_app(
    settings: Optional[Settings] = None,
    services: Optional[PipelineServices] = None,
    rate_limiter: Optional[RateLimiter] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or (services.settings if services else Settings.from_env())
    configure_logging(settings)

    app = FastAPI(
        title="Viral Cut",
        version=__version__,
        lifespan=lifespan,
        # Disable docs in production
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.services = services or build_services(settings)
    app.state.rate_limiter = rate_limiter or RateLimiter(
        limit=settings.rate_limit_requests,
        window=settings.rate_limit_window_seconds,
        trusted_proxy_hops=settings.trusted_proxy_hops,
    )

    # -------------------------------------------------------------------------
    # Middleware Stack (last added = outermost)
    # -------------------------------------------------------------------------

    # Rate limiting (innermost, only /process and /analyze)
    app.add_middleware(
        RateLimitMiddleware,
        limiter=app.state.rate_limiter,
        paths=RATE_LIMITED_PATHS,
    )

    # Request logging
    app.add_middleware(
        RequestLoggingMiddleware,
        exclude_paths={"/health", "/ready"},
    )

    # Request ID injection
    app.add_middleware(RequestIDMiddleware)

    # Error sanitization (catches anything the routes did not handle)
    app.add_middleware(ErrorSanitizationMiddleware)

    # Trusted hosts (prevents host header attacks)
    if settings.allowed_hosts and settings.allowed_hosts != ["*"]:
        app.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=settings.allowed_hosts,
        )

    # CORS (outermost for preflight handling)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-ID"],
        expose_headers=[
            "X-Request-ID",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "X-RateLimit-Reset",
            "Content-Disposition",
        ],
        max_age=600,  # Cache preflight for 10 minutes
    )

    # -------------------------------------------------------------------------
    # Exception Handlers
    # -------------------------------------------------------------------------

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors with clean messages."""
        errors = exc.errors()
        # Limit error details to prevent information leakage
        clean_errors = [
            {"field": ".".join(str(loc) for loc in err.get("loc", [])), "message": err.get("msg", "Invalid value")}
            for err in errors[:5]  # Limit to 5 errors
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid input", "errors": clean_errors},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions with consistent format."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    # -------------------------------------------------------------------------
    # Health Check Endpoints
    # -------------------------------------------------------------------------

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers and orchestrators."""
        return HealthResponse(status="healthy", version=__version__)

    @app.get("/ready", response_model=ReadinessResponse, tags=["Health"])
    async def readiness_check():
        """Readiness check - verifies the external tools are installed."""
        tools = {name: clipper.check_tool(name) for name in REQUIRED_TOOLS}
        body = ReadinessResponse(status="ready" if all(tools.values()) else "unavailable", tools=tools)
        if not all(tools.values()):
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content=body.model_dump(),
            )
        return body

    # -------------------------------------------------------------------------
    # Routers
    # -------------------------------------------------------------------------

    app.include_router(processing.router)
    app.include_router(downloads.router)

    return app


def run() -> None:
    settings = Settings.from_env()
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        # Bounded concurrency per worker
        limit_concurrency=100,
    )


if __name__ == "__main__":
    run()
