"""Main FastAPI application for careerboard."""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional
from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException

from careerboard import __version__
from careerboard.config import Settings, settings as default_settings
from careerboard.core.errors import (
    CareerBoardError,
    DuplicateApplicationError,
    InvalidTransitionError,
    JobNotEligibleError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from careerboard.utils.logging import configure_logging, get_logger
from careerboard.api.routes import all_routers
from careerboard.api.models import ErrorResponse
from careerboard.services import Services, create_services

# Configure logging
configure_logging()
logger = get_logger(__name__)

ERROR_STATUS_CODES = {
    ValidationError: 422,
    NotFoundError: 404,
    UnauthorizedError: 403,
    JobNotEligibleError: 409,
    DuplicateApplicationError: 409,
    InvalidTransitionError: 409,
}


def status_code_for(exc: CareerBoardError) -> int:
    """HTTP status for a domain failure; 400 for unmapped subclasses."""
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return 400


def error_response(status_code: int, error: str, message: str, details: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(ErrorResponse(
            error=error,
            message=message,
            details=details,
            timestamp=datetime.now(timezone.utc)
        ))
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info(
        "Starting careerboard API",
        store=type(app.state.services.store).__name__,
        version=__version__
    )

    yield

    # Shutdown
    logger.info("Shutting down careerboard API")


def create_app(services: Optional[Services] = None, config: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or (services.config if services else default_settings)

    app = FastAPI(
        title="careerboard API",
        description="Job board: listings, applications and recommendations",
        version=__version__,
        docs_url="/docs" if config.debug else None,
        redoc_url="/redoc" if config.debug else None,
        lifespan=lifespan
    )
    app.state.services = services or create_services(config=config)

    # Add middleware
    setup_middleware(app, config)

    # Add exception handlers
    setup_exception_handlers(app, config)

    # Include routers
    for router in all_routers:
        app.include_router(router, prefix="/api/v1")

    # Add root endpoint
    @app.get("/")
    async def root():
        return {
            "name": "careerboard API",
            "version": __version__,
            "status": "running",
            "docs": "/docs" if config.debug else "disabled"
        }

    return app


def setup_middleware(app: FastAPI, config: Settings) -> None:
    """Setup application middleware."""

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # Trusted host middleware
    if config.allowed_hosts:
        app.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=config.allowed_hosts
        )

    # Request logging middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = asyncio.get_running_loop().time()

        logger.info(
            "Request started",
            method=request.method,
            url=str(request.url),
            client_ip=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent")
        )

        try:
            response = await call_next(request)

            duration = asyncio.get_running_loop().time() - start_time
            logger.info(
                "Request completed",
                method=request.method,
                url=str(request.url),
                status_code=response.status_code,
                duration_seconds=duration
            )

            return response

        except Exception as e:
            duration = asyncio.get_running_loop().time() - start_time
            logger.error(
                "Request failed",
                method=request.method,
                url=str(request.url),
                error=str(e),
                duration_seconds=duration
            )
            raise


def setup_exception_handlers(app: FastAPI, config: Settings) -> None:
    """Setup global exception handlers."""

    @app.exception_handler(CareerBoardError)
    async def domain_exception_handler(request: Request, exc: CareerBoardError):
        status_code = status_code_for(exc)
        logger.warning(
            "Domain error",
            error_code=exc.code,
            status_code=status_code,
            message=str(exc),
            url=str(request.url)
        )

        return error_response(status_code, exc.code, str(exc), exc.details() or None)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(
            "Validation error",
            errors=exc.errors(),
            url=str(request.url)
        )

        return error_response(
            422,
            ValidationError.code,
            "Request validation failed",
            {"validation_errors": jsonable_encoder(exc.errors())}
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.warning(
            "HTTP exception",
            status_code=exc.status_code,
            detail=exc.detail,
            url=str(request.url)
        )

        return error_response(exc.status_code, "http_error", str(exc.detail))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception",
            error=str(exc),
            error_type=type(exc).__name__,
            url=str(request.url)
        )

        return error_response(
            500,
            "internal_error",
            "An unexpected error occurred",
            {"error_type": type(exc).__name__} if config.debug else None
        )


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "careerboard.api.main:app",
        host=default_settings.api_host,
        port=default_settings.api_port,
        reload=default_settings.reload,
        log_config=None  # Use our custom logging
    )
