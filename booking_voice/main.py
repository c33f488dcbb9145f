"""
Booking Voice - Main Application Entry Point

Voice agent integration for the booking platform: organizations connect
their Bolna account, provision voice agents and place outbound calls whose
status is reconciled from Bolna webhooks and status pulls.
"""

from contextlib import asynccontextmanager
from typing import Callable, Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from booking_voice import __version__
from booking_voice.core.config import Settings, get_settings
from booking_voice.core.encryption import CredentialVault
from booking_voice.core.logging import setup_logging, get_logger
from booking_voice.core.exceptions import VoiceServiceException, AuthenticationError
from booking_voice.db.repository import DatabaseRepository, VoiceRepository
from booking_voice.services.bolna.client import BolnaClient, BolnaClientFactory
from booking_voice.api.routes import api_key, agents, calls, webhooks, health

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler for startup and shutdown events
    """
    settings: Settings = app.state.settings

    # Startup
    logger.info("=" * 60)
    logger.info("Starting Booking Voice")
    logger.info(f"Version: {__version__}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Bolna API: {settings.bolna_api_base_url}")
    logger.info(f"Database Type: {settings.database_type}")
    logger.info("=" * 60)

    owns_repository = getattr(app.state, "repository", None) is None
    if owns_repository:
        repository = DatabaseRepository.create_repository(settings)
        if await repository.initialize():
            logger.info(f"Database ({settings.database_type}) initialized successfully")
        else:
            logger.error("Database initialization failed; /ready will report unavailable")
        app.state.repository = repository

    app.state.vault = CredentialVault.from_settings(settings)

    logger.info("All services initialized successfully")

    yield

    # Shutdown
    logger.info("Shutting down Booking Voice")
    if owns_repository:
        await app.state.repository.close()
        logger.info("Database connection closed")
    logger.info("Shutdown complete")


def _register_exception_handlers(app: FastAPI, settings: Settings) -> None:

    @app.exception_handler(AuthenticationError)
    async def auth_exception_handler(request: Request, exc: AuthenticationError):
        """Handle authentication errors"""
        logger.warning(f"AuthenticationError: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
            headers={"WWW-Authenticate": "Bearer"}
        )

    @app.exception_handler(VoiceServiceException)
    async def voice_service_exception_handler(request: Request, exc: VoiceServiceException):
        """Handle custom service exceptions"""
        logger.warning(f"VoiceServiceException: {exc.error_code} - {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict()
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed requests use the same envelope with status 400"""
        errors = exc.errors()
        message = "Invalid request"
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": message, "error": "VALIDATION_ERROR"}
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": str(exc.detail), "error": "HTTP_ERROR"},
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle all unhandled exceptions"""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": str(exc) if settings.debug else "An unexpected error occurred",
                "error": "INTERNAL_ERROR"
            }
        )


def create_app(
    settings: Optional[Settings] = None,
    bolna_client_factory: Optional[Callable[[str], BolnaClient]] = None,
    repository: Optional[VoiceRepository] = None
) -> FastAPI:
    """
    Build the FastAPI application

    Args:
        settings: Settings to use (defaults to the environment)
        bolna_client_factory: Builds a Bolna client from a plaintext key
        repository: Pre-initialized repository; when omitted one is created
            from settings and owned by the application lifespan
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="Booking Voice API",
        description="""
        ## Voice agents for bookings

        Connect a Bolna account, provision voice agents and place outbound
        calls. Call status is kept current from Bolna webhooks and status
        lookups.

        ### Authentication

        Include your organization token in requests using one of these methods:
        - Bearer Token: `Authorization: Bearer your-token`
        - Header: `X-API-Key: your-token`
        - Query Parameter: `?api_key=your-token`

        The Bolna webhook endpoint is unauthenticated.
        """,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json"
    )

    app.state.settings = settings
    app.state.bolna_client_factory = bolna_client_factory or BolnaClientFactory(settings)
    if repository is not None:
        app.state.repository = repository

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app, settings)

    # Include routers
    app.include_router(health.router)
    app.include_router(api_key.router, prefix="/api/v1")
    app.include_router(agents.router, prefix="/api/v1")
    app.include_router(calls.router, prefix="/api/v1")
    app.include_router(webhooks.router, prefix="/api/v1")

    @app.get("/api")
    async def api_info():
        """API information endpoint"""
        return {
            "service": "Booking Voice API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
            "endpoints": {
                "apiKey": "/api/v1/bolna/api-key",
                "agents": "/api/v1/bolna/agents",
                "calls": "/api/v1/bolna/calls",
                "webhook": "/api/v1/bolna/webhook"
            }
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "booking_voice.main:app",
        host=_settings.server_host,
        port=_settings.server_port,
        reload=_settings.debug
    )
