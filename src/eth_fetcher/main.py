"""FastAPI application factory and main entry point."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eth_fetcher import __version__
from eth_fetcher.api import api_router
from eth_fetcher.api.errors import log_requests, register_exception_handlers
from eth_fetcher.core.config import Settings, get_settings
from eth_fetcher.core.logging import configure_logging
from eth_fetcher.runtime import Runtime


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager for startup/shutdown events."""
    # Startup
    settings: Settings = app.state.settings
    runtime: Runtime | None = getattr(app.state, "runtime", None)
    if runtime is None:
        configure_logging(settings)
        runtime = await Runtime.build(settings)
        app.state.runtime = runtime
    await runtime.start()

    yield

    # Shutdown
    await runtime.shutdown()


def create_app(settings: Settings | None = None, runtime: Runtime | None = None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        settings: Settings to use (default: environment)
        runtime: Pre-built runtime; built from settings at startup when None
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        description="Ethereum transaction lookup and PersonInfo contract API",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    if runtime is not None:
        app.state.runtime = runtime

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(log_requests)
    register_exception_handlers(app)

    # Register routes
    register_routes(app, settings)

    return app


def register_routes(app: FastAPI, settings: Settings) -> None:
    """Register all application routes."""
    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health", tags=["System"])
    async def health_check():
        """Liveness plus background ingestion state."""
        ingestor = app.state.runtime.ingestor
        return {
            "status": "healthy",
            "version": __version__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "ingestor": ingestor.get_status() if ingestor else {"state": "disabled"},
        }


# Create application instance
app = create_app()
