"""Business affairs FastAPI application - read-only view of the context store."""
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import Settings, get_settings
from ..context_store import ContextStore
from ..dates import utcnow
from .routers import dashboard, deadlines, issues, projects

logger = logging.getLogger("affairs-core.api")


def create_app(store: Optional[ContextStore] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the API around a context store.

    Args:
        store: Store to serve; a new empty store is created when omitted
        settings: Settings to use; defaults to the cached environment settings

    Returns:
        Configured FastAPI app with the store on ``app.state.store``
    """
    settings = settings or get_settings()
    if store is None:
        store = ContextStore(activity_limit=settings.activity_log_limit)

    app = FastAPI(
        title=f"{settings.service_name} API",
        description="Projects, deadlines, issues and activity tracked by the business affairs MCP server",
        version=settings.version,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.store = store
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(dashboard.router, prefix="/api")
    app.include_router(projects.router, prefix="/api/projects")
    app.include_router(deadlines.router, prefix="/api")
    app.include_router(issues.router, prefix="/api")

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "timestamp": utcnow().isoformat(),
            "service": settings.service_name,
            "version": settings.version,
        }

    logger.info(f"Configured {settings.service_name} API (environment: {settings.environment})")
    return app
