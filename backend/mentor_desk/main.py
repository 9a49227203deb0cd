"""Mentor Desk FastAPI application."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .core.config import settings
from .db.base import close_all, init_databases
from .observability.langsmith import initialize_langsmith
from .api import agent, drafts, engagement, mentor, messages, students

logger = logging.getLogger(__name__)

APP_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context for startup and shutdown events."""
    # Startup
    logging.basicConfig(level=settings.LOG_LEVEL)
    logger.info(f"{settings.APP_NAME} starting up...")
    initialize_langsmith(settings)
    await init_databases()
    yield
    # Shutdown
    logger.info(f"{settings.APP_NAME} shutting down...")
    await close_all()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.APP_NAME,
        description="Mentor-in-the-loop assistant: AI drafts, mentor review",
        version=APP_VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=settings.cors_allow_headers_list,
    )

    # Include routers
    app.include_router(agent.router, prefix=settings.API_V1_PREFIX)
    app.include_router(drafts.router, prefix=settings.API_V1_PREFIX)
    app.include_router(messages.router, prefix=settings.API_V1_PREFIX)
    app.include_router(mentor.router, prefix=settings.API_V1_PREFIX)
    app.include_router(students.router, prefix=settings.API_V1_PREFIX)
    app.include_router(engagement.router, prefix=settings.API_V1_PREFIX)

    # Health check
    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "app": settings.APP_NAME}

    # Root endpoint
    @app.get("/")
    async def root():
        return {
            "app": settings.APP_NAME,
            "version": APP_VERSION,
            "docs": "/docs",
            "health": "/health"
        }

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "error": str(exc) if settings.DEBUG else "An error occurred"
            }
        )

    return app


# Create the app instance
app = create_app()
