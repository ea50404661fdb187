"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from suggestion_lifecycle.app_context import AppContext
from suggestion_lifecycle.config.settings import get_settings
from suggestion_lifecycle.config.logging_config import setup_logging
from suggestion_lifecycle.repositories.sqlalchemy.database import init_db
from suggestion_lifecycle.api.routers import suggestions_router
from suggestion_lifecycle.core.exceptions import (
    AppError,
    NetworkError,
    UnknownStatusError,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup (a context installed beforehand, e.g. by tests, is kept)
    setup_logging()
    owns_context = getattr(app.state, "context", None) is None
    if owns_context:
        init_db()
        app.state.context = AppContext()
    yield
    # Shutdown
    if owns_context:
        await app.state.context.aclose()
        app.state.context = None


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Contribution suggestion lifecycle for Brazilian equity portfolios",
    version=settings.app_version,
    lifespan=lifespan,
)

app.include_router(suggestions_router)


def _status_code_for(exc: AppError) -> int:
    if isinstance(exc, NetworkError):
        return 502
    if isinstance(exc, UnknownStatusError):
        return 409
    return 400


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Global handler for application errors."""
    return JSONResponse(
        status_code=_status_code_for(exc),
        content={"error": exc.code, "message": exc.message},
    )


@app.get("/health")
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
