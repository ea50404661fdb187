"""Dependency injection for FastAPI."""

from fastapi import Request

from suggestion_lifecycle.app_context import AppContext


def get_app_context(request: Request) -> AppContext:
    """Provide the AppContext created by the application lifespan."""
    return request.app.state.context
