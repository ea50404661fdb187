"""API routers package."""

from suggestion_lifecycle.api.routers.suggestions import router as suggestions_router

__all__ = [
    "suggestions_router",
]
