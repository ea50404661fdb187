"""Repository protocol definitions (interfaces)."""

from suggestion_lifecycle.repositories.protocols.cache_repo import SuggestionCacheRepository

__all__ = [
    "SuggestionCacheRepository",
]
