"""Suggestion cache repository protocol."""

from typing import Protocol, Optional

from suggestion_lifecycle.domain.models import SuggestionSnapshot


class SuggestionCacheRepository(Protocol):
    """Interface for the per-portfolio suggestion cache (write-through, no TTL)."""

    def get(self, portfolio_id: str) -> Optional[SuggestionSnapshot]:
        """Get the cached snapshot for a portfolio."""
        ...

    def set(self, snapshot: SuggestionSnapshot) -> SuggestionSnapshot:
        """Insert or replace the snapshot for its portfolio."""
        ...

    def remove(self, portfolio_id: str) -> None:
        """Drop the cached snapshot for a portfolio (no-op when absent)."""
        ...
