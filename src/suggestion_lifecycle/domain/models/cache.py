"""Cache model for the last known suggestion state of a portfolio."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from suggestion_lifecycle.domain.models.suggestion import PendingTransaction, SuggestionStatus


@dataclass
class SuggestionSnapshot:
    """
    Last fetched status and pending contribution transactions of a portfolio.

    IMPORTANT: Written through after every successful fetch; never edited in place.
    """

    portfolio_id: str
    status: Optional[SuggestionStatus] = None
    pending: list[PendingTransaction] = field(default_factory=list)
    cached_at: Optional[datetime] = None

    @property
    def pending_count(self) -> int:
        return len(self.pending)

    @property
    def is_usable(self) -> bool:
        """An empty pending list is never trusted, so generation still gets a chance."""
        return self.status is not None and self.pending_count > 0
