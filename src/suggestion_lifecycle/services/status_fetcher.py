"""Status fetcher: suggestion metadata for a portfolio."""

import logging

from suggestion_lifecycle.domain.models import SuggestionStatus
from suggestion_lifecycle.providers.suggestion_api import SuggestionApi

logger = logging.getLogger(__name__)


class StatusFetcher:
    """Read-only access to a portfolio's SuggestionStatus."""

    def __init__(self, api: SuggestionApi):
        self._api = api

    async def fetch(self, portfolio_id: str) -> SuggestionStatus:
        """
        Fetch the current suggestion status.

        Raises:
            NetworkError: the backend call failed; the caller must treat the
                status as unknown and hold any regeneration decision.
        """
        status = await self._api.get_status(portfolio_id)
        logger.debug(
            "Status for %s: last_generated=%s needs_regeneration=%s is_recent=%s "
            "cash=%s has_cash=%s pending_buy=%s",
            portfolio_id,
            status.last_suggestions_generated_at,
            status.needs_regeneration,
            status.is_recent,
            status.cash_balance,
            status.has_cash_available,
            status.has_pending_buy_suggestions,
        )
        return status
