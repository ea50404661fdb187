"""Regeneration trigger: creates contribution suggestions, at most one call in flight."""

import logging
from typing import Optional

from suggestion_lifecycle.domain.models import GenerationResult
from suggestion_lifecycle.providers.suggestion_api import SuggestionApi

logger = logging.getLogger(__name__)


class RegenerationTrigger:
    """
    Issues the create-contribution-suggestions call for a portfolio.

    A latch (set of portfolio ids with a call in flight) suppresses re-entrant
    triggers for the same portfolio; it is a guard, not a queue. Share one
    instance between controllers to extend the guard across views of the
    same portfolio within the process.
    """

    def __init__(
        self,
        api: SuggestionApi,
        settle_delay_ms: int = 500,
        empty_settle_delay_ms: int = 1000,
    ):
        self._api = api
        self._settle_delay_ms = settle_delay_ms
        self._empty_settle_delay_ms = empty_settle_delay_ms
        self._in_flight: set[str] = set()

    def is_in_flight(self, portfolio_id: str) -> bool:
        return portfolio_id in self._in_flight

    async def trigger(self, portfolio_id: str) -> Optional[GenerationResult]:
        """
        Create contribution suggestions once.

        Returns:
            The GenerationResult, or None when a call for this portfolio is
            already in flight (duplicate trigger suppressed).

        Raises:
            NetworkError: the create call failed. Not retried; the latch is
                released so a later cycle may try again.
        """
        if portfolio_id in self._in_flight:
            logger.info("Regeneration already in flight for %s, suppressing duplicate trigger", portfolio_id)
            return None

        self._in_flight.add(portfolio_id)
        try:
            logger.info("Creating contribution suggestions for %s", portfolio_id)
            result = await self._api.create_contribution_suggestions(portfolio_id)
        finally:
            self._in_flight.discard(portfolio_id)

        logger.info(
            "Created %d contribution suggestions for %s (generated=%s)",
            result.count,
            portfolio_id,
            result.suggestions_generated,
        )
        return result

    def settle_delay(self, result: GenerationResult) -> float:
        """
        Seconds to wait before re-reading status and pending count.

        ``empty_settle_delay_ms`` after a generation that created nothing,
        ``settle_delay_ms`` otherwise.
        """
        delay_ms = self._empty_settle_delay_ms if result.is_empty else self._settle_delay_ms
        return delay_ms / 1000
