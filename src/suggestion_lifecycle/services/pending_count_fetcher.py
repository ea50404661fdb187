"""Pending-count fetcher: pending contribution transactions for a portfolio."""

import logging

from suggestion_lifecycle.domain.models import PendingTransaction
from suggestion_lifecycle.providers.suggestion_api import SuggestionApi

logger = logging.getLogger(__name__)


def contribution_only(transactions: list[PendingTransaction]) -> list[PendingTransaction]:
    """Drop SELL_REBALANCE/BUY_REBALANCE entries; they belong to the rebalancing flow."""
    return [t for t in transactions if not t.is_rebalancing]


def has_duplicates(transactions: list[PendingTransaction]) -> bool:
    """Return True if two transactions share the same (date, type, ticker)."""
    seen: set[tuple] = set()
    for txn in transactions:
        if txn.duplicate_key in seen:
            return True
        seen.add(txn.duplicate_key)
    return False


class PendingCountFetcher:
    """
    Counts pending, non-rebalancing transactions.

    The backend returns every PENDING transaction; rebalancing ones are
    filtered here. When ``cleanup_duplicates`` is on and two contribution
    transactions collide on (date, type, ticker), one server-side cleanup is
    requested and the list is fetched again once.
    """

    def __init__(self, api: SuggestionApi, cleanup_duplicates: bool = True):
        self._api = api
        self._cleanup_duplicates = cleanup_duplicates

    async def fetch_pending(self, portfolio_id: str) -> list[PendingTransaction]:
        """Fetch pending contribution transactions. Raises NetworkError."""
        pending = contribution_only(await self._api.list_pending_transactions(portfolio_id))

        if self._cleanup_duplicates and has_duplicates(pending):
            logger.info("Duplicate pending transactions for %s, requesting cleanup", portfolio_id)
            await self._api.cleanup_duplicates(portfolio_id)
            pending = contribution_only(await self._api.list_pending_transactions(portfolio_id))

        logger.debug("Portfolio %s has %d pending contribution transactions", portfolio_id, len(pending))
        return pending

    async def fetch(self, portfolio_id: str) -> int:
        """Fetch the pending contribution count. Raises NetworkError."""
        return len(await self.fetch_pending(portfolio_id))
