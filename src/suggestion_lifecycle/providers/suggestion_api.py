"""Suggestions backend protocol."""

from typing import Protocol

from suggestion_lifecycle.domain.models import (
    GenerationResult,
    PendingTransaction,
    SuggestionStatus,
)


class SuggestionApi(Protocol):
    """
    Protocol for the portfolio suggestions backend.

    Implementations raise NetworkError for non-2xx responses and transport
    failures. Pending transaction lists are returned unfiltered.
    """

    async def get_status(self, portfolio_id: str) -> SuggestionStatus:
        """Fetch suggestion metadata for a portfolio."""
        ...

    async def list_pending_transactions(self, portfolio_id: str) -> list[PendingTransaction]:
        """Fetch all PENDING transactions, rebalancing ones included."""
        ...

    async def create_contribution_suggestions(self, portfolio_id: str) -> GenerationResult:
        """Ask the backend to create contribution suggestions as PENDING transactions."""
        ...

    async def start_tracking(self, portfolio_id: str) -> None:
        """Start monthly suggestion tracking for a portfolio."""
        ...

    async def delete_pending_transactions(self, portfolio_id: str) -> int:
        """Delete every PENDING transaction; return how many were removed."""
        ...

    async def cleanup_duplicates(self, portfolio_id: str) -> None:
        """Remove duplicate PENDING transactions server-side."""
        ...

    async def confirm_transaction(self, portfolio_id: str, txn_id: str) -> None:
        """Confirm a pending transaction."""
        ...

    async def confirm_transactions(self, portfolio_id: str, txn_ids: list[str]) -> None:
        """Confirm several pending transactions in one call."""
        ...

    async def reject_transaction(self, portfolio_id: str, txn_id: str, reason: str) -> None:
        """Reject a pending transaction."""
        ...
