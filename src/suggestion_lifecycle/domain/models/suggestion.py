"""Suggestion status, pending transaction and generation result models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

from suggestion_lifecycle.domain.models.enums import (
    REBALANCING_TYPES,
    TransactionStatus,
    TransactionType,
)


@dataclass(frozen=True)
class SuggestionStatus:
    """
    Server-side suggestion metadata for one portfolio.

    Read-only snapshot: re-fetched when invalidated, never mutated.
    """

    last_suggestions_generated_at: Optional[datetime] = None
    needs_regeneration: bool = False
    is_recent: bool = False
    cash_balance: Decimal = field(default_factory=lambda: Decimal("0"))
    has_cash_available: bool = False
    has_pending_buy_suggestions: bool = False


@dataclass(frozen=True)
class PendingTransaction:
    """
    A transaction awaiting the user's confirm/reject decision.

    ``txn_type`` is a TransactionType when the backend sends a known type and
    the raw string otherwise.
    """

    id: str
    txn_type: Union[TransactionType, str]
    amount: Decimal = field(default_factory=lambda: Decimal("0"))
    txn_date: Optional[date] = None
    ticker: Optional[str] = None
    status: TransactionStatus = TransactionStatus.PENDING

    @property
    def is_rebalancing(self) -> bool:
        """Return True for SELL_REBALANCE/BUY_REBALANCE transactions."""
        return self.txn_type in REBALANCING_TYPES

    @property
    def duplicate_key(self) -> tuple:
        """Key under which two pending transactions count as duplicates."""
        type_value = self.txn_type.value if isinstance(self.txn_type, TransactionType) else self.txn_type
        return (self.txn_date, type_value, self.ticker)


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of a create-contribution-suggestions call."""

    count: int
    suggestions_generated: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return self.count == 0
