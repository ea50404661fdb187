"""In-memory suggestions backend for offline use and tests."""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_DOWN
from typing import Callable, Optional

from suggestion_lifecycle.core.exceptions import NetworkError
from suggestion_lifecycle.core.timezone import now_brt
from suggestion_lifecycle.domain.models import (
    GenerationResult,
    PendingTransaction,
    SuggestionStatus,
    TransactionStatus,
    TransactionType,
)

_CONTRIBUTION_TYPES = (TransactionType.MONTHLY_CONTRIBUTION, TransactionType.CASH_CREDIT)


@dataclass
class StubPortfolio:
    """Server-side state the stub keeps per portfolio."""

    portfolio_id: str
    tracking_started: bool = True
    cash_balance: Decimal = field(default_factory=lambda: Decimal("0"))
    monthly_contribution: Decimal = field(default_factory=lambda: Decimal("1000.00"))
    tickers: tuple[str, ...] = ("PETR4", "VALE3", "ITUB4")
    last_suggestions_generated_at: Optional[datetime] = None
    transactions: list[PendingTransaction] = field(default_factory=list)

    @property
    def pending(self) -> list[PendingTransaction]:
        return [t for t in self.transactions if t.status == TransactionStatus.PENDING]


class StubSuggestionApi:
    """
    Deterministic backend implementing the suggestion rules in memory.

    - Suggestions are recent for ``recency_window_days`` after generation
    - Cash counts as available above ``min_cash_available``
    - No new BUY suggestions while a pending BUY exists
    - One monthly contribution suggestion per calendar month
    - Every create call refreshes ``last_suggestions_generated_at``
    """

    def __init__(
        self,
        recency_window_days: int = 30,
        min_cash_available: Decimal = Decimal("0.01"),
        clock: Callable[[], datetime] = now_brt,
    ):
        self._recency_window = timedelta(days=recency_window_days)
        self._min_cash = min_cash_available
        self._clock = clock
        self._portfolios: dict[str, StubPortfolio] = {}

    def add_portfolio(self, portfolio_id: str, **kwargs) -> StubPortfolio:
        """Register a portfolio; keyword arguments override StubPortfolio defaults."""
        portfolio = StubPortfolio(portfolio_id=portfolio_id, **kwargs)
        self._portfolios[portfolio_id] = portfolio
        return portfolio

    def portfolio(self, portfolio_id: str) -> StubPortfolio:
        portfolio = self._portfolios.get(portfolio_id)
        if portfolio is None:
            raise NetworkError(
                f"Portfolio not found: {portfolio_id}",
                status_code=404,
                url=f"/api/portfolio/{portfolio_id}",
            )
        return portfolio

    async def get_status(self, portfolio_id: str) -> SuggestionStatus:
        portfolio = self.portfolio(portfolio_id)
        last = portfolio.last_suggestions_generated_at
        needs_regeneration = last is None or last < self._clock() - self._recency_window
        return SuggestionStatus(
            last_suggestions_generated_at=last,
            needs_regeneration=needs_regeneration,
            is_recent=not needs_regeneration,
            cash_balance=portfolio.cash_balance,
            has_cash_available=portfolio.cash_balance > self._min_cash,
            has_pending_buy_suggestions=any(
                t.txn_type == TransactionType.BUY for t in portfolio.pending
            ),
        )

    async def list_pending_transactions(self, portfolio_id: str) -> list[PendingTransaction]:
        return list(self.portfolio(portfolio_id).pending)

    async def create_contribution_suggestions(self, portfolio_id: str) -> GenerationResult:
        portfolio = self.portfolio(portfolio_id)
        if not portfolio.tracking_started:
            return GenerationResult(count=0, suggestions_generated=0)

        now = self._clock()
        created: list[PendingTransaction] = []

        if not self._has_contribution_this_month(portfolio, now):
            created.append(
                self._new_transaction(
                    TransactionType.MONTHLY_CONTRIBUTION,
                    portfolio.monthly_contribution,
                    now,
                )
            )

        has_pending_buy = any(t.txn_type == TransactionType.BUY for t in portfolio.pending)
        if portfolio.cash_balance > self._min_cash and not has_pending_buy:
            created.extend(self._buy_suggestions(portfolio, now))

        portfolio.transactions.extend(created)
        portfolio.last_suggestions_generated_at = now
        return GenerationResult(count=len(created), suggestions_generated=len(created))

    async def start_tracking(self, portfolio_id: str) -> None:
        self.portfolio(portfolio_id).tracking_started = True

    async def delete_pending_transactions(self, portfolio_id: str) -> int:
        portfolio = self.portfolio(portfolio_id)
        pending_ids = {t.id for t in portfolio.pending}
        portfolio.transactions = [t for t in portfolio.transactions if t.id not in pending_ids]
        return len(pending_ids)

    async def cleanup_duplicates(self, portfolio_id: str) -> None:
        portfolio = self.portfolio(portfolio_id)
        seen: set[tuple] = set()
        kept: list[PendingTransaction] = []
        for txn in portfolio.transactions:
            if txn.status == TransactionStatus.PENDING:
                if txn.duplicate_key in seen:
                    continue
                seen.add(txn.duplicate_key)
            kept.append(txn)
        portfolio.transactions = kept

    async def confirm_transaction(self, portfolio_id: str, txn_id: str) -> None:
        self._confirm(self.portfolio(portfolio_id), txn_id)

    async def confirm_transactions(self, portfolio_id: str, txn_ids: list[str]) -> None:
        portfolio = self.portfolio(portfolio_id)
        # All or nothing: every id must still be pending
        pending_ids = {t.id for t in portfolio.pending}
        missing = [txn_id for txn_id in txn_ids if txn_id not in pending_ids]
        if missing:
            raise NetworkError(
                f"Transactions not pending: {', '.join(missing)}",
                status_code=400,
            )
        for txn_id in dict.fromkeys(txn_ids):
            self._confirm(portfolio, txn_id)

    def _confirm(self, portfolio: StubPortfolio, txn_id: str) -> None:
        txn = self._decide(portfolio, txn_id, TransactionStatus.CONFIRMED)
        if txn.txn_type in _CONTRIBUTION_TYPES:
            portfolio.cash_balance += txn.amount
        elif txn.txn_type == TransactionType.BUY:
            portfolio.cash_balance -= txn.amount

    async def reject_transaction(self, portfolio_id: str, txn_id: str, reason: str) -> None:
        self._decide(self.portfolio(portfolio_id), txn_id, TransactionStatus.REJECTED)

    def _decide(
        self,
        portfolio: StubPortfolio,
        txn_id: str,
        status: TransactionStatus,
    ) -> PendingTransaction:
        for index, txn in enumerate(portfolio.transactions):
            if txn.id == txn_id:
                if txn.status != TransactionStatus.PENDING:
                    raise NetworkError(
                        f"Transaction {txn_id} is already {txn.status.value}",
                        status_code=409,
                    )
                decided = replace(txn, status=status)
                portfolio.transactions[index] = decided
                return decided
        raise NetworkError(f"Transaction not found: {txn_id}", status_code=404)

    def _has_contribution_this_month(self, portfolio: StubPortfolio, now: datetime) -> bool:
        month_start = now.date().replace(day=1)
        # Pending (undecided) and decided contributions both close the month
        return any(
            txn.txn_type in _CONTRIBUTION_TYPES
            and txn.txn_date is not None
            and txn.txn_date >= month_start
            for txn in portfolio.transactions
        )

    def _buy_suggestions(self, portfolio: StubPortfolio, now: datetime) -> list[PendingTransaction]:
        if not portfolio.tickers:
            return []
        share = (portfolio.cash_balance / len(portfolio.tickers)).quantize(
            Decimal("0.01"), rounding=ROUND_DOWN
        )
        if share <= 0:
            return []
        return [
            self._new_transaction(TransactionType.BUY, share, now, ticker=ticker)
            for ticker in portfolio.tickers
        ]

    @staticmethod
    def _new_transaction(
        txn_type: TransactionType,
        amount: Decimal,
        now: datetime,
        ticker: Optional[str] = None,
    ) -> PendingTransaction:
        txn_date = now.date()
        if txn_type == TransactionType.MONTHLY_CONTRIBUTION:
            txn_date = txn_date.replace(day=1)
        return PendingTransaction(
            id=uuid.uuid4().hex,
            txn_type=txn_type,
            amount=amount,
            txn_date=txn_date,
            ticker=ticker,
        )
