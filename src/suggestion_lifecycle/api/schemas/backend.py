"""Pydantic schemas for the suggestions backend wire format (camelCase JSON)."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from suggestion_lifecycle.core.timezone import parse_datetime_brt, to_brt
from suggestion_lifecycle.domain.models import (
    GenerationResult,
    PendingTransaction,
    SuggestionStatus,
    TransactionStatus,
    TransactionType,
)


class _BackendModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SuggestionStatusPayload(_BackendModel):
    """Body of GET .../transactions/suggestions/status."""

    last_suggestions_generated_at: Optional[datetime] = Field(
        default=None, alias="lastSuggestionsGeneratedAt"
    )
    needs_regeneration: bool = Field(default=False, alias="needsRegeneration")
    is_recent: bool = Field(default=False, alias="isRecent")
    cash_balance: Decimal = Field(default=Decimal("0"), alias="cashBalance")
    has_cash_available: bool = Field(default=False, alias="hasCashAvailable")
    has_pending_buy_suggestions: bool = Field(default=False, alias="hasPendingBuySuggestions")

    @field_validator("last_suggestions_generated_at", mode="before")
    @classmethod
    def parse_timestamp(cls, v: Any) -> Any:
        if isinstance(v, str):
            return parse_datetime_brt(v)
        if isinstance(v, datetime):
            return to_brt(v)
        return v

    @field_validator("cash_balance", mode="before")
    @classmethod
    def default_cash(cls, v: Any) -> Any:
        return Decimal("0") if v is None else v

    @field_validator(
        "needs_regeneration",
        "is_recent",
        "has_cash_available",
        "has_pending_buy_suggestions",
        mode="before",
    )
    @classmethod
    def default_flag(cls, v: Any) -> Any:
        return False if v is None else v

    def to_domain(self) -> SuggestionStatus:
        return SuggestionStatus(
            last_suggestions_generated_at=self.last_suggestions_generated_at,
            needs_regeneration=self.needs_regeneration,
            is_recent=self.is_recent,
            cash_balance=self.cash_balance,
            has_cash_available=self.has_cash_available,
            has_pending_buy_suggestions=self.has_pending_buy_suggestions,
        )

    @classmethod
    def from_domain(cls, status: SuggestionStatus) -> "SuggestionStatusPayload":
        return cls(
            last_suggestions_generated_at=status.last_suggestions_generated_at,
            needs_regeneration=status.needs_regeneration,
            is_recent=status.is_recent,
            cash_balance=status.cash_balance,
            has_cash_available=status.has_cash_available,
            has_pending_buy_suggestions=status.has_pending_buy_suggestions,
        )


class PendingTransactionPayload(_BackendModel):
    """One entry of GET .../transactions?status=PENDING."""

    id: str
    type: str
    amount: Decimal = Decimal("0")
    txn_date: Optional[date] = Field(default=None, alias="date")
    ticker: Optional[str] = None
    status: TransactionStatus = TransactionStatus.PENDING

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @field_validator("amount", mode="before")
    @classmethod
    def default_amount(cls, v: Any) -> Any:
        return Decimal("0") if v is None else v

    @field_validator("txn_date", mode="before")
    @classmethod
    def parse_local_date(cls, v: Any) -> Any:
        # Dates are calendar days; drop the time part instead of shifting timezones
        if isinstance(v, str):
            return date.fromisoformat(v.split("T")[0])
        return v

    def to_domain(self) -> PendingTransaction:
        try:
            txn_type = TransactionType(self.type)
        except ValueError:
            txn_type = self.type
        return PendingTransaction(
            id=self.id,
            txn_type=txn_type,
            amount=self.amount,
            txn_date=self.txn_date,
            ticker=self.ticker,
            status=self.status,
        )

    @classmethod
    def from_domain(cls, txn: PendingTransaction) -> "PendingTransactionPayload":
        txn_type = txn.txn_type.value if isinstance(txn.txn_type, TransactionType) else txn.txn_type
        return cls(
            id=txn.id,
            type=txn_type,
            amount=txn.amount,
            txn_date=txn.txn_date,
            ticker=txn.ticker,
            status=txn.status,
        )


class PendingTransactionsPayload(_BackendModel):
    """Body of GET .../transactions?status=PENDING."""

    transactions: list[PendingTransactionPayload] = Field(default_factory=list)

    @field_validator("transactions", mode="before")
    @classmethod
    def default_transactions(cls, v: Any) -> Any:
        return [] if v is None else v


class GenerationDebugPayload(_BackendModel):
    suggestions_generated: Optional[int] = Field(default=None, alias="suggestionsGenerated")


class GenerationPayload(_BackendModel):
    """Body of POST .../transactions/suggestions/contributions."""

    count: int = 0
    debug: Optional[GenerationDebugPayload] = None

    def to_domain(self) -> GenerationResult:
        return GenerationResult(
            count=self.count,
            suggestions_generated=self.debug.suggestions_generated if self.debug else None,
        )


class DeletePendingPayload(_BackendModel):
    """Body of DELETE .../transactions/pending."""

    deleted_count: int = Field(default=0, alias="deletedCount")
