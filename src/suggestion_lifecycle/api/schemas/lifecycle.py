"""Pydantic schemas for the lifecycle service endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from suggestion_lifecycle.domain.models import LifecyclePhase, SuggestionStatus, UIStateKind
from suggestion_lifecycle.domain.views import LifecycleSnapshot, UIState


class UIStateResponse(BaseModel):
    """Response schema for a derived UI state."""

    kind: UIStateKind
    pending_count: int = 0

    @classmethod
    def from_view(cls, state: UIState) -> "UIStateResponse":
        return cls(kind=state.kind, pending_count=state.pending_count)


class SuggestionStatusResponse(BaseModel):
    """Response schema for the last loaded suggestion status."""

    last_suggestions_generated_at: Optional[datetime] = None
    needs_regeneration: bool
    is_recent: bool
    cash_balance: Decimal
    has_cash_available: bool
    has_pending_buy_suggestions: bool

    @classmethod
    def from_domain(cls, status: SuggestionStatus) -> "SuggestionStatusResponse":
        return cls(
            last_suggestions_generated_at=status.last_suggestions_generated_at,
            needs_regeneration=status.needs_regeneration,
            is_recent=status.is_recent,
            cash_balance=status.cash_balance,
            has_cash_available=status.has_cash_available,
            has_pending_buy_suggestions=status.has_pending_buy_suggestions,
        )


class ErrorInfo(BaseModel):
    error: str
    message: str


class LifecycleResponse(BaseModel):
    """Response schema for a controller snapshot."""

    portfolio_id: str
    tracking_started: bool
    phase: LifecyclePhase
    state: Optional[UIStateResponse] = Field(
        default=None,
        description="Null while the status is unknown (shell keeps showing loading)",
    )
    status: Optional[SuggestionStatusResponse] = None
    pending_count: Optional[int] = None
    generations: int = 0
    from_cache: bool = False
    error: Optional[ErrorInfo] = None

    @classmethod
    def from_snapshot(cls, snapshot: LifecycleSnapshot) -> "LifecycleResponse":
        return cls(
            portfolio_id=snapshot.portfolio_id,
            tracking_started=snapshot.tracking_started,
            phase=snapshot.phase,
            state=UIStateResponse.from_view(snapshot.state) if snapshot.state else None,
            status=SuggestionStatusResponse.from_domain(snapshot.status) if snapshot.status else None,
            pending_count=snapshot.pending_count,
            generations=snapshot.generations,
            from_cache=snapshot.from_cache,
            error=(
                ErrorInfo(error=snapshot.error.code, message=snapshot.error.message)
                if snapshot.error
                else None
            ),
        )


class RejectRequest(BaseModel):
    """Request schema for rejecting a pending transaction."""

    reason: str = Field(default="Rejeitado pelo usuário", max_length=500)


class ConfirmRequest(BaseModel):
    """Request schema for confirming a pending transaction."""

    txn_type: Optional[str] = Field(
        default=None,
        description="Transaction type, lets the service wait for cash to settle after a monthly contribution",
    )


class BatchConfirmRequest(BaseModel):
    """Request schema for confirming several pending transactions."""

    transaction_ids: Optional[list[str]] = Field(
        default=None,
        description="Transactions to confirm; every loaded pending transaction (or the month's) if omitted",
    )
    month: Optional[str] = Field(
        default=None,
        pattern=r"^\d{4}-\d{2}$",
        description="YYYY-MM group to act on when transaction_ids is omitted",
    )


class BatchRejectRequest(BatchConfirmRequest):
    """Request schema for rejecting several pending transactions."""

    reason: Optional[str] = Field(default=None, max_length=500)
