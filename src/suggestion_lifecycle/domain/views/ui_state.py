"""View models for what the presentation shell renders."""

from dataclasses import dataclass, field
from typing import Optional

from suggestion_lifecycle.core.exceptions import AppError
from suggestion_lifecycle.domain.models import (
    LifecyclePhase,
    PendingTransaction,
    SuggestionStatus,
    UIStateKind,
)


@dataclass(frozen=True)
class UIState:
    """
    Derived UI state of the pending-transactions prompt.

    Computed fresh on every evaluation; has no lifecycle of its own.
    ``pending_count`` is only meaningful for ACTION_REQUIRED.
    """

    kind: UIStateKind
    pending_count: int = 0

    @classmethod
    def not_started(cls) -> "UIState":
        return cls(UIStateKind.NOT_STARTED)

    @classmethod
    def up_to_date(cls) -> "UIState":
        return cls(UIStateKind.UP_TO_DATE)

    @classmethod
    def action_required(cls, pending_count: int) -> "UIState":
        return cls(UIStateKind.ACTION_REQUIRED, pending_count)

    @classmethod
    def generating(cls) -> "UIState":
        return cls(UIStateKind.GENERATING)


@dataclass
class LifecycleSnapshot:
    """Everything the shell needs after one evaluation cycle."""

    portfolio_id: str
    tracking_started: bool
    phase: LifecyclePhase = LifecyclePhase.IDLE
    state: Optional[UIState] = None
    status: Optional[SuggestionStatus] = None
    pending_count: Optional[int] = None
    # Last loaded pending list, rebalancing excluded
    pending: list[PendingTransaction] = field(default_factory=list)
    generations: int = 0
    from_cache: bool = False
    error: Optional[AppError] = field(default=None)
