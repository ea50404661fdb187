"""Domain models package."""

from suggestion_lifecycle.domain.models.enums import (
    REBALANCING_TYPES,
    EventType,
    LifecyclePhase,
    TransactionStatus,
    TransactionType,
    UIStateKind,
)
from suggestion_lifecycle.domain.models.suggestion import (
    GenerationResult,
    PendingTransaction,
    SuggestionStatus,
)
from suggestion_lifecycle.domain.models.cache import SuggestionSnapshot

__all__ = [
    "REBALANCING_TYPES",
    "EventType",
    "LifecyclePhase",
    "TransactionStatus",
    "TransactionType",
    "UIStateKind",
    "GenerationResult",
    "PendingTransaction",
    "SuggestionStatus",
    "SuggestionSnapshot",
]
