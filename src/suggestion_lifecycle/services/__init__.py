"""Service layer - suggestion lifecycle orchestration."""

from suggestion_lifecycle.services.status_fetcher import StatusFetcher
from suggestion_lifecycle.services.pending_count_fetcher import PendingCountFetcher
from suggestion_lifecycle.services.decision_gate import decide, is_pending_buy_mismatch
from suggestion_lifecycle.services.regeneration_trigger import RegenerationTrigger
from suggestion_lifecycle.services.lifecycle_controller import SuggestionLifecycleController, TRANSITIONS

__all__ = [
    "StatusFetcher",
    "PendingCountFetcher",
    "decide",
    "is_pending_buy_mismatch",
    "RegenerationTrigger",
    "SuggestionLifecycleController",
    "TRANSITIONS",
]
