"""Decision gate: maps tracking flag, pending count and status to a UI state."""

from typing import Optional

from suggestion_lifecycle.domain.models import SuggestionStatus
from suggestion_lifecycle.domain.views import UIState


def is_pending_buy_mismatch(pending_count: int, status: Optional[SuggestionStatus]) -> bool:
    """
    True when the backend reports pending buy suggestions but none were listed.

    The pending list wins: the state is UP_TO_DATE and nothing is regenerated.
    """
    return status is not None and status.has_pending_buy_suggestions and pending_count == 0


def decide(
    tracking_started: bool,
    pending_count: int,
    status: Optional[SuggestionStatus],
) -> Optional[UIState]:
    """
    Decide what the pending-transactions prompt shows.

    Pure function. Returns None while the status is unknown (hold: keep the
    previous state). A GENERATING result means the caller must trigger
    regeneration and decide again once the backend settles.

    Recency is checked before the regeneration condition, so a generation
    that produced nothing (which refreshes the timestamp and makes the
    status recent) can never trigger another one.
    """
    if not tracking_started:
        return UIState.not_started()

    if status is None:
        return None

    # Pending buys already exist server-side: never regenerate
    may_regenerate = not status.has_pending_buy_suggestions
    if not may_regenerate and pending_count == 0:
        return UIState.up_to_date()

    if status.is_recent and pending_count == 0:
        return UIState.up_to_date()

    if pending_count > 0:
        return UIState.action_required(pending_count)

    if may_regenerate and (status.needs_regeneration or status.has_cash_available):
        return UIState.generating()

    return UIState.up_to_date()
