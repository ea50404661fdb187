"""Suggestion lifecycle endpoints consumed by the presentation shell."""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from suggestion_lifecycle.api.deps import get_app_context
from suggestion_lifecycle.api.schemas import (
    BatchConfirmRequest,
    BatchRejectRequest,
    ConfirmRequest,
    LifecycleResponse,
    RejectRequest,
    SuggestionStatusResponse,
)
from suggestion_lifecycle.app_context import AppContext
from suggestion_lifecycle.core.exceptions import UnknownStatusError, ValidationError
from suggestion_lifecycle.domain.models import TransactionType

router = APIRouter(prefix="/portfolios/{portfolio_id}/suggestions", tags=["suggestions"])


@router.get("/state", response_model=LifecycleResponse)
async def get_state(
    portfolio_id: str,
    tracking_started: Optional[bool] = Query(
        None, description="Whether the portfolio has started tracking (keeps the last known value if omitted)"
    ),
    refresh: bool = Query(False, description="Bypass the suggestion cache"),
    context: AppContext = Depends(get_app_context),
) -> LifecycleResponse:
    """Run one evaluation cycle and return the resulting state."""
    controller = context.controller(portfolio_id, tracking_started=tracking_started)
    snapshot = await controller.evaluate(force=refresh)
    return LifecycleResponse.from_snapshot(snapshot)


@router.get("/status", response_model=SuggestionStatusResponse)
def get_last_status(
    portfolio_id: str,
    context: AppContext = Depends(get_app_context),
) -> SuggestionStatusResponse:
    """Return the last loaded suggestion status without calling the backend."""
    controller = context.find_controller(portfolio_id)
    if controller is None:
        raise UnknownStatusError(portfolio_id)
    return SuggestionStatusResponse.from_domain(controller.require_status())


@router.post("/start-tracking", response_model=LifecycleResponse)
async def start_tracking(
    portfolio_id: str,
    context: AppContext = Depends(get_app_context),
) -> LifecycleResponse:
    """Start monthly tracking and evaluate."""
    snapshot = await context.controller(portfolio_id).start_tracking()
    return LifecycleResponse.from_snapshot(snapshot)


@router.post("/recalculate", response_model=LifecycleResponse)
async def recalculate(
    portfolio_id: str,
    context: AppContext = Depends(get_app_context),
) -> LifecycleResponse:
    """Delete every pending transaction and re-evaluate."""
    snapshot = await context.controller(portfolio_id).recalculate()
    return LifecycleResponse.from_snapshot(snapshot)


@router.post("/transactions/{txn_id}/confirm", response_model=LifecycleResponse)
async def confirm_transaction(
    portfolio_id: str,
    txn_id: str,
    data: Optional[ConfirmRequest] = Body(None),
    context: AppContext = Depends(get_app_context),
) -> LifecycleResponse:
    """Confirm a pending transaction and re-evaluate."""
    data = data or ConfirmRequest()
    txn_type = None
    if data.txn_type:
        try:
            txn_type = TransactionType(data.txn_type)
        except ValueError:
            raise ValidationError(f"Invalid txn_type: {data.txn_type}")

    snapshot = await context.controller(portfolio_id).confirm(txn_id, txn_type=txn_type)
    return LifecycleResponse.from_snapshot(snapshot)


@router.post("/transactions/{txn_id}/reject", response_model=LifecycleResponse)
async def reject_transaction(
    portfolio_id: str,
    txn_id: str,
    data: Optional[RejectRequest] = Body(None),
    context: AppContext = Depends(get_app_context),
) -> LifecycleResponse:
    """Reject a pending transaction and re-evaluate."""
    data = data or RejectRequest()
    snapshot = await context.controller(portfolio_id).reject(txn_id, reason=data.reason)
    return LifecycleResponse.from_snapshot(snapshot)


def _selected_ids(controller, data: BatchConfirmRequest) -> Optional[list[str]]:
    if data.transaction_ids is not None:
        return data.transaction_ids
    if data.month is not None:
        return controller.pending_ids(month=data.month)
    return None


@router.post("/transactions/confirm-batch", response_model=LifecycleResponse)
async def confirm_transactions(
    portfolio_id: str,
    data: Optional[BatchConfirmRequest] = Body(None),
    context: AppContext = Depends(get_app_context),
) -> LifecycleResponse:
    """Confirm the selected (or all loaded) pending transactions and re-evaluate."""
    data = data or BatchConfirmRequest()
    controller = context.controller(portfolio_id)
    snapshot = await controller.confirm_all(_selected_ids(controller, data))
    return LifecycleResponse.from_snapshot(snapshot)


@router.post("/transactions/reject-batch", response_model=LifecycleResponse)
async def reject_transactions(
    portfolio_id: str,
    data: Optional[BatchRejectRequest] = Body(None),
    context: AppContext = Depends(get_app_context),
) -> LifecycleResponse:
    """Reject the selected (or all loaded) pending transactions and re-evaluate."""
    data = data or BatchRejectRequest()
    reason = data.reason
    if reason is None:
        reason = f"Rejeitado em lote - {data.month}" if data.month else "Rejeitado em lote"
    controller = context.controller(portfolio_id)
    snapshot = await controller.reject_many(_selected_ids(controller, data), reason=reason)
    return LifecycleResponse.from_snapshot(snapshot)
