"""Pydantic schemas for the backend wire format and the service API."""

from suggestion_lifecycle.api.schemas.backend import (
    SuggestionStatusPayload,
    PendingTransactionPayload,
    PendingTransactionsPayload,
    GenerationDebugPayload,
    GenerationPayload,
    DeletePendingPayload,
)
from suggestion_lifecycle.api.schemas.lifecycle import (
    UIStateResponse,
    SuggestionStatusResponse,
    ErrorInfo,
    LifecycleResponse,
    RejectRequest,
    ConfirmRequest,
    BatchConfirmRequest,
    BatchRejectRequest,
)

__all__ = [
    "SuggestionStatusPayload",
    "PendingTransactionPayload",
    "PendingTransactionsPayload",
    "GenerationDebugPayload",
    "GenerationPayload",
    "DeletePendingPayload",
    "UIStateResponse",
    "SuggestionStatusResponse",
    "ErrorInfo",
    "LifecycleResponse",
    "RejectRequest",
    "ConfirmRequest",
    "BatchConfirmRequest",
    "BatchRejectRequest",
]
