"""HTTP implementation of the suggestions backend protocol."""

import logging
from typing import Any, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError as PydanticValidationError

from suggestion_lifecycle.api.schemas.backend import (
    DeletePendingPayload,
    GenerationPayload,
    PendingTransactionsPayload,
    SuggestionStatusPayload,
)
from suggestion_lifecycle.core.exceptions import NetworkError
from suggestion_lifecycle.domain.models import (
    GenerationResult,
    PendingTransaction,
    SuggestionStatus,
    TransactionStatus,
)

logger = logging.getLogger(__name__)

PayloadT = TypeVar("PayloadT", bound=BaseModel)


class HttpSuggestionApi:
    """
    Suggestions backend reached over HTTP with an ``httpx.AsyncClient``.

    Every non-2xx response, transport failure or malformed body becomes a
    NetworkError. No retries: the lifecycle controller decides what to do next.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout_seconds)

    async def aclose(self) -> None:
        """Close the underlying client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def get_status(self, portfolio_id: str) -> SuggestionStatus:
        response = await self._request(
            "GET", f"/api/portfolio/{portfolio_id}/transactions/suggestions/status"
        )
        return self._parse(response, SuggestionStatusPayload).to_domain()

    async def list_pending_transactions(self, portfolio_id: str) -> list[PendingTransaction]:
        response = await self._request(
            "GET",
            f"/api/portfolio/{portfolio_id}/transactions",
            params={"status": TransactionStatus.PENDING.value},
        )
        payload = self._parse(response, PendingTransactionsPayload)
        return [txn.to_domain() for txn in payload.transactions]

    async def create_contribution_suggestions(self, portfolio_id: str) -> GenerationResult:
        response = await self._request(
            "POST",
            f"/api/portfolio/{portfolio_id}/transactions/suggestions/contributions",
            headers={"Content-Type": "application/json"},
        )
        return self._parse(response, GenerationPayload).to_domain()

    async def start_tracking(self, portfolio_id: str) -> None:
        await self._request("POST", f"/api/portfolio/{portfolio_id}/start-tracking")

    async def delete_pending_transactions(self, portfolio_id: str) -> int:
        response = await self._request(
            "DELETE", f"/api/portfolio/{portfolio_id}/transactions/pending"
        )
        return self._parse(response, DeletePendingPayload).deleted_count

    async def cleanup_duplicates(self, portfolio_id: str) -> None:
        await self._request(
            "POST", f"/api/portfolio/{portfolio_id}/transactions/cleanup-duplicates"
        )

    async def confirm_transaction(self, portfolio_id: str, txn_id: str) -> None:
        await self._request(
            "POST", f"/api/portfolio/{portfolio_id}/transactions/{txn_id}/confirm"
        )

    async def confirm_transactions(self, portfolio_id: str, txn_ids: list[str]) -> None:
        await self._request(
            "POST",
            f"/api/portfolio/{portfolio_id}/transactions/confirm-batch",
            json={"transactionIds": list(txn_ids)},
        )

    async def reject_transaction(self, portfolio_id: str, txn_id: str, reason: str) -> None:
        await self._request(
            "POST",
            f"/api/portfolio/{portfolio_id}/transactions/{txn_id}/reject",
            json={"reason": reason},
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise NetworkError(f"{method} {path} failed: {exc}", url=path) from exc

        if response.is_error:
            logger.error("%s %s returned %s: %s", method, path, response.status_code, response.text)
            raise NetworkError(
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
                url=path,
            )
        return response

    @staticmethod
    def _parse(response: httpx.Response, schema: Type[PayloadT]) -> PayloadT:
        try:
            return schema.model_validate_json(response.content)
        except PydanticValidationError as exc:
            url = response.request.url.path
            raise NetworkError(
                f"Malformed response body from {url}: {exc.error_count()} error(s)",
                status_code=response.status_code,
                url=url,
            ) from exc
