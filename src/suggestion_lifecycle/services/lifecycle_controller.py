"""Suggestion lifecycle controller: one state machine per portfolio."""

import asyncio
import logging
import uuid
from typing import Any, Awaitable, Callable, Optional

from suggestion_lifecycle.core.event_bus import EventBus, SuggestionEvent
from suggestion_lifecycle.core.exceptions import (
    InvalidTransitionError,
    NetworkError,
    UnknownStatusError,
    ValidationError,
)
from suggestion_lifecycle.core.timezone import now_brt
from suggestion_lifecycle.domain.models import (
    EventType,
    GenerationResult,
    LifecyclePhase,
    PendingTransaction,
    SuggestionSnapshot,
    SuggestionStatus,
    TransactionType,
    UIStateKind,
)
from suggestion_lifecycle.domain.views import LifecycleSnapshot, UIState
from suggestion_lifecycle.providers.suggestion_api import SuggestionApi
from suggestion_lifecycle.repositories.protocols import SuggestionCacheRepository
from suggestion_lifecycle.services.decision_gate import decide, is_pending_buy_mismatch
from suggestion_lifecycle.services.pending_count_fetcher import PendingCountFetcher
from suggestion_lifecycle.services.regeneration_trigger import RegenerationTrigger
from suggestion_lifecycle.services.status_fetcher import StatusFetcher

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]

# Allowed phase transitions; anything else raises InvalidTransitionError
TRANSITIONS: dict[LifecyclePhase, frozenset[LifecyclePhase]] = {
    LifecyclePhase.IDLE: frozenset({LifecyclePhase.FETCHING}),
    LifecyclePhase.FETCHING: frozenset({LifecyclePhase.IDLE, LifecyclePhase.GENERATING}),
    LifecyclePhase.GENERATING: frozenset({LifecyclePhase.IDLE, LifecyclePhase.COOLDOWN}),
    LifecyclePhase.COOLDOWN: frozenset({LifecyclePhase.IDLE, LifecyclePhase.FETCHING}),
}


class SuggestionLifecycleController:
    """
    Decides whether a portfolio shows pending transactions, is up to date, or
    needs its contribution suggestions regenerated.

    One evaluation cycle runs IDLE -> FETCHING -> (GENERATING -> COOLDOWN ->
    FETCHING)* -> IDLE. A cycle creates suggestions at most
    ``max_generations_per_cycle`` times; a further GENERATING decision in the
    same cycle resolves to UP_TO_DATE. Calling ``evaluate`` while a cycle is
    running returns the current snapshot without doing anything.

    Fetch and create failures end the cycle with ``state=None`` and the error
    attached to the snapshot. There is no automatic retry.
    """

    def __init__(
        self,
        portfolio_id: str,
        api: SuggestionApi,
        status_fetcher: StatusFetcher,
        pending_fetcher: PendingCountFetcher,
        trigger: RegenerationTrigger,
        event_bus: EventBus,
        cache_repo: Optional[SuggestionCacheRepository] = None,
        tracking_started: bool = False,
        max_generations_per_cycle: int = 1,
        monthly_contribution_delay_ms: int = 1000,
        batch_monthly_contribution_delay_ms: int = 1500,
        sleep: Sleep = asyncio.sleep,
    ):
        self._portfolio_id = portfolio_id
        self._api = api
        self._status_fetcher = status_fetcher
        self._pending_fetcher = pending_fetcher
        self._trigger = trigger
        self._event_bus = event_bus
        self._cache_repo = cache_repo
        self._max_generations = max_generations_per_cycle
        self._monthly_contribution_delay = monthly_contribution_delay_ms / 1000
        self._batch_monthly_contribution_delay = batch_monthly_contribution_delay_ms / 1000
        self._sleep = sleep
        self._source = uuid.uuid4().hex
        self._phase = LifecyclePhase.IDLE
        self._snapshot = LifecycleSnapshot(
            portfolio_id=portfolio_id,
            tracking_started=tracking_started,
        )
        self._unsubscribe = event_bus.subscribe(
            self._on_transactions_updated,
            event_type=EventType.TRANSACTIONS_UPDATED,
            portfolio_id=portfolio_id,
        )

    @property
    def portfolio_id(self) -> str:
        return self._portfolio_id

    @property
    def phase(self) -> LifecyclePhase:
        return self._phase

    @property
    def snapshot(self) -> LifecycleSnapshot:
        return self._snapshot

    @property
    def tracking_started(self) -> bool:
        return self._snapshot.tracking_started

    @tracking_started.setter
    def tracking_started(self, value: bool) -> None:
        self._snapshot.tracking_started = value

    def require_status(self) -> SuggestionStatus:
        """Return the last loaded status or raise UnknownStatusError."""
        if self._snapshot.status is None:
            raise UnknownStatusError(self._portfolio_id)
        return self._snapshot.status

    # Evaluation cycle

    async def evaluate(self, force: bool = False) -> LifecycleSnapshot:
        """
        Run one evaluation cycle.

        Args:
            force: Skip the suggestion cache and read from the backend.

        Returns:
            The controller snapshot after the cycle.
        """
        if self._phase != LifecyclePhase.IDLE:
            logger.info(
                "Evaluation already running for %s (phase %s), skipping",
                self._portfolio_id,
                self._phase.value,
            )
            return self._snapshot

        if not self.tracking_started:
            self._set_state(decide(False, 0, None))
            return self._snapshot

        self._snapshot.error = None
        self._snapshot.generations = 0
        self._transition(LifecyclePhase.FETCHING)
        try:
            await self._run_cycle(force)
        except NetworkError as exc:
            logger.error("Suggestion cycle failed for %s: %s", self._portfolio_id, exc.message)
            self._snapshot.error = exc
            self._set_state(None)
        finally:
            if self._phase != LifecyclePhase.IDLE:
                self._transition(LifecyclePhase.IDLE)
        return self._snapshot

    async def _run_cycle(self, force: bool) -> None:
        while True:
            status, pending = await self._load(force)
            # Reads after a generation must see the backend, not the cache
            force = True

            pending_count = len(pending)
            if is_pending_buy_mismatch(pending_count, status):
                logger.warning(
                    "Backend reports pending buy suggestions for %s but none are pending; "
                    "trusting the pending list",
                    self._portfolio_id,
                )
                self._publish(EventType.PENDING_BUY_MISMATCH, {"pending_count": pending_count})

            state = decide(self.tracking_started, pending_count, status)
            if state is None or state.kind != UIStateKind.GENERATING:
                self._set_state(state)
                return

            if self._snapshot.generations >= self._max_generations:
                logger.warning(
                    "Regeneration requested again for %s within one cycle (%d already); "
                    "treating suggestions as up to date",
                    self._portfolio_id,
                    self._snapshot.generations,
                )
                self._set_state(UIState.up_to_date())
                return

            self._set_state(state)
            self._transition(LifecyclePhase.GENERATING)
            result = await self._regenerate()
            if result is None:
                # Another view is generating; its re-fetch will settle the state
                self._set_state(None)
                return

            self._snapshot.generations += 1
            self._transition(LifecyclePhase.COOLDOWN)
            await self._sleep(self._trigger.settle_delay(result))
            self._transition(LifecyclePhase.FETCHING)

    async def _load(self, force: bool) -> tuple[SuggestionStatus, list[PendingTransaction]]:
        self._snapshot.from_cache = False
        if not force and self._cache_repo is not None:
            cached = self._cache_repo.get(self._portfolio_id)
            if cached is not None and cached.is_usable:
                logger.debug("Using cached suggestions for %s", self._portfolio_id)
                self._snapshot.from_cache = True
                self._snapshot.status = cached.status
                self._snapshot.pending_count = cached.pending_count
                self._snapshot.pending = list(cached.pending)
                return cached.status, cached.pending

        self._snapshot.status = None
        self._snapshot.pending_count = None

        pending = await self._pending_fetcher.fetch_pending(self._portfolio_id)
        self._snapshot.pending_count = len(pending)
        self._snapshot.pending = pending
        self._publish(EventType.PENDING_LOADED, {"pending_count": len(pending)})

        status = await self._status_fetcher.fetch(self._portfolio_id)
        self._snapshot.status = status
        self._publish(EventType.STATUS_LOADED, {"is_recent": status.is_recent})

        if self._cache_repo is not None:
            self._cache_repo.set(
                SuggestionSnapshot(
                    portfolio_id=self._portfolio_id,
                    status=status,
                    pending=pending,
                    cached_at=now_brt(),
                )
            )
        return status, pending

    async def _regenerate(self) -> Optional[GenerationResult]:
        self._publish(EventType.GENERATION_STARTED)
        try:
            result = await self._trigger.trigger(self._portfolio_id)
        except NetworkError as exc:
            self._publish(EventType.GENERATION_FAILED, {"error": exc.message})
            raise

        if result is None:
            self._publish(EventType.GENERATION_SUPPRESSED)
            return None

        self._publish(
            EventType.GENERATION_FINISHED,
            {"count": result.count, "suggestions_generated": result.suggestions_generated},
        )
        return result

    # User actions

    async def start_tracking(self) -> LifecycleSnapshot:
        """Start monthly tracking, then evaluate. Raises NetworkError."""
        await self._api.start_tracking(self._portfolio_id)
        logger.info("Tracking started for %s", self._portfolio_id)
        self.tracking_started = True
        return await self.evaluate(force=True)

    async def confirm(
        self,
        txn_id: str,
        txn_type: Optional[TransactionType] = None,
    ) -> LifecycleSnapshot:
        """
        Confirm a pending transaction and re-evaluate.

        A confirmed MONTHLY_CONTRIBUTION turns into cash the backend can
        suggest buys for, so re-evaluation waits ``monthly_contribution_delay_ms``.
        Without ``txn_type`` the type is looked up in the last loaded pending list.
        """
        if txn_type is None:
            txn_type = self._pending_types().get(txn_id)
        await self._api.confirm_transaction(self._portfolio_id, txn_id)
        self._transactions_changed({"txn_id": txn_id, "action": "confirm"})
        if txn_type == TransactionType.MONTHLY_CONTRIBUTION:
            await self._sleep(self._monthly_contribution_delay)
        return await self.evaluate(force=True)

    async def confirm_all(self, txn_ids: Optional[list[str]] = None) -> LifecycleSnapshot:
        """
        Confirm several pending transactions in one backend call and re-evaluate.

        Args:
            txn_ids: Transactions to confirm; every loaded pending transaction
                if omitted.

        A batch holding a MONTHLY_CONTRIBUTION waits
        ``batch_monthly_contribution_delay_ms`` before re-evaluating.
        Raises ValidationError for an empty batch and NetworkError when the
        backend refuses it.
        """
        txn_ids = self._batch_ids(txn_ids)
        types = self._pending_types()
        await self._api.confirm_transactions(self._portfolio_id, txn_ids)
        logger.info("Confirmed %d transactions for %s", len(txn_ids), self._portfolio_id)
        self._transactions_changed({"txn_ids": txn_ids, "action": "confirm_batch"})
        if any(types.get(txn_id) == TransactionType.MONTHLY_CONTRIBUTION for txn_id in txn_ids):
            await self._sleep(self._batch_monthly_contribution_delay)
        return await self.evaluate(force=True)

    async def reject(self, txn_id: str, reason: str = "Rejeitado pelo usuário") -> LifecycleSnapshot:
        """Reject a pending transaction and re-evaluate. Raises NetworkError."""
        await self._api.reject_transaction(self._portfolio_id, txn_id, reason)
        self._transactions_changed({"txn_id": txn_id, "action": "reject"})
        return await self.evaluate(force=True)

    async def reject_many(
        self,
        txn_ids: Optional[list[str]] = None,
        reason: str = "Rejeitado em lote",
    ) -> LifecycleSnapshot:
        """
        Reject several pending transactions, one backend call each, and re-evaluate.

        Individual failures are logged and listed in the TRANSACTIONS_UPDATED
        payload; NetworkError is raised only when nothing was rejected.
        """
        txn_ids = self._batch_ids(txn_ids)
        results = await asyncio.gather(
            *(self._api.reject_transaction(self._portfolio_id, txn_id, reason) for txn_id in txn_ids),
            return_exceptions=True,
        )

        rejected: list[str] = []
        errors: dict[str, NetworkError] = {}
        for txn_id, result in zip(txn_ids, results):
            if isinstance(result, NetworkError):
                errors[txn_id] = result
            elif isinstance(result, BaseException):
                raise result
            else:
                rejected.append(txn_id)

        if not rejected:
            raise next(iter(errors.values()))
        if errors:
            logger.warning(
                "Rejected %d of %d transactions for %s; failed: %s",
                len(rejected),
                len(txn_ids),
                self._portfolio_id,
                ", ".join(errors),
            )
        self._transactions_changed(
            {"txn_ids": rejected, "failed_ids": list(errors), "action": "reject_batch"}
        )
        return await self.evaluate(force=True)

    def pending_ids(self, month: Optional[str] = None) -> list[str]:
        """
        Ids of the last loaded pending transactions.

        Args:
            month: ``YYYY-MM`` to keep only transactions dated in that month.
        """
        return [
            txn.id
            for txn in self._snapshot.pending
            if month is None
            or (txn.txn_date is not None and txn.txn_date.strftime("%Y-%m") == month)
        ]

    async def recalculate(self) -> LifecycleSnapshot:
        """Delete every pending transaction and evaluate again from scratch."""
        deleted = await self._api.delete_pending_transactions(self._portfolio_id)
        logger.info("Deleted %d pending transactions for %s", deleted, self._portfolio_id)
        self._transactions_changed({"action": "recalculate", "deleted_count": deleted})
        return await self.evaluate(force=True)

    def invalidate(self) -> None:
        """Drop the cached snapshot of this portfolio."""
        if self._cache_repo is not None:
            self._cache_repo.remove(self._portfolio_id)
        self._publish(EventType.CACHE_INVALIDATED)

    def close(self) -> None:
        """Stop listening to the event bus."""
        self._unsubscribe()

    # Internals

    def _transition(self, target: LifecyclePhase) -> None:
        if target not in TRANSITIONS[self._phase]:
            raise InvalidTransitionError(self._phase.value, target.value)
        logger.debug("%s: %s -> %s", self._portfolio_id, self._phase.value, target.value)
        self._phase = target
        self._snapshot.phase = target

    def _set_state(self, state: Optional[UIState]) -> None:
        if state == self._snapshot.state:
            return
        self._snapshot.state = state
        self._publish(
            EventType.STATE_CHANGED,
            {
                "kind": state.kind.value if state else None,
                "pending_count": state.pending_count if state else None,
            },
        )

    def _pending_types(self) -> dict[str, TransactionType]:
        return {txn.id: txn.txn_type for txn in self._snapshot.pending}

    def _batch_ids(self, txn_ids: Optional[list[str]]) -> list[str]:
        ids = list(dict.fromkeys(self.pending_ids() if txn_ids is None else txn_ids))
        if not ids:
            raise ValidationError(f"No pending transactions selected for {self._portfolio_id}")
        return ids

    def _transactions_changed(self, payload: dict[str, Any]) -> None:
        self.invalidate()
        self._publish(EventType.TRANSACTIONS_UPDATED, payload)

    def _on_transactions_updated(self, event: SuggestionEvent) -> None:
        if event.payload.get("source") == self._source:
            return
        logger.debug("Transactions of %s changed elsewhere, dropping cache", self._portfolio_id)
        self.invalidate()

    def _publish(self, event_type: EventType, payload: Optional[dict[str, Any]] = None) -> None:
        self._event_bus.publish(
            SuggestionEvent(
                event_type=event_type,
                portfolio_id=self._portfolio_id,
                payload={**(payload or {}), "source": self._source},
            )
        )
