"""
Pytest configuration and fixtures for suggestion lifecycle tests.

This module provides:
- In-memory SQLite database fixtures for the suggestion cache
- Scripted and failing suggestions backends that record their calls
- A deterministic stub backend with a fixed clock
- A sleep recorder so settle delays never block
- Controller, AppContext and FastAPI client fixtures
"""

import asyncio
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

import pytest
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker, Session
from fastapi.testclient import TestClient

from suggestion_lifecycle.app_context import AppContext
from suggestion_lifecycle.config.settings import Settings, reset_settings
from suggestion_lifecycle.core.event_bus import EventBus, SuggestionEvent
from suggestion_lifecycle.core.exceptions import NetworkError
from suggestion_lifecycle.core.timezone import BRT_TZ
from suggestion_lifecycle.domain.models import (
    GenerationResult,
    PendingTransaction,
    SuggestionStatus,
    TransactionType,
)
from suggestion_lifecycle.main import app
from suggestion_lifecycle.providers.stub_provider import StubSuggestionApi
from suggestion_lifecycle.repositories.sqlalchemy.database import Base
# Import ORM models to register them with Base before creating tables
from suggestion_lifecycle.repositories.sqlalchemy import orm_models  # noqa: F401
from suggestion_lifecycle.repositories.sqlalchemy import SqlAlchemySuggestionCacheRepository
from suggestion_lifecycle.services import (
    PendingCountFetcher,
    RegenerationTrigger,
    StatusFetcher,
    SuggestionLifecycleController,
)


PORTFOLIO_ID = "pf-001"


# =============================================================================
# TIME HELPERS
# =============================================================================


def brt_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 10,
    minute: int = 0,
    second: int = 0,
) -> datetime:
    """Create a localized datetime in America/Sao_Paulo timezone."""
    return BRT_TZ.localize(datetime(year, month, day, hour, minute, second))


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed 'now' timestamp for deterministic tests."""
    return brt_datetime(2024, 6, 15, 14, 30, 0)


def run(coro):
    """Drive a coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)


# =============================================================================
# DOMAIN FACTORIES
# =============================================================================


def make_status(
    is_recent: bool = False,
    needs_regeneration: bool = False,
    has_cash_available: bool = False,
    has_pending_buy_suggestions: bool = False,
    cash_balance: Decimal = Decimal("0"),
    last_generated_at: Optional[datetime] = None,
) -> SuggestionStatus:
    """Build a SuggestionStatus with everything off unless stated."""
    return SuggestionStatus(
        last_suggestions_generated_at=last_generated_at,
        needs_regeneration=needs_regeneration,
        is_recent=is_recent,
        cash_balance=cash_balance,
        has_cash_available=has_cash_available,
        has_pending_buy_suggestions=has_pending_buy_suggestions,
    )


def make_pending(
    txn_id: str,
    txn_type: TransactionType = TransactionType.BUY,
    amount: str = "100.00",
    ticker: Optional[str] = "PETR4",
    txn_date: Optional[date] = date(2024, 6, 1),
) -> PendingTransaction:
    """Build a PENDING transaction."""
    return PendingTransaction(
        id=txn_id,
        txn_type=txn_type,
        amount=Decimal(amount),
        txn_date=txn_date,
        ticker=ticker,
    )


# =============================================================================
# BACKEND DOUBLES
# =============================================================================


class ScriptedSuggestionApi:
    """
    Suggestions backend replaying scripted responses.

    Each read returns the next scripted value and then sticks to the last
    one. Every call is appended to ``calls`` so tests can assert ordering.
    """

    def __init__(
        self,
        statuses: Sequence[SuggestionStatus] = (),
        pending: Sequence[list[PendingTransaction]] = ((),),
        generation: GenerationResult = GenerationResult(count=2, suggestions_generated=2),
        fail_on: Sequence[str] = (),
        calls: Optional[list[str]] = None,
    ):
        self._statuses = list(statuses)
        self._pending = [list(p) for p in pending]
        self._generation = generation
        self.fail_on = set(fail_on)
        self._status_reads = 0
        self._pending_reads = 0
        self.calls: list[str] = calls if calls is not None else []
        self.confirmed_batches: list[list[str]] = []

    def _record(self, name: str, key: Optional[str] = None) -> None:
        self.calls.append(name)
        # "reject" fails every reject call, "reject:t-2" only the one for t-2
        if name in self.fail_on or f"{name}:{key}" in self.fail_on:
            raise NetworkError(f"{name} returned 500", status_code=500, url=f"/{name}")

    def count(self, name: str) -> int:
        return self.calls.count(name)

    async def get_status(self, portfolio_id: str) -> SuggestionStatus:
        self._record("get_status")
        status = self._statuses[min(self._status_reads, len(self._statuses) - 1)]
        self._status_reads += 1
        return status

    async def list_pending_transactions(self, portfolio_id: str) -> list[PendingTransaction]:
        self._record("list_pending")
        pending = self._pending[min(self._pending_reads, len(self._pending) - 1)]
        self._pending_reads += 1
        return list(pending)

    async def create_contribution_suggestions(self, portfolio_id: str) -> GenerationResult:
        self._record("create")
        return self._generation

    async def start_tracking(self, portfolio_id: str) -> None:
        self._record("start_tracking")

    async def delete_pending_transactions(self, portfolio_id: str) -> int:
        self._record("delete_pending")
        return 3

    async def cleanup_duplicates(self, portfolio_id: str) -> None:
        self._record("cleanup_duplicates")

    async def confirm_transaction(self, portfolio_id: str, txn_id: str) -> None:
        self._record("confirm")

    async def confirm_transactions(self, portfolio_id: str, txn_ids: list[str]) -> None:
        self._record("confirm_batch")
        self.confirmed_batches.append(list(txn_ids))

    async def reject_transaction(self, portfolio_id: str, txn_id: str, reason: str) -> None:
        self._record("reject", txn_id)


class BlockingSuggestionApi(ScriptedSuggestionApi):
    """Scripted backend whose create call waits until ``release`` is set."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.release: Optional[asyncio.Event] = None

    async def create_contribution_suggestions(self, portfolio_id: str) -> GenerationResult:
        self._record("create")
        if self.release is None:
            self.release = asyncio.Event()
        await self.release.wait()
        return self._generation


class SleepRecorder:
    """Awaitable stand-in for asyncio.sleep that records requested delays."""

    def __init__(self, calls: Optional[list[str]] = None):
        self.delays: list[float] = []
        self._calls = calls

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        if self._calls is not None:
            self._calls.append(f"sleep:{seconds}")


class EventRecorder:
    """Event bus subscriber collecting every event."""

    def __init__(self):
        self.events: list[SuggestionEvent] = []

    def __call__(self, event: SuggestionEvent) -> None:
        self.events.append(event)

    def types(self) -> list:
        return [e.event_type for e in self.events]


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_engine():
    """Create test database engine with shared in-memory SQLite."""
    reset_settings()

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_session(test_engine) -> Session:
    """Create test database session."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def cache_repo(test_session) -> SqlAlchemySuggestionCacheRepository:
    """Provide test SuggestionCacheRepository."""
    return SqlAlchemySuggestionCacheRepository(test_session)


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def event_recorder(event_bus) -> EventRecorder:
    """Subscribe a recorder to every event on the test bus."""
    recorder = EventRecorder()
    event_bus.subscribe(recorder)
    return recorder


@pytest.fixture
def stub_api(fixed_now) -> StubSuggestionApi:
    """Provide the in-memory backend with a frozen clock."""
    return StubSuggestionApi(clock=lambda: fixed_now)


def build_controller(
    api,
    event_bus: EventBus,
    sleep: SleepRecorder,
    cache_repo=None,
    tracking_started: bool = True,
    trigger: Optional[RegenerationTrigger] = None,
    portfolio_id: str = PORTFOLIO_ID,
    max_generations_per_cycle: int = 1,
) -> SuggestionLifecycleController:
    """Wire a controller the way AppContext does."""
    return SuggestionLifecycleController(
        portfolio_id=portfolio_id,
        api=api,
        status_fetcher=StatusFetcher(api),
        pending_fetcher=PendingCountFetcher(api),
        trigger=trigger or RegenerationTrigger(api),
        event_bus=event_bus,
        cache_repo=cache_repo,
        tracking_started=tracking_started,
        max_generations_per_cycle=max_generations_per_cycle,
        sleep=sleep,
    )


# =============================================================================
# APPLICATION FIXTURES
# =============================================================================


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def app_context(stub_api, test_session, sleep_recorder) -> AppContext:
    """Provide an AppContext backed by the stub backend and the test database."""
    settings = Settings(database_url="sqlite:///:memory:")
    return AppContext(
        settings=settings,
        api=stub_api,
        session=test_session,
        sleep=sleep_recorder,
    )


@pytest.fixture
def client(app_context) -> TestClient:
    """Provide FastAPI test client bound to the test AppContext."""
    app.state.context = app_context
    with TestClient(app) as c:
        yield c
    app.state.context = None
