"""
Integration tests for the SQLite suggestion cache.

Tests cover:
- Insert, replace and remove of snapshots
- Status and pending transactions survive the JSON columns
- Timestamps read back in America/Sao_Paulo
"""

from datetime import date, timedelta
from decimal import Decimal

from suggestion_lifecycle.domain.models import SuggestionSnapshot, TransactionType
from suggestion_lifecycle.repositories.sqlalchemy import SqlAlchemySuggestionCacheRepository
from tests.conftest import PORTFOLIO_ID, make_pending, make_status


# =============================================================================
# SUGGESTION CACHE REPOSITORY TESTS
# =============================================================================


class TestSuggestionCacheRepository:

    def test_get_missing_returns_none(self, cache_repo: SqlAlchemySuggestionCacheRepository):
        assert cache_repo.get(PORTFOLIO_ID) is None

    def test_set_and_get(self, cache_repo: SqlAlchemySuggestionCacheRepository, fixed_now):
        """
        GIVEN a snapshot with a status and pending transactions
        WHEN it is stored and read back
        THEN every field survives
        """
        status = make_status(
            needs_regeneration=True,
            cash_balance=Decimal("120.50"),
            has_cash_available=True,
            last_generated_at=fixed_now - timedelta(days=40),
        )
        pending = [
            make_pending("1", TransactionType.MONTHLY_CONTRIBUTION, amount="1000.00", ticker=None),
            make_pending("2", txn_type="SPLIT", txn_date=None),
        ]

        cache_repo.set(SuggestionSnapshot(PORTFOLIO_ID, status=status, pending=pending, cached_at=fixed_now))
        cached = cache_repo.get(PORTFOLIO_ID)

        assert cached.status == status
        assert cached.pending == pending
        assert cached.cached_at == fixed_now
        assert cached.is_usable is True

    def test_set_replaces_existing(self, cache_repo: SqlAlchemySuggestionCacheRepository, fixed_now):
        cache_repo.set(SuggestionSnapshot(PORTFOLIO_ID, status=make_status(), pending=[make_pending("1")], cached_at=fixed_now))

        cache_repo.set(SuggestionSnapshot(PORTFOLIO_ID, status=make_status(is_recent=True), pending=[], cached_at=fixed_now))
        cached = cache_repo.get(PORTFOLIO_ID)

        assert cached.status.is_recent is True
        assert cached.pending == []
        assert cached.is_usable is False

    def test_snapshot_without_status(self, cache_repo: SqlAlchemySuggestionCacheRepository):
        stored = cache_repo.set(SuggestionSnapshot(PORTFOLIO_ID, pending=[make_pending("1")]))

        assert stored.status is None
        assert stored.cached_at is not None
        assert stored.is_usable is False

    def test_remove(self, cache_repo: SqlAlchemySuggestionCacheRepository, fixed_now):
        cache_repo.set(SuggestionSnapshot(PORTFOLIO_ID, status=make_status(), cached_at=fixed_now))
        cache_repo.set(SuggestionSnapshot("pf-other", status=make_status(), cached_at=fixed_now))

        cache_repo.remove(PORTFOLIO_ID)
        cache_repo.remove(PORTFOLIO_ID)

        assert cache_repo.get(PORTFOLIO_ID) is None
        assert cache_repo.get("pf-other") is not None

    def test_pending_dates_are_calendar_days(self, cache_repo: SqlAlchemySuggestionCacheRepository, fixed_now):
        cache_repo.set(
            SuggestionSnapshot(PORTFOLIO_ID, status=make_status(), pending=[make_pending("1")], cached_at=fixed_now)
        )

        assert cache_repo.get(PORTFOLIO_ID).pending[0].txn_date == date(2024, 6, 1)
