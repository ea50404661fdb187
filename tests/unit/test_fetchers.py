"""
Unit tests for StatusFetcher and PendingCountFetcher.

Tests cover:
- Status pass-through and error propagation
- Rebalancing transactions excluded from the pending count
- Duplicate cleanup followed by a single re-fetch
"""

from datetime import date

import pytest

from suggestion_lifecycle.core.exceptions import NetworkError
from suggestion_lifecycle.domain.models import TransactionType
from suggestion_lifecycle.services import PendingCountFetcher, StatusFetcher
from suggestion_lifecycle.services.pending_count_fetcher import contribution_only, has_duplicates
from tests.conftest import (
    PORTFOLIO_ID,
    ScriptedSuggestionApi,
    make_pending,
    make_status,
    run,
)


# =============================================================================
# STATUS FETCHER
# =============================================================================


class TestStatusFetcher:

    def test_returns_backend_status(self):
        status = make_status(is_recent=True)
        api = ScriptedSuggestionApi(statuses=[status])

        assert run(StatusFetcher(api).fetch(PORTFOLIO_ID)) == status

    def test_network_error_propagates(self):
        api = ScriptedSuggestionApi(statuses=[make_status()], fail_on=["get_status"])

        with pytest.raises(NetworkError) as exc_info:
            run(StatusFetcher(api).fetch(PORTFOLIO_ID))

        assert exc_info.value.status_code == 500


# =============================================================================
# PENDING COUNT FETCHER
# =============================================================================


class TestPendingCountFetcher:

    def test_rebalancing_transactions_are_excluded(self):
        """
        GIVEN two contribution and two rebalancing pending transactions
        WHEN the count is fetched
        THEN only the contribution transactions are counted
        """
        api = ScriptedSuggestionApi(pending=[[
            make_pending("1", TransactionType.MONTHLY_CONTRIBUTION, ticker=None),
            make_pending("2", TransactionType.BUY, ticker="VALE3"),
            make_pending("3", TransactionType.SELL_REBALANCE, ticker="ITUB4"),
            make_pending("4", TransactionType.BUY_REBALANCE, ticker="PETR4"),
        ]])

        assert run(PendingCountFetcher(api).fetch(PORTFOLIO_ID)) == 2

    def test_empty_list_counts_zero(self):
        api = ScriptedSuggestionApi(pending=[[]])

        assert run(PendingCountFetcher(api).fetch(PORTFOLIO_ID)) == 0

    def test_duplicates_trigger_cleanup_and_refetch(self):
        """
        GIVEN two pending BUYs for the same ticker and date
        WHEN the pending list is fetched
        THEN cleanup is requested once and the list is read again
        """
        duplicated = [make_pending("1"), make_pending("2")]
        cleaned = [make_pending("1")]
        api = ScriptedSuggestionApi(pending=[duplicated, cleaned])

        pending = run(PendingCountFetcher(api).fetch_pending(PORTFOLIO_ID))

        assert [t.id for t in pending] == ["1"]
        assert api.calls == ["list_pending", "cleanup_duplicates", "list_pending"]

    def test_cleanup_disabled_keeps_duplicates(self):
        api = ScriptedSuggestionApi(pending=[[make_pending("1"), make_pending("2")]])

        count = run(PendingCountFetcher(api, cleanup_duplicates=False).fetch(PORTFOLIO_ID))

        assert count == 2
        assert api.count("cleanup_duplicates") == 0

    def test_list_failure_propagates(self):
        api = ScriptedSuggestionApi(fail_on=["list_pending"])

        with pytest.raises(NetworkError):
            run(PendingCountFetcher(api).fetch(PORTFOLIO_ID))


class TestHelpers:

    def test_contribution_only_keeps_unknown_types(self):
        txns = [
            make_pending("1", txn_type="SOMETHING_NEW"),
            make_pending("2", TransactionType.SELL_REBALANCE),
        ]

        assert [t.id for t in contribution_only(txns)] == ["1"]

    def test_has_duplicates_uses_date_type_and_ticker(self):
        same_day = [make_pending("1"), make_pending("2", ticker="VALE3")]
        other_day = [make_pending("1"), make_pending("2", txn_date=date(2024, 5, 1))]

        assert has_duplicates(same_day) is False
        assert has_duplicates(other_day) is False
        assert has_duplicates([make_pending("1"), make_pending("2")]) is True
