"""Application context for in-process service management.

Wires the suggestions backend client, cache, event bus and one lifecycle
controller per portfolio. Used by the FastAPI app and by callers that
embed the controller directly.
"""

import asyncio
from typing import Optional

from suggestion_lifecycle.config.settings import Settings, get_settings
from suggestion_lifecycle.core.event_bus import EventBus
from suggestion_lifecycle.providers.http_provider import HttpSuggestionApi
from suggestion_lifecycle.providers.stub_provider import StubSuggestionApi
from suggestion_lifecycle.providers.suggestion_api import SuggestionApi
from suggestion_lifecycle.repositories.sqlalchemy.database import get_session
from suggestion_lifecycle.repositories.sqlalchemy import SqlAlchemySuggestionCacheRepository
from suggestion_lifecycle.services import (
    PendingCountFetcher,
    RegenerationTrigger,
    StatusFetcher,
    SuggestionLifecycleController,
)
from suggestion_lifecycle.services.lifecycle_controller import Sleep


class AppContext:
    """
    Application context providing access to all lifecycle services.

    Controllers created here share one RegenerationTrigger, so the
    duplicate-trigger latch covers every view of a portfolio in the process.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        api: Optional[SuggestionApi] = None,
        session=None,
        sleep: Sleep = asyncio.sleep,
    ):
        """
        Initialize application context.

        Args:
            settings: Settings to use; the global settings if not provided.
            api: Suggestions backend; an HttpSuggestionApi if not provided.
            session: SQLAlchemy session for the cache; one from the global
                session factory if not provided.
            sleep: Awaitable used for settle delays (injectable for tests).
        """
        self._settings = settings or get_settings()
        self._api = api
        self._owns_api = api is None
        self._session = session
        self._sleep = sleep
        self._event_bus = EventBus()
        self._trigger: Optional[RegenerationTrigger] = None
        self._cache_repo: Optional[SqlAlchemySuggestionCacheRepository] = None
        self._controllers: dict[str, SuggestionLifecycleController] = {}

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    @property
    def api(self) -> SuggestionApi:
        """Get the suggestions backend client."""
        if self._api is None and self._settings.use_stub_backend:
            self._api = StubSuggestionApi(
                recency_window_days=self._settings.recency_window_days,
                min_cash_available=self._settings.min_cash_available,
            )
        elif self._api is None:
            self._api = HttpSuggestionApi(
                base_url=self._settings.api_base_url,
                timeout_seconds=self._settings.request_timeout_seconds,
            )
        return self._api

    @property
    def trigger(self) -> RegenerationTrigger:
        """Get the shared RegenerationTrigger."""
        if self._trigger is None:
            self._trigger = RegenerationTrigger(
                api=self.api,
                settle_delay_ms=self._settings.settle_delay_ms,
                empty_settle_delay_ms=self._settings.empty_settle_delay_ms,
            )
        return self._trigger

    @property
    def cache_repo(self) -> Optional[SqlAlchemySuggestionCacheRepository]:
        """Get the suggestion cache, or None when caching is disabled."""
        if not self._settings.cache_enabled:
            return None
        if self._cache_repo is None:
            if self._session is None:
                self._session = get_session()
            self._cache_repo = SqlAlchemySuggestionCacheRepository(self._session)
        return self._cache_repo

    def controller(
        self,
        portfolio_id: str,
        tracking_started: Optional[bool] = None,
    ) -> SuggestionLifecycleController:
        """
        Get or create the controller for a portfolio.

        ``tracking_started`` updates an existing controller when given.
        """
        controller = self._controllers.get(portfolio_id)
        if controller is None:
            controller = SuggestionLifecycleController(
                portfolio_id=portfolio_id,
                api=self.api,
                status_fetcher=StatusFetcher(self.api),
                pending_fetcher=PendingCountFetcher(
                    self.api,
                    cleanup_duplicates=self._settings.cleanup_duplicates,
                ),
                trigger=self.trigger,
                event_bus=self._event_bus,
                cache_repo=self.cache_repo,
                tracking_started=bool(tracking_started),
                max_generations_per_cycle=self._settings.max_generations_per_cycle,
                monthly_contribution_delay_ms=self._settings.monthly_contribution_delay_ms,
                batch_monthly_contribution_delay_ms=(
                    self._settings.batch_monthly_contribution_delay_ms
                ),
                sleep=self._sleep,
            )
            self._controllers[portfolio_id] = controller
        elif tracking_started is not None:
            controller.tracking_started = tracking_started
        return controller

    def find_controller(self, portfolio_id: str) -> Optional[SuggestionLifecycleController]:
        """Get the controller for a portfolio without creating one."""
        return self._controllers.get(portfolio_id)

    async def aclose(self) -> None:
        """Clean up resources."""
        for controller in self._controllers.values():
            controller.close()
        self._controllers.clear()
        if self._owns_api and isinstance(self._api, HttpSuggestionApi):
            await self._api.aclose()
        if self._session is not None:
            self._session.close()
            self._session = None
        self._cache_repo = None
