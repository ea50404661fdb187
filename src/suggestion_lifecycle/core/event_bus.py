"""Typed in-process event bus for suggestion lifecycle events."""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from suggestion_lifecycle.domain.models import EventType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SuggestionEvent:
    """A lifecycle event for one portfolio."""

    event_type: EventType
    portfolio_id: str
    payload: dict[str, Any] = field(default_factory=dict)


EventHandler = Callable[[SuggestionEvent], None]


@dataclass
class _Subscription:
    handler: EventHandler
    event_type: Optional[EventType]
    portfolio_id: Optional[str]

    def matches(self, event: SuggestionEvent) -> bool:
        if self.event_type is not None and event.event_type != self.event_type:
            return False
        if self.portfolio_id is not None and event.portfolio_id != self.portfolio_id:
            return False
        return True


class EventBus:
    """
    Synchronous publish/subscribe hub.

    Subscribers filter by event type and/or portfolio id. Delivery happens
    in subscription order on the publisher's call stack. A failing handler is
    logged and does not prevent delivery to the remaining subscribers.
    """

    def __init__(self):
        self._subscriptions: list[_Subscription] = []

    def subscribe(
        self,
        handler: EventHandler,
        event_type: Optional[EventType] = None,
        portfolio_id: Optional[str] = None,
    ) -> Callable[[], None]:
        """
        Register a handler.

        Returns:
            A callable that removes this subscription (idempotent).
        """
        subscription = _Subscription(handler, event_type, portfolio_id)
        self._subscriptions.append(subscription)

        def unsubscribe() -> None:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

        return unsubscribe

    def publish(self, event: SuggestionEvent) -> int:
        """Deliver an event; return how many handlers received it."""
        delivered = 0
        # Copy so handlers may unsubscribe while being notified
        for subscription in list(self._subscriptions):
            if not subscription.matches(event):
                continue
            try:
                subscription.handler(event)
            except Exception:
                logger.exception(
                    "Event handler failed for %s on portfolio %s",
                    event.event_type.value,
                    event.portfolio_id,
                )
            delivered += 1
        return delivered

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)
