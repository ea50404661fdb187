"""
Unit tests for EventBus.

Tests cover:
- Delivery filtered by event type and portfolio
- Unsubscribe (idempotent, safe during delivery)
- Failing handlers do not block other subscribers
"""

from suggestion_lifecycle.core.event_bus import EventBus, SuggestionEvent
from suggestion_lifecycle.domain.models import EventType
from tests.conftest import EventRecorder


def _event(event_type=EventType.STATE_CHANGED, portfolio_id="pf-a", **payload):
    return SuggestionEvent(event_type=event_type, portfolio_id=portfolio_id, payload=payload)


class TestSubscribe:

    def test_unfiltered_subscriber_receives_everything(self):
        bus = EventBus()
        recorder = EventRecorder()
        bus.subscribe(recorder)

        bus.publish(_event(EventType.STATUS_LOADED))
        bus.publish(_event(EventType.PENDING_LOADED, portfolio_id="pf-b"))

        assert recorder.types() == [EventType.STATUS_LOADED, EventType.PENDING_LOADED]

    def test_filters_by_type_and_portfolio(self):
        """
        GIVEN a subscriber for TRANSACTIONS_UPDATED on pf-a
        WHEN events of other types or portfolios are published
        THEN only the matching event is delivered
        """
        bus = EventBus()
        recorder = EventRecorder()
        bus.subscribe(recorder, event_type=EventType.TRANSACTIONS_UPDATED, portfolio_id="pf-a")

        bus.publish(_event(EventType.STATE_CHANGED))
        bus.publish(_event(EventType.TRANSACTIONS_UPDATED, portfolio_id="pf-b"))
        delivered = bus.publish(_event(EventType.TRANSACTIONS_UPDATED, action="confirm"))

        assert delivered == 1
        assert len(recorder.events) == 1
        assert recorder.events[0].payload == {"action": "confirm"}

    def test_publish_without_subscribers(self):
        assert EventBus().publish(_event()) == 0


class TestUnsubscribe:

    def test_unsubscribe_is_idempotent(self):
        bus = EventBus()
        unsubscribe = bus.subscribe(EventRecorder())

        unsubscribe()
        unsubscribe()

        assert bus.subscriber_count == 0

    def test_unsubscribe_during_delivery(self):
        bus = EventBus()
        recorder = EventRecorder()
        unsubscribe = None

        def once(event):
            unsubscribe()

        unsubscribe = bus.subscribe(once)
        bus.subscribe(recorder)

        bus.publish(_event())
        bus.publish(_event())

        assert len(recorder.events) == 2
        assert bus.subscriber_count == 1


class TestHandlerFailure:

    def test_failing_handler_does_not_block_others(self, caplog):
        """
        GIVEN a handler that raises
        WHEN an event is published
        THEN the next subscriber still receives it and the failure is logged
        """
        bus = EventBus()
        recorder = EventRecorder()

        def broken(event):
            raise RuntimeError("boom")

        bus.subscribe(broken)
        bus.subscribe(recorder)

        delivered = bus.publish(_event())

        assert delivered == 2
        assert len(recorder.events) == 1
        assert "Event handler failed" in caplog.text
