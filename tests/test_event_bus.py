"""Tests for the in-process event bus and the activity log subscriber."""

import logging

import pytest

from dcims.activity import service as activity_service
from dcims.events.bus import Event, EventBus, Topic, bus


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def event():
    return Event(
        topic=Topic.DASHBOARD_CHANGED,
        action="dashboard_updated",
        user_id="U001",
        entity_type="dashboard",
        entity_id="D001",
        details={"version": 2},
    )


# =============================================================================
# EventBus
# =============================================================================


class TestEventBus:
    def test_publish_in_subscription_order(self, event_bus, event):
        seen = []
        event_bus.subscribe(Topic.DASHBOARD_CHANGED, lambda e: seen.append(("first", e.action)))
        event_bus.subscribe(Topic.DASHBOARD_CHANGED, lambda e: seen.append(("second", e.action)))

        assert event_bus.publish(event) == 2
        assert seen == [("first", "dashboard_updated"), ("second", "dashboard_updated")]

    def test_only_matching_topic(self, event_bus, event):
        seen = []
        event_bus.subscribe(Topic.SERVERS_CHANGED, seen.append)
        assert event_bus.publish(event) == 0
        assert seen == []

    def test_subscribe_twice_is_noop(self, event_bus, event):
        seen = []
        event_bus.subscribe(Topic.DASHBOARD_CHANGED, seen.append)
        event_bus.subscribe(Topic.DASHBOARD_CHANGED, seen.append)
        event_bus.publish(event)
        assert seen == [event]

    def test_unsubscribe(self, event_bus, event):
        seen = []
        event_bus.subscribe(Topic.DASHBOARD_CHANGED, seen.append)
        event_bus.unsubscribe(Topic.DASHBOARD_CHANGED, seen.append)
        assert event_bus.publish(event) == 0
        assert event_bus.subscribers(Topic.DASHBOARD_CHANGED) == []

    def test_failing_subscriber_logged_and_skipped(self, event_bus, event, caplog):
        seen = []

        def broken(e):
            raise RuntimeError("boom")

        event_bus.subscribe(Topic.DASHBOARD_CHANGED, broken)
        event_bus.subscribe(Topic.DASHBOARD_CHANGED, seen.append)

        with caplog.at_level(logging.ERROR, logger="dcims.events.bus"):
            delivered = event_bus.publish(event)

        assert delivered == 1
        assert seen == [event]
        assert "broken" in caplog.text
        assert "boom" in caplog.text

    def test_clear(self, event_bus, event):
        event_bus.subscribe(Topic.DASHBOARD_CHANGED, lambda e: None)
        event_bus.clear()
        assert event_bus.publish(event) == 0


# =============================================================================
# Activity logging subscriber
# =============================================================================


class TestActivitySubscriber:
    def test_record_event_persists_topic(self, monkeypatch, event):
        calls = []
        monkeypatch.setattr(
            activity_service.repository,
            "insert_activity",
            lambda *args: calls.append(args),
        )

        activity_service.record_event(event)

        assert calls == [
            (
                "U001",
                "dashboard_updated",
                "dashboard",
                "D001",
                {"topic": "dashboard_changed", "version": 2},
            )
        ]

    def test_registers_on_every_topic(self):
        activity_service.register_activity_logging(bus)
        for topic in Topic:
            assert bus.subscribers(topic) == [activity_service.record_event]

    def test_store_failure_does_not_reach_publisher(self, monkeypatch, event):
        def unavailable(*args):
            raise ValueError("DATABASE_URL missing")

        monkeypatch.setattr(activity_service.repository, "insert_activity", unavailable)
        activity_service.register_activity_logging(bus)

        assert bus.publish(event) == 0
