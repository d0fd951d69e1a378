from __future__ import annotations

import logging

from src.adlayout.notifications import Notification, NotificationBus, NotificationVariant


def test_subscribe_receives_published_notifications_until_disposed():
    bus = NotificationBus()
    received: list[Notification] = []

    dispose = bus.subscribe(received.append)
    bus.success("Saved", "Layout updated")
    dispose()
    bus.success("Ignored")

    assert received == [Notification(title="Saved", description="Layout updated")]
    assert bus.subscriber_count == 0


def test_dispose_twice_is_harmless():
    bus = NotificationBus()
    dispose = bus.subscribe(lambda _: None)

    dispose()
    dispose()

    assert bus.subscriber_count == 0


def test_error_is_destructive_with_default_title():
    bus = NotificationBus()

    notification = bus.error("boom")

    assert notification.title == "Error"
    assert notification.description == "boom"
    assert notification.variant is NotificationVariant.DESTRUCTIVE


def test_recent_returns_newest_first_and_respects_history_limit():
    bus = NotificationBus(history_limit=2)

    bus.success("one")
    bus.success("two")
    bus.success("three")

    assert [item.title for item in bus.recent()] == ["three", "two"]
    assert [item.title for item in bus.recent(1)] == ["three"]


def test_failing_subscriber_does_not_block_others(caplog):
    bus = NotificationBus()
    received: list[str] = []

    def broken(_: Notification) -> None:
        raise RuntimeError("listener down")

    bus.subscribe(broken)
    bus.subscribe(lambda item: received.append(item.title))

    with caplog.at_level(logging.ERROR):
        bus.success("Assigned")

    assert received == ["Assigned"]
    assert "notification.subscriber_failed" in caplog.text
