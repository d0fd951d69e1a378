"""Publish/subscribe channel for user-facing notifications.

The bus is created once per application and handed to whoever needs to
publish or listen, there is no module level instance.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class NotificationVariant(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass(frozen=True, slots=True)
class Notification:
    title: str
    description: str | None = None
    variant: NotificationVariant = NotificationVariant.DEFAULT


Subscriber = Callable[[Notification], None]


class NotificationBus:
    """Fan notifications out to subscribers and keep a short history."""

    def __init__(self, *, history_limit: int = 50) -> None:
        self._subscribers: list[Subscriber] = []
        self._history: deque[Notification] = deque(maxlen=history_limit)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` and return a disposer that unregisters it."""
        self._subscribers.append(callback)

        def dispose() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return dispose

    def publish(self, notification: Notification) -> None:
        self._history.append(notification)
        for callback in list(self._subscribers):
            try:
                callback(notification)
            except Exception:  # noqa: BLE001
                logger.exception(
                    "notification.subscriber_failed",
                    extra={"title": notification.title},
                )

    def success(self, title: str, description: str | None = None) -> Notification:
        notification = Notification(title=title, description=description)
        self.publish(notification)
        return notification

    def error(self, description: str, *, title: str = "Error") -> Notification:
        notification = Notification(
            title=title,
            description=description,
            variant=NotificationVariant.DESTRUCTIVE,
        )
        self.publish(notification)
        return notification

    def recent(self, limit: int | None = None) -> list[Notification]:
        """Return the newest notifications first."""
        items = list(reversed(self._history))
        if limit is not None:
            return items[:limit]
        return items

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)


__all__ = ["Notification", "NotificationBus", "NotificationVariant", "Subscriber"]
