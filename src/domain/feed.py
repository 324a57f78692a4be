"""In-process change notifications for table mutations."""

from __future__ import annotations

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

PEOPLE_TABLE = "people"
VOTES_TABLE = "votes"
PHOTOS_TABLE = "photos"

Subscriber = Callable[[str], None]


class ChangeFeed:
    """Fan out ``publish(table)`` calls to every subscriber.

    A failing subscriber is logged and skipped; it never fails the write that
    triggered the notification.
    """

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, table: str) -> None:
        for callback in list(self._subscribers):
            try:
                callback(table)
            except Exception:
                logger.exception("change subscriber failed table=%s", table)


__all__ = ["ChangeFeed", "PEOPLE_TABLE", "PHOTOS_TABLE", "Subscriber", "VOTES_TABLE"]
