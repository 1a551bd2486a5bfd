"""Event bus for timeseries updates - global and per-record topics."""

import itertools
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from loguru import logger

UpdateCallback = Callable[[int, str, list], Any]
ItemCallback = Callable[[str, list], Any]


@dataclass(frozen=True)
class Subscription:
    """Token returned by subscribe; pass it back to unsubscribe."""

    id: int
    record_id: int | None = None


class EventBus:
    """Synchronous fan-out; a failing subscriber never affects the others."""

    def __init__(self):
        self._ids = itertools.count(1)
        self._global: dict[int, UpdateCallback] = {}
        self._by_record: dict[int, dict[int, ItemCallback]] = {}

    def subscribe(self, callback: UpdateCallback) -> Subscription:
        """Receive ``(record_id, interval, data)`` for every update."""
        sub = Subscription(next(self._ids))
        self._global[sub.id] = callback
        return sub

    def subscribe_to_item(self, record_id: int, callback: ItemCallback) -> Subscription:
        """Receive ``(interval, data)`` for updates to one record."""
        sub = Subscription(next(self._ids), record_id)
        self._by_record.setdefault(record_id, {})[sub.id] = callback
        return sub

    def unsubscribe(self, sub: Subscription) -> bool:
        """Remove a subscription; False if it was already gone."""
        if sub.record_id is None:
            return self._global.pop(sub.id, None) is not None

        callbacks = self._by_record.get(sub.record_id)
        if not callbacks or callbacks.pop(sub.id, None) is None:
            return False
        if not callbacks:
            del self._by_record[sub.record_id]
        return True

    def publish(self, record_id: int, interval: str, data: list) -> None:
        for callback in list(self._global.values()):
            try:
                callback(record_id, interval, data)
            except Exception as e:
                logger.error("Subscriber error for {}:{}: {}", record_id, interval, e)

        for callback in list(self._by_record.get(record_id, {}).values()):
            try:
                callback(interval, data)
            except Exception as e:
                logger.error("Item {} subscriber error: {}", record_id, e)

    @property
    def subscriber_count(self) -> int:
        return len(self._global)

    @property
    def item_subscriber_count(self) -> int:
        """Number of records with at least one subscriber."""
        return len(self._by_record)

    def clear(self) -> None:
        self._global.clear()
        self._by_record.clear()
