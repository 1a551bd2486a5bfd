"""Timeseries cache - memory, durable and network tiers with batched fetching.

``request`` looks in memory, then the durable store, then queues the key for
the next flush. A flush runs after a short batching window, fetches at most
``batch_size`` distinct keys (highest priority first) and resolves every caller
waiting on each key. Keys left over wait for the following flush.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from loguru import logger

from app.errors import InvalidIntervalError
from app.models import CacheEntry, PendingRequest, SeriesPoint, cache_key
from app.repositories.timeseries import TimeseriesRepository
from app.services.timeseries.events import EventBus, ItemCallback, Subscription, UpdateCallback
from settings import BATCH_SIZE, CLEANUP_INTERVAL, FLUSH_DELAY, TIMESERIES_TTL, VALID_INTERVALS

Fetcher = Callable[[int, str], Awaitable[list]]

REFRESH_PRIORITY = 100


class TimeseriesCache:
    """Single-process cache of price histories keyed by ``record_id:interval``."""

    def __init__(
        self,
        fetcher: Fetcher,
        store: TimeseriesRepository | None = None,
        *,
        events: EventBus | None = None,
        flush_delay: float = FLUSH_DELAY,
        batch_size: int = BATCH_SIZE,
        ttl: float = TIMESERIES_TTL,
        cleanup_interval: float = CLEANUP_INTERVAL,
        clock: Callable[[], float] = time.time,
    ):
        self._fetcher = fetcher
        self._store = store
        self.events = events or EventBus()
        self.flush_delay = flush_delay
        self.batch_size = batch_size
        self.ttl = ttl
        self.cleanup_interval = cleanup_interval
        self._clock = clock

        self._memory: dict[str, CacheEntry] = {}
        self._queue: dict[str, list[PendingRequest]] = {}
        self._in_flight: set[str] = set()
        self._flush_handle: asyncio.TimerHandle | None = None
        self._flush_task: asyncio.Task | None = None
        self._flushing = False
        self._cleanup_task: asyncio.Task | None = None
        self._tasks: set[asyncio.Task] = set()

        self.flush_count = 0
        self.fetch_count = 0

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def _validate(self, interval: str) -> None:
        if interval not in VALID_INTERVALS:
            raise InvalidIntervalError(interval, VALID_INTERVALS)

    def _fresh(self, key: str) -> CacheEntry | None:
        entry = self._memory.get(key)
        if entry is not None and entry.is_fresh(self._clock()):
            return entry
        return None

    def get_sync(self, record_id: int, interval: str) -> list[SeriesPoint] | None:
        """Fresh memory-tier data or None. Never fetches."""
        self._validate(interval)
        entry = self._fresh(cache_key(record_id, interval))
        return entry.data if entry else None

    async def _load_durable(self, record_id: int, interval: str) -> list[SeriesPoint] | None:
        if self._store is None:
            return None
        try:
            stored = await self._store.load(record_id, interval)
        except Exception as e:
            logger.error("Durable read failed for {}:{}: {}", record_id, interval, e)
            return None
        if stored is None or not stored.is_fresh(self._clock()):
            return None

        self._memory[cache_key(record_id, interval)] = stored
        logger.debug("Promoted {}:{} from durable store", record_id, interval)
        return stored.data

    async def request(self, record_id: int, interval: str, priority: int = 0) -> list[SeriesPoint]:
        """Series for a key, fetching it if neither tier holds a fresh copy.

        Raises InvalidIntervalError for unsupported intervals and the fetch
        error when the network tier fails for this key.
        """
        self._validate(interval)
        entry = self._fresh(cache_key(record_id, interval))
        if entry is not None:
            return entry.data

        stored = await self._load_durable(record_id, interval)
        if stored is not None:
            return stored

        return await self._enqueue(record_id, interval, priority)

    def prefetch(self, record_ids: Iterable[int], interval: str, priority: int = 0) -> int:
        """Queue background requests for keys not cached or queued yet.

        Must be called with a running event loop. Returns how many were queued.
        """
        self._validate(interval)
        queued = 0
        for record_id in record_ids:
            key = cache_key(record_id, interval)
            if self._fresh(key) is not None or key in self._queue:
                continue
            task = asyncio.get_running_loop().create_task(self.request(record_id, interval, priority))
            self._tasks.add(task)
            task.add_done_callback(self._prefetch_done)
            queued += 1
        return queued

    def _prefetch_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.debug("Prefetch failed: {}", task.exception())

    async def refresh(self, record_id: int, interval: str) -> list[SeriesPoint]:
        """Evict the memory entry and fetch again at elevated priority.

        A fetch already in flight for the key is not cancelled; whichever
        result lands last wins.
        """
        self._validate(interval)
        self._memory.pop(cache_key(record_id, interval), None)
        return await self._enqueue(record_id, interval, REFRESH_PRIORITY)

    # ------------------------------------------------------------------
    # Queue and flush
    # ------------------------------------------------------------------

    async def _enqueue(self, record_id: int, interval: str, priority: int) -> list[SeriesPoint]:
        future = asyncio.get_running_loop().create_future()
        key = cache_key(record_id, interval)
        self._queue.setdefault(key, []).append(PendingRequest(record_id, interval, priority, future))
        self._schedule_flush()
        return await future

    def _schedule_flush(self) -> None:
        if self._flush_handle is not None or self._flushing:
            return
        loop = asyncio.get_running_loop()
        self._flush_handle = loop.call_later(self.flush_delay, self._start_flush)

    def _start_flush(self) -> None:
        self._flush_handle = None
        self._flush_task = asyncio.get_running_loop().create_task(self._flush())

    def _select_batch(self) -> list[PendingRequest]:
        """Latest caller per waiting key, highest priority first, capped."""
        candidates = [
            pending[-1] for key, pending in self._queue.items() if pending and key not in self._in_flight
        ]
        candidates.sort(key=lambda p: p.priority, reverse=True)
        return candidates[: self.batch_size]

    async def _flush(self) -> None:
        self._flushing = True
        try:
            batch = self._select_batch()
            if not batch:
                return
            self.flush_count += 1
            waiting = len(self._queue) - len(self._in_flight)
            logger.debug("Flush #{}: fetching {} of {} waiting keys", self.flush_count, len(batch), waiting)
            await asyncio.gather(*(self._fetch_key(p.record_id, p.interval) for p in batch))
        finally:
            self._flushing = False

        if any(key not in self._in_flight for key in self._queue):
            self._schedule_flush()

    async def _fetch_key(self, record_id: int, interval: str) -> None:
        key = cache_key(record_id, interval)
        self._in_flight.add(key)
        try:
            self.fetch_count += 1
            raw = await self._fetcher(record_id, interval)
            data = [p if isinstance(p, SeriesPoint) else SeriesPoint.model_validate(p) for p in raw or []]
            fetched_at = self._clock()
            entry = CacheEntry(data=data, fetched_at=fetched_at, expires_at=fetched_at + self.ttl)
            if self._store is not None:
                await self._store.save(record_id, interval, entry)
        except Exception as e:
            logger.error("Fetch error for {}: {}", key, e)
            self._settle(key, error=e)
            return
        finally:
            self._in_flight.discard(key)

        self._memory[key] = entry
        self._settle(key, data=data)
        self.events.publish(record_id, interval, data)

    def _settle(self, key: str, data: list | None = None, error: BaseException | None = None) -> None:
        for pending in self._queue.pop(key, []):
            if pending.future.done():
                continue
            if error is not None:
                pending.future.set_exception(error)
            else:
                pending.future.set_result(data)

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def subscribe(self, callback: UpdateCallback) -> Subscription:
        return self.events.subscribe(callback)

    def subscribe_to_item(self, record_id: int, callback: ItemCallback) -> Subscription:
        return self.events.subscribe_to_item(record_id, callback)

    def unsubscribe(self, sub: Subscription) -> bool:
        return self.events.unsubscribe(sub)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def clear(self) -> None:
        """Drop memory entries and cancel every queued caller."""
        self._memory.clear()
        for pending in self._queue.values():
            for p in pending:
                if not p.future.done():
                    p.future.cancel()
        self._queue.clear()
        if self._flush_handle is not None:
            self._flush_handle.cancel()
            self._flush_handle = None
        logger.info("Timeseries cache cleared")

    async def maybe_cleanup(self) -> int | None:
        """Purge expired durable entries at most once per cleanup interval.

        Expired memory entries are dropped on every call. Returns the number
        of durable entries removed, or None when that sweep was skipped.
        """
        now = self._clock()
        self._purge_memory(now)
        if self._store is None:
            return None
        try:
            last = await self._store.get_last_cleanup()
            if last is not None and now - last <= self.cleanup_interval:
                return None
            deleted = await self._store.cleanup(now)
            await self._store.set_last_cleanup(now)
        except Exception as e:
            logger.error("Cleanup error: {}", e)
            return None
        logger.info("Cleaned up {} expired timeseries entries", deleted)
        return deleted

    def _purge_memory(self, now: float) -> int:
        expired = [key for key, entry in self._memory.items() if not entry.is_fresh(now)]
        for key in expired:
            del self._memory[key]
        if expired:
            logger.debug("Dropped {} expired memory entries", len(expired))
        return len(expired)

    async def _maintenance_loop(self) -> None:
        while True:
            await self.maybe_cleanup()
            await asyncio.sleep(self.cleanup_interval)

    def start(self) -> None:
        """Launch the maintenance loop. Must be called with a running event loop."""
        if self._cleanup_task is None or self._cleanup_task.done():
            self._cleanup_task = asyncio.get_running_loop().create_task(self._maintenance_loop())

    async def close(self) -> None:
        """Cancel timers, queued callers and background tasks."""
        self.clear()
        tasks = [t for t in (self._cleanup_task, self._flush_task, *self._tasks) if t is not None and not t.done()]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._cleanup_task = None
        self._flush_task = None
        self._tasks.clear()

    def get_stats(self) -> dict[str, Any]:
        return {
            "memory_cache_size": len(self._memory),
            "queue_size": len(self._queue),
            "in_flight": len(self._in_flight),
            "subscriber_count": self.events.subscriber_count,
            "item_subscriber_count": self.events.item_subscriber_count,
            "flush_count": self.flush_count,
            "fetch_count": self.fetch_count,
        }
