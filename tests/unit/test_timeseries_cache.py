"""Tests for the tiered timeseries cache."""

import asyncio

import pytest

from app.errors import FetchError, InvalidIntervalError
from app.models import CacheEntry, SeriesPoint
from app.services.timeseries import REFRESH_PRIORITY, TimeseriesCache


class Clock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class FakeFetcher:
    def __init__(self, fail=()):
        self.calls = []
        self.fail = set(fail)
        self.gate = None

    async def __call__(self, record_id, interval):
        self.calls.append((record_id, interval))
        if self.gate is not None:
            await self.gate.wait()
        await asyncio.sleep(0)
        if record_id in self.fail:
            raise FetchError(f"boom {record_id}")
        return [{"timestamp": 1, "avgHighPrice": record_id, "avgLowPrice": record_id - 1}]


class FakeStore:
    def __init__(self, entries=None, fail_save=False, fail_load=False):
        self.entries = dict(entries or {})
        self.fail_save = fail_save
        self.fail_load = fail_load
        self.last_cleanup = None
        self.cleanups = 0

    async def load(self, record_id, interval):
        if self.fail_load:
            raise OSError("disk gone")
        return self.entries.get((record_id, interval))

    async def save(self, record_id, interval, entry):
        if self.fail_save:
            raise OSError("disk full")
        self.entries[(record_id, interval)] = entry

    async def cleanup(self, now):
        expired = [k for k, e in self.entries.items() if e.expires_at < now]
        for k in expired:
            del self.entries[k]
        self.cleanups += 1
        return len(expired)

    async def get_last_cleanup(self):
        return self.last_cleanup

    async def set_last_cleanup(self, timestamp):
        self.last_cleanup = timestamp


def make_cache(fetcher=None, **kwargs):
    kwargs.setdefault("flush_delay", 0)
    return TimeseriesCache(fetcher or FakeFetcher(), **kwargs)


class TestRequest:
    def test_coalesces_identical_keys(self):
        fetcher = FakeFetcher()

        async def scenario():
            cache = make_cache(fetcher)
            return await asyncio.gather(*(cache.request(1, "1h") for _ in range(5)))

        results = asyncio.run(scenario())
        assert fetcher.calls == [(1, "1h")]
        assert all(r is results[0] for r in results)
        assert isinstance(results[0][0], SeriesPoint)
        assert results[0][0].avg_high_price == 1

    def test_ttl_honoured(self):
        fetcher = FakeFetcher()
        clock = Clock()

        async def scenario():
            cache = make_cache(fetcher, clock=clock, ttl=300)
            await cache.request(1, "5m")
            await cache.request(1, "5m")
            assert len(fetcher.calls) == 1
            clock.now += 301
            assert cache.get_sync(1, "5m") is None
            await cache.request(1, "5m")

        asyncio.run(scenario())
        assert len(fetcher.calls) == 2

    def test_get_sync_never_fetches(self):
        fetcher = FakeFetcher()
        cache = make_cache(fetcher)
        assert cache.get_sync(1, "1h") is None
        assert fetcher.calls == []

    def test_invalid_interval_fails_fast(self):
        cache = make_cache()
        with pytest.raises(InvalidIntervalError, match="Invalid interval: 2h"):
            asyncio.run(cache.request(1, "2h"))
        with pytest.raises(InvalidIntervalError):
            cache.get_sync(1, "2h")
        with pytest.raises(InvalidIntervalError):
            cache.prefetch([1], "2h")

    def test_failure_isolated_per_key(self):
        fetcher = FakeFetcher(fail={2})

        async def scenario():
            cache = make_cache(fetcher)
            results = await asyncio.gather(cache.request(1, "1h"), cache.request(2, "1h"), return_exceptions=True)
            assert cache.get_sync(2, "1h") is None
            fetcher.fail.clear()
            retried = await cache.request(2, "1h")
            return results, retried

        results, retried = asyncio.run(scenario())
        assert results[0][0].avg_high_price == 1
        assert isinstance(results[1], FetchError)
        assert retried[0].avg_high_price == 2
        assert fetcher.calls.count((2, "1h")) == 2

    def test_in_flight_key_not_fetched_twice(self):
        fetcher = FakeFetcher()

        async def scenario():
            fetcher.gate = asyncio.Event()
            cache = make_cache(fetcher)
            first = asyncio.ensure_future(cache.request(1, "1h"))
            await asyncio.sleep(0.01)
            second = asyncio.ensure_future(cache.request(1, "1h"))
            await asyncio.sleep(0.01)
            fetcher.gate.set()
            return await asyncio.gather(first, second)

        first, second = asyncio.run(scenario())
        assert fetcher.calls == [(1, "1h")]
        assert first is second


class TestBatching:
    def test_overflow_goes_to_next_flush(self):
        fetcher = FakeFetcher()

        async def scenario():
            cache = make_cache(fetcher, batch_size=20)
            results = await asyncio.gather(*(cache.request(i, "1h") for i in range(25)))
            return cache, results

        cache, results = asyncio.run(scenario())
        assert cache.flush_count == 2
        assert len(results) == 25
        assert sorted(r for r, _ in fetcher.calls) == list(range(25))

    def test_priority_order(self):
        fetcher = FakeFetcher()

        async def scenario():
            cache = make_cache(fetcher, batch_size=1)
            await asyncio.gather(
                cache.request(1, "1h", priority=0),
                cache.request(2, "1h", priority=5),
                cache.request(3, "1h", priority=1),
            )

        asyncio.run(scenario())
        assert [r for r, _ in fetcher.calls] == [2, 3, 1]

    def test_latest_caller_priority_wins(self):
        fetcher = FakeFetcher()

        async def scenario():
            cache = make_cache(fetcher, batch_size=1)
            await asyncio.gather(
                cache.request(1, "1h", priority=0),
                cache.request(2, "1h", priority=5),
                cache.request(1, "1h", priority=9),
            )

        asyncio.run(scenario())
        assert [r for r, _ in fetcher.calls] == [1, 2]


class TestDurableTier:
    def entry(self, expires_at, record_id=7):
        return CacheEntry(data=[SeriesPoint(timestamp=1, avgHighPrice=record_id)], fetched_at=0, expires_at=expires_at)

    def test_promotes_fresh_entry(self):
        fetcher = FakeFetcher()
        store = FakeStore({(7, "1h"): self.entry(expires_at=2000)})

        async def scenario():
            cache = make_cache(fetcher, store=store, clock=Clock(1000))
            data = await cache.request(7, "1h")
            return data, cache.get_sync(7, "1h")

        data, promoted = asyncio.run(scenario())
        assert fetcher.calls == []
        assert data[0].avg_high_price == 7
        assert promoted is data

    def test_expired_entry_goes_to_network(self):
        fetcher = FakeFetcher()
        store = FakeStore({(7, "1h"): self.entry(expires_at=500)})

        async def scenario():
            cache = make_cache(fetcher, store=store, clock=Clock(1000))
            await cache.request(7, "1h")

        asyncio.run(scenario())
        assert fetcher.calls == [(7, "1h")]
        assert store.entries[(7, "1h")].expires_at == 1000 + 300

    def test_write_failure_rejects_callers(self):
        async def scenario():
            cache = make_cache(store=FakeStore(fail_save=True))
            with pytest.raises(OSError):
                await cache.request(1, "1h")
            return cache.get_sync(1, "1h")

        assert asyncio.run(scenario()) is None

    def test_read_failure_falls_through(self):
        fetcher = FakeFetcher()

        async def scenario():
            cache = make_cache(fetcher, store=FakeStore(fail_load=True))
            return await cache.request(1, "1h")

        assert asyncio.run(scenario())[0].avg_high_price == 1
        assert fetcher.calls == [(1, "1h")]

    def test_sweep_gated_to_once_per_interval(self):
        clock = Clock(10_000)
        store = FakeStore({(1, "1h"): self.entry(expires_at=5000), (2, "1h"): self.entry(expires_at=20_000)})

        async def scenario():
            cache = make_cache(store=store, clock=clock, cleanup_interval=3600)
            first = await cache.maybe_cleanup()
            second = await cache.maybe_cleanup()
            clock.now += 3601
            third = await cache.maybe_cleanup()
            return first, second, third

        assert asyncio.run(scenario()) == (1, None, 0)
        assert store.cleanups == 2
        assert list(store.entries) == [(2, "1h")]

    def test_no_store_no_sweep(self):
        assert asyncio.run(make_cache().maybe_cleanup()) is None

    def test_sweep_drops_expired_memory_entries(self):
        clock = Clock(1000)

        async def scenario():
            cache = make_cache(clock=clock, ttl=60)
            await cache.request(1, "1h")
            clock.now += 30
            await cache.request(2, "1h")
            clock.now += 40
            await cache.maybe_cleanup()
            return cache.get_stats()["memory_cache_size"], cache.get_sync(2, "1h")

        size, kept = asyncio.run(scenario())
        assert size == 1
        assert kept[0].avg_high_price == 2


class TestRefreshPrefetchClear:
    def test_refresh_bypasses_tiers(self):
        fetcher = FakeFetcher()
        store = FakeStore()

        async def scenario():
            cache = make_cache(fetcher, store=store)
            await cache.request(1, "1h")
            await cache.refresh(1, "1h")

        asyncio.run(scenario())
        assert fetcher.calls == [(1, "1h"), (1, "1h")]
        assert REFRESH_PRIORITY == 100

    def test_prefetch_skips_cached_keys(self):
        fetcher = FakeFetcher()

        async def scenario():
            cache = make_cache(fetcher)
            await cache.request(1, "1h")
            queued = cache.prefetch([1, 2, 3], "1h")
            await asyncio.sleep(0.05)
            return queued, cache.get_sync(3, "1h")

        queued, data = asyncio.run(scenario())
        assert queued == 2
        assert data[0].avg_high_price == 3
        assert len(fetcher.calls) == 3

    def test_clear_cancels_queued_callers(self):
        fetcher = FakeFetcher()

        async def scenario():
            cache = make_cache(fetcher, flush_delay=10)
            task = asyncio.ensure_future(cache.request(2, "1h"))
            await asyncio.sleep(0)
            cache.clear()
            await asyncio.gather(task, return_exceptions=True)
            return task, cache.get_stats()

        task, stats = asyncio.run(scenario())
        assert task.cancelled()
        assert stats["queue_size"] == 0
        assert fetcher.calls == []


class TestSubscribers:
    def test_global_and_item_notifications(self):
        seen_all, seen_item, seen_other = [], [], []

        async def scenario():
            cache = make_cache()
            cache.subscribe(lambda rid, interval, data: seen_all.append((rid, interval)))
            cache.subscribe_to_item(1, lambda interval, data: seen_item.append(interval))
            cache.subscribe_to_item(2, lambda interval, data: seen_other.append(interval))
            await cache.request(1, "1h")

        asyncio.run(scenario())
        assert seen_all == [(1, "1h")]
        assert seen_item == ["1h"]
        assert seen_other == []

    def test_failing_subscriber_isolated(self):
        seen = []

        def broken(*_):
            raise RuntimeError("bad subscriber")

        async def scenario():
            cache = make_cache()
            cache.subscribe(broken)
            cache.subscribe(lambda *args: seen.append(args[0]))
            return await cache.request(1, "1h")

        assert asyncio.run(scenario())[0].avg_high_price == 1
        assert seen == [1]

    def test_unsubscribe(self):
        seen = []

        async def scenario():
            cache = make_cache()
            sub = cache.subscribe_to_item(1, lambda interval, data: seen.append(interval))
            assert cache.unsubscribe(sub)
            assert not cache.unsubscribe(sub)
            await cache.request(1, "1h")
            return cache.get_stats()

        stats = asyncio.run(scenario())
        assert seen == []
        assert stats["item_subscriber_count"] == 0


class TestLifecycle:
    def test_start_and_close(self):
        store = FakeStore()

        async def scenario():
            cache = make_cache(store=store)
            cache.start()
            await asyncio.sleep(0.01)
            await cache.close()
            return cache

        cache = asyncio.run(scenario())
        assert store.cleanups == 1
        assert cache._cleanup_task is None

    def test_stats(self):
        async def scenario():
            cache = make_cache()
            await cache.request(1, "1h")
            return cache.get_stats()

        stats = asyncio.run(scenario())
        assert stats["memory_cache_size"] == 1
        assert stats["queue_size"] == 0
        assert stats["flush_count"] == 1
        assert stats["fetch_count"] == 1
