import asyncio
import pytest
from app.core.cache import CacheRegistry, TTLCache


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class CallCounter:
    def __init__(self, value="value"):
        self.value = value
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.value


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCache("query", ttl=60, max_size=3, clock=clock)


@pytest.mark.asyncio
async def test_get_runs_producer_once_while_entry_is_live(cache, clock):
    producer = CallCounter(["row"])
    assert await cache.get("videos:list:{}", producer) == ["row"]
    clock.advance(59)
    assert await cache.get("videos:list:{}", producer) == ["row"]
    assert producer.calls == 1
    assert cache.hit_count == 1
    assert cache.miss_count == 1


@pytest.mark.asyncio
async def test_expired_entry_is_never_served(cache, clock):
    producer = CallCounter()
    await cache.get("k", producer)
    clock.advance(61)
    await cache.get("k", producer)
    assert producer.calls == 2
    assert cache.miss_count == 2


@pytest.mark.asyncio
async def test_entry_expires_exactly_at_ttl(cache, clock):
    cache.set("k", 1)
    clock.advance(60)
    assert "k" not in cache


@pytest.mark.asyncio
async def test_hit_increments_access_count(cache):
    producer = CallCounter()
    for _ in range(3):
        await cache.get("k", producer)
    entry = cache.get_entries()[0]
    assert entry["access_count"] == 3


@pytest.mark.asyncio
async def test_async_producer_is_awaited(cache):
    async def producer():
        await asyncio.sleep(0)
        return {"total": 4}

    assert await cache.get("k", producer) == {"total": 4}
    assert "k" in cache


@pytest.mark.asyncio
async def test_producer_failure_propagates_and_is_not_cached(cache):
    def failing():
        raise RuntimeError("database unavailable")

    with pytest.raises(RuntimeError, match="database unavailable"):
        await cache.get("k", failing)
    assert "k" not in cache
    assert len(cache) == 0

    producer = CallCounter("recovered")
    assert await cache.get("k", producer) == "recovered"
    assert producer.calls == 1


@pytest.mark.asyncio
async def test_size_never_exceeds_max_size(cache, clock):
    for i in range(10):
        clock.advance(1)
        await cache.get(f"k{i}", CallCounter(i))
        assert len(cache) <= cache.max_size
    assert len(cache) == 3


def test_full_cache_evicts_oldest_created_entry(cache, clock):
    cache.set("first", 1)
    clock.advance(1)
    cache.set("second", 2)
    clock.advance(1)
    cache.set("third", 3)
    clock.advance(1)
    cache.set("fourth", 4)
    assert "first" not in cache
    assert all(key in cache for key in ("second", "third", "fourth"))


def test_replacing_existing_key_does_not_evict(cache, clock):
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)
    clock.advance(5)
    cache.set("a", 10)
    assert len(cache) == 3
    assert all(key in cache for key in ("a", "b", "c"))


def test_delete_reports_whether_key_existed(cache):
    cache.set("k", 1)
    assert cache.delete("k") is True
    assert cache.delete("k") is False


@pytest.mark.asyncio
async def test_invalidate_pattern_only_clears_matching_keys():
    cache = TTLCache("query", ttl=60, max_size=10, clock=FakeClock())
    videos = CallCounter("videos")
    users = CallCounter("users")
    await cache.get('videos:list:{"page":1}', videos)
    await cache.get('videos:detail:{"id":3}', videos)
    await cache.get('users:list:{"page":1}', users)

    assert cache.invalidate_pattern("^videos:.*") == 2

    await cache.get('videos:list:{"page":1}', videos)
    await cache.get('users:list:{"page":1}', users)
    assert videos.calls == 3
    assert users.calls == 1


@pytest.mark.asyncio
async def test_result_invalidated_while_computing_is_not_stored(cache):
    key = 'videos:list:{"page":1}'

    async def racing_write():
        cache.invalidate_pattern("^videos:")
        return ["stale row"]

    assert await cache.get(key, racing_write) == ["stale row"]
    assert key not in cache
    assert cache.miss_count == 1

    producer = CallCounter(["fresh row"])
    assert await cache.get(key, producer) == ["fresh row"]
    assert await cache.get(key, producer) == ["fresh row"]
    assert producer.calls == 1


def test_invalidate_pattern_with_no_match_is_not_an_error(cache):
    cache.set("users:list:{}", 1)
    assert cache.invalidate_pattern("^zones:") == 0
    assert len(cache) == 1


@pytest.mark.asyncio
async def test_clear_removes_entries_and_resets_counters(cache):
    await cache.get("k", CallCounter())
    await cache.get("k", CallCounter())
    cache.clear()
    stats = cache.get_stats()
    assert stats["size"] == 0
    assert stats["hit_count"] == 0
    assert stats["miss_count"] == 0


def test_sweep_removes_only_expired_entries(cache, clock):
    cache.set("old", 1)
    clock.advance(30)
    cache.set("new", 2)
    clock.advance(31)
    assert cache.sweep() == 1
    assert "new" in cache
    assert len(cache) == 1


def test_stats_hit_rate_is_zero_without_requests(cache):
    stats = cache.get_stats()
    assert stats["hit_rate"] == 0.0
    assert stats["max_size"] == 3
    assert stats["ttl"] == 60


@pytest.mark.asyncio
async def test_stats_hit_rate(cache):
    producer = CallCounter()
    for _ in range(4):
        await cache.get("k", producer)
    assert cache.get_stats()["hit_rate"] == 0.75


def test_entries_truncate_long_keys(cache, clock):
    cache.set("x" * 150, 1)
    clock.advance(12)
    entry = cache.get_entries(limit=5)[0]
    assert entry["key"] == "x" * 100 + "..."
    assert entry["age_seconds"] == 12
    assert "created_at" in entry


def test_counters_are_read_only(cache):
    with pytest.raises(AttributeError):
        cache.hit_count = 10


@pytest.mark.asyncio
async def test_disabled_cache_always_runs_producer():
    cache = TTLCache("query", ttl=60, max_size=3, enabled=False)
    producer = CallCounter()
    await cache.get("k", producer)
    await cache.get("k", producer)
    assert producer.calls == 2
    assert cache.miss_count == 2
    assert len(cache) == 0


@pytest.mark.parametrize("ttl,max_size", [(0, 10), (-1, 10), (60, 0)])
def test_invalid_configuration_is_rejected(ttl, max_size):
    with pytest.raises(ValueError):
        TTLCache("bad", ttl=ttl, max_size=max_size)


class FakeJob:
    def __init__(self):
        self.removed = False

    def remove(self):
        self.removed = True


class FakeScheduler:
    def __init__(self):
        self.jobs = {}

    def add_job(self, func, trigger, **kwargs):
        job = FakeJob()
        self.jobs[kwargs["id"]] = (func, trigger, kwargs, job)
        return job


def test_destroy_cancels_sweep_job_and_clears(cache):
    scheduler = FakeScheduler()
    cache.schedule_sweep(scheduler, interval_seconds=60)
    func, trigger, kwargs, job = scheduler.jobs["cache_sweep_query"]
    assert trigger == "interval"
    assert kwargs["seconds"] == 60
    assert func == cache.sweep

    cache.set("k", 1)
    cache.destroy()
    assert job.removed
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_registry_totals(clock):
    registry = CacheRegistry(
        query=TTLCache("query", 60, 10, clock=clock),
        stats=TTLCache("stats", 30, 10, clock=clock),
        public=TTLCache("public", 120, 10, clock=clock),
    )
    await registry.query.get("a", CallCounter())
    await registry.query.get("a", CallCounter())
    await registry.stats.get("b", CallCounter())
    registry.public.set("c", 1)

    stats = registry.get_stats()
    assert set(stats["individual"]) == {"query", "stats", "public"}
    assert stats["totals"]["entries"] == 3
    assert stats["totals"]["overall_hit_rate"] == round(1 / 3, 4)
    assert registry.get("stats") is registry.stats
    with pytest.raises(KeyError):
        registry.get("missing")
