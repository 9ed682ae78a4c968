import re
import time
import inspect
import threading
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional, Pattern, Union

from apscheduler.jobstores.base import JobLookupError

from app.core.config import settings

logger = logging.getLogger(__name__)

# Rough per-entry footprint used for the memory estimate in get_stats().
AVG_ENTRY_BYTES = 1024

Producer = Callable[[], Union[Any, Awaitable[Any]]]


@dataclass
class CacheEntry:
    value: Any
    created_at: float
    access_count: int = field(default=1)

    def age(self, now: float) -> float:
        return now - self.created_at


class TTLCache:
    """Bounded in-process memo of read results.

    Entries expire ``ttl`` seconds after they were stored. Expired entries are
    never served; they are removed lazily on lookup and by ``sweep()``, which the
    application scheduler runs on a fixed interval. When the cache is full the
    entry with the oldest ``created_at`` is evicted before inserting.
    """

    def __init__(
        self,
        name: str,
        ttl: float,
        max_size: int,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        if max_size < 1:
            raise ValueError("max_size must be at least 1")

        self.name = name
        self.ttl = ttl
        self.max_size = max_size
        self.enabled = enabled
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._hit_count = 0
        self._miss_count = 0
        # Bumped by every removal; a producer result is only stored if no
        # removal happened while it was being computed.
        self._generation = 0
        self._sweep_job = None

        logger.info(f"Cache '{name}' initialized: TTL={ttl}s, MaxSize={max_size}")

    @property
    def hit_count(self) -> int:
        return self._hit_count

    @property
    def miss_count(self) -> int:
        return self._miss_count

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not self._is_expired(entry, self._clock())

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return entry.age(now) >= self.ttl

    def _lookup(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._miss_count += 1
                return None
            if self._is_expired(entry, self._clock()):
                del self._entries[key]
                self._miss_count += 1
                return None
            self._hit_count += 1
            entry.access_count += 1
            return entry

    async def get(self, key: str, producer: Producer) -> Any:
        if not self.enabled:
            with self._lock:
                self._miss_count += 1
            return await _resolve(producer)

        entry = self._lookup(key)
        if entry is not None:
            logger.debug(f"Cache HIT [{self.name}]: {key[:50]}")
            return entry.value

        logger.debug(f"Cache MISS [{self.name}]: {key[:50]}")
        generation = self._generation
        value = await _resolve(producer)
        with self._lock:
            if generation != self._generation:
                logger.debug(f"Skipped storing [{self.name}] entry invalidated while computing: {key[:50]}")
                return value
            self._store(key, value)
        return value

    def set(self, key: str, value: Any) -> None:
        if not self.enabled:
            return
        with self._lock:
            self._store(key, value)

    def _store(self, key: str, value: Any) -> None:
        if key not in self._entries and len(self._entries) >= self.max_size:
            self._evict_oldest()
        self._entries[key] = CacheEntry(value=value, created_at=self._clock())

    def _evict_oldest(self) -> None:
        if not self._entries:
            return
        oldest_key = min(self._entries, key=lambda k: self._entries[k].created_at)
        del self._entries[oldest_key]
        logger.debug(f"Evicted oldest entry from [{self.name}]: {oldest_key[:50]}")

    def delete(self, key: str) -> bool:
        with self._lock:
            self._generation += 1
            deleted = self._entries.pop(key, None) is not None
        if deleted:
            logger.debug(f"Cache entry deleted [{self.name}]: {key[:50]}")
        return deleted

    def invalidate_pattern(self, pattern: Union[str, Pattern]) -> int:
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        with self._lock:
            self._generation += 1
            keys_to_delete = [key for key in self._entries if regex.search(key)]
            for key in keys_to_delete:
                del self._entries[key]

        if keys_to_delete:
            logger.info(f"Invalidated {len(keys_to_delete)} [{self.name}] entries matching {regex.pattern}")
        return len(keys_to_delete)

    def clear(self) -> None:
        with self._lock:
            size = len(self._entries)
            self._generation += 1
            self._entries.clear()
            self._hit_count = 0
            self._miss_count = 0
        logger.info(f"Cache [{self.name}] cleared: {size} entries removed")

    def sweep(self) -> int:
        now = self._clock()
        with self._lock:
            expired_keys = [key for key, entry in self._entries.items() if self._is_expired(entry, now)]
            for key in expired_keys:
                del self._entries[key]

        if expired_keys:
            logger.debug(f"Swept {len(expired_keys)} expired entries from [{self.name}]")
        return len(expired_keys)

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            size = len(self._entries)
            hits = self._hit_count
            misses = self._miss_count
        total = hits + misses
        return {
            "name": self.name,
            "size": size,
            "max_size": self.max_size,
            "hit_count": hits,
            "miss_count": misses,
            "hit_rate": round(hits / total, 4) if total else 0.0,
            "ttl": self.ttl,
            "estimated_memory": round(size * AVG_ENTRY_BYTES / 1024 / 1024, 2),
        }

    def get_entries(self, limit: int = 10) -> List[Dict[str, Any]]:
        now = self._clock()
        wall_now = datetime.utcnow()
        with self._lock:
            snapshot = list(self._entries.items())[:limit]

        entries = []
        for key, entry in snapshot:
            age = entry.age(now)
            entries.append({
                "key": key[:100] + ("..." if len(key) > 100 else ""),
                "created_at": (wall_now - timedelta(seconds=age)).isoformat(),
                "access_count": entry.access_count,
                "age_seconds": round(age),
            })
        return entries

    def schedule_sweep(self, scheduler, interval_seconds: int) -> None:
        self._sweep_job = scheduler.add_job(
            self.sweep,
            "interval",
            seconds=interval_seconds,
            id=f"cache_sweep_{self.name}",
            name=f"Sweep expired entries from '{self.name}' cache",
            replace_existing=True,
        )

    def destroy(self) -> None:
        if self._sweep_job is not None:
            try:
                self._sweep_job.remove()
            except JobLookupError as e:
                logger.warning(f"Failed to remove sweep job for [{self.name}]: {e}")
            self._sweep_job = None
        self.clear()
        logger.info(f"Cache [{self.name}] destroyed")


async def _resolve(producer: Producer) -> Any:
    result = producer()
    if inspect.isawaitable(result):
        result = await result
    return result


class CacheRegistry:
    """The application's cache instances, one per logical namespace."""

    def __init__(self, query: TTLCache, stats: TTLCache, public: TTLCache):
        self.query = query
        self.stats = stats
        self.public = public

    def __iter__(self) -> Iterator[TTLCache]:
        return iter((self.query, self.stats, self.public))

    def names(self) -> List[str]:
        return [cache.name for cache in self]

    def get(self, name: str) -> TTLCache:
        for cache in self:
            if cache.name == name:
                return cache
        raise KeyError(name)

    def schedule_sweeps(self, scheduler, interval_seconds: int) -> None:
        for cache in self:
            cache.schedule_sweep(scheduler, interval_seconds)

    def get_stats(self) -> Dict[str, Any]:
        individual = {cache.name: cache.get_stats() for cache in self}
        hits = sum(s["hit_count"] for s in individual.values())
        misses = sum(s["miss_count"] for s in individual.values())
        return {
            "individual": individual,
            "totals": {
                "entries": sum(s["size"] for s in individual.values()),
                "estimated_memory": round(sum(s["estimated_memory"] for s in individual.values()), 2),
                "overall_hit_rate": round(hits / (hits + misses), 4) if hits + misses else 0.0,
            },
        }

    def destroy(self) -> None:
        for cache in self:
            cache.destroy()


def build_cache_registry(clock: Callable[[], float] = time.monotonic) -> CacheRegistry:
    enabled = settings.CACHE_ENABLED
    return CacheRegistry(
        query=TTLCache("query", settings.QUERY_CACHE_TTL, settings.QUERY_CACHE_MAX_SIZE, enabled=enabled, clock=clock),
        stats=TTLCache("stats", settings.STATS_CACHE_TTL, settings.STATS_CACHE_MAX_SIZE, enabled=enabled, clock=clock),
        public=TTLCache("public", settings.PUBLIC_CACHE_TTL, settings.PUBLIC_CACHE_MAX_SIZE, enabled=enabled, clock=clock),
    )
