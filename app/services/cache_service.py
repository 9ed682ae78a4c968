from typing import Any, Dict, List, Optional
from datetime import datetime
import logging

from app.core.cache import CacheRegistry, TTLCache
from app.core.cache_config import INVALIDATION_TARGETS, namespace_of
from app.core.constants import Resource

logger = logging.getLogger(__name__)

class CacheService:

    def __init__(self, caches: CacheRegistry):
        self.caches = caches

    def invalidate_resource(self, resource: Resource) -> Dict[str, int]:
        removed = {}
        for target in INVALIDATION_TARGETS[Resource(resource)]:
            pattern = namespace_of(target)
            removed[target.value] = sum(cache.invalidate_pattern(pattern) for cache in self.caches)
        logger.info(f"Invalidated cache for {Resource(resource).value}: {removed}")
        return removed

    def get_cache_stats(self) -> Dict[str, Any]:
        stats = self.caches.get_stats()
        stats["timestamp"] = datetime.utcnow().isoformat()
        return stats

    def get_entries(self, cache_name: str, limit: int = 10) -> Dict[str, Any]:
        cache = self.caches.get(cache_name)
        return {
            "cache": cache.name,
            "entries": cache.get_entries(limit),
            "total_entries": len(cache),
        }

    def clear(self, cache_name: Optional[str] = None) -> List[str]:
        targets = [self.caches.get(cache_name)] if cache_name else list(self.caches)
        for cache in targets:
            cache.clear()
        cleared = [cache.name for cache in targets]
        logger.info(f"Cleared cache(s): {', '.join(cleared)}")
        return cleared

    def health_check(self) -> bool:
        test_key = "health:check"
        # Scratch cache shaped like the query cache; live entries are left untouched.
        live = self.caches.query
        cache = TTLCache("health", live.ttl, 1, enabled=live.enabled)
        try:
            cache.set(test_key, {"timestamp": datetime.utcnow().isoformat()})
            stored = test_key in cache
            deleted = cache.delete(test_key)
            return (stored and deleted) or not cache.enabled
        except Exception as e:
            logger.error(f"Cache health check failed: {e}")
            return False
