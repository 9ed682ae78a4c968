import functools
from typing import Callable

from app.core.cache_config import derive_key, operation
from app.core.constants import Resource
from app.schemas.scope import ScopeContext


def cached_read(cache_name: str, resource: Resource, action: str):
    """Serve a scoped read through one of the service's caches.

    The decorated method is called as ``method(context, **params)``; the key is
    derived from the operation, every keyword parameter and the caller's scope,
    so two callers with different scope never share an entry.
    """
    op = operation(resource, action)

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(self, context: ScopeContext, **params):
            cache = self.caches.get(cache_name)
            cache_key = derive_key(op, params, context)
            return await cache.get(cache_key, lambda: func(self, context, **params))

        return wrapper

    return decorator
