from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from app.core.constants import Resource
from app.schemas.response import APIResponse
from app.schemas.scope import ScopeContext
from app.services.cache_service import CacheService
from app.utils import deps

router = APIRouter()

def _unknown_cache(cache_name: str, cache_service: CacheService) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail=f"Unknown cache '{cache_name}'. Available: {', '.join(cache_service.caches.names())}"
    )

@router.get("/cache/stats")
def get_cache_stats(
    cache_service: CacheService = Depends(deps.get_cache_service),
    current_user: ScopeContext = Depends(deps.get_current_super_admin)
) -> APIResponse:
    """Per-cache statistics with totals and the overall hit rate"""
    return APIResponse(message="Cache statistics retrieved", data=cache_service.get_cache_stats())

@router.get("/cache/{cache_name}/entries")
def get_cache_entries(
    cache_name: str,
    limit: int = Query(10, ge=1, le=100),
    cache_service: CacheService = Depends(deps.get_cache_service),
    current_user: ScopeContext = Depends(deps.get_current_super_admin)
) -> APIResponse:
    try:
        entries = cache_service.get_entries(cache_name, limit)
    except KeyError:
        raise _unknown_cache(cache_name, cache_service)
    return APIResponse(message="Cache entries retrieved", data=entries)

@router.post("/cache/clear")
def clear_cache(
    cache_name: Optional[str] = None,
    cache_service: CacheService = Depends(deps.get_cache_service),
    current_user: ScopeContext = Depends(deps.get_current_super_admin)
) -> APIResponse:
    """Clear one cache by name, or every cache"""
    try:
        cleared = cache_service.clear(cache_name)
    except KeyError:
        raise _unknown_cache(cache_name, cache_service)
    return APIResponse(message=f"Cleared cache(s): {', '.join(cleared)}", data={"cleared": cleared})

@router.post("/cache/invalidate/{resource}")
def invalidate_resource_cache(
    resource: Resource,
    cache_service: CacheService = Depends(deps.get_cache_service),
    current_user: ScopeContext = Depends(deps.get_current_super_admin)
) -> APIResponse:
    """Invalidate a resource namespace and the namespaces that aggregate over it"""
    removed = cache_service.invalidate_resource(resource)
    return APIResponse(message=f"Cache invalidated for {resource.value}", data={"removed": removed})

@router.get("/cache/health")
def cache_health_check(
    cache_service: CacheService = Depends(deps.get_cache_service),
    current_user: ScopeContext = Depends(deps.get_current_super_admin)
) -> APIResponse:
    is_healthy = cache_service.health_check()
    stats = cache_service.get_cache_stats()
    return APIResponse(
        message="Cache health check completed",
        data={
            "healthy": is_healthy,
            "entries": stats["totals"]["entries"],
            "overall_hit_rate": stats["totals"]["overall_hit_rate"],
        }
    )
