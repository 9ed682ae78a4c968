"""Cache key derivation and invalidation namespaces.

Every cached read is keyed by ``<resource>:<action>:<canonical JSON>`` where the
JSON holds the request parameters and the caller's scope. Writers invalidate
whole resource namespaces with the patterns from ``namespace_of``.
"""
import re
import json
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Pattern, Tuple

from app.core.constants import Resource

_ACTION_RE = re.compile(r"^[a-z][a-z0-9_-]*$")

# What to clear when a resource changes: the resource itself plus every
# namespace whose cached reads aggregate over it.
INVALIDATION_TARGETS: Dict[Resource, Tuple[Resource, ...]] = {
    Resource.USERS: (Resource.USERS, Resource.ANALYTICS),
    Resource.INSTITUTES: (Resource.INSTITUTES, Resource.USERS, Resource.ANALYTICS),
    Resource.VIDEOS: (Resource.VIDEOS, Resource.ANALYTICS),
    Resource.ZONES: (Resource.ZONES, Resource.INSTITUTES, Resource.ANALYTICS),
    Resource.ANALYTICS: (Resource.ANALYTICS,),
}


def operation(resource: Resource, action: str) -> str:
    resource = Resource(resource)
    if not _ACTION_RE.match(action):
        raise ValueError(f"Invalid cache action name: {action!r}")
    return f"{resource.value}:{action}"


def namespace_of(resource: Resource) -> Pattern:
    resource = Resource(resource)
    return re.compile(rf"^{re.escape(resource.value)}:")


def canonicalize(value: Any) -> Any:
    """Deep-sort mappings and drop unset (None) parameters."""
    if isinstance(value, Mapping):
        return {
            str(k): canonicalize(v)
            for k, v in sorted(value.items(), key=lambda item: str(item[0]))
            if v is not None
        }
    if isinstance(value, (list, tuple)):
        return [canonicalize(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    return value


def scope_fingerprint(context) -> Dict[str, Any]:
    return {
        "caller_id": context.caller_id,
        "role": context.role,
        "tenant_id": context.tenant_id,
        "region_id": context.region_id,
    }


def derive_key(op: str, params: Optional[Mapping[str, Any]], context) -> str:
    payload = {
        "params": canonicalize(params or {}),
        "scope": scope_fingerprint(context),
    }
    return f"{op}:{json.dumps(payload, sort_keys=True, separators=(',', ':'), default=str)}"
