from enum import Enum
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.core.constants import RoleEnum


class ScopeKind(str, Enum):
    GLOBAL = "global"
    REGION = "region"
    TENANT = "tenant"
    GUARDIAN = "guardian"
    LEARNER = "learner"
    NONE = "none"


class CapabilitySet(BaseModel):
    """Permission flags derived from a role."""
    scope_kind: ScopeKind = ScopeKind.NONE
    can_see_all_tenants: bool = False
    can_manage_records: bool = False
    can_filter_by_tenant: bool = False
    can_filter_by_region: bool = False

    model_config = ConfigDict(frozen=True)


_ROLE_SCOPE = {
    RoleEnum.SUPER_ADMIN.value: ScopeKind.GLOBAL,
    RoleEnum.ZONE_MANAGER.value: ScopeKind.REGION,
    RoleEnum.INSTITUTE_ADMIN.value: ScopeKind.TENANT,
    RoleEnum.PARENT.value: ScopeKind.GUARDIAN,
    RoleEnum.STUDENT.value: ScopeKind.LEARNER,
}


def capabilities_of(role: Optional[str]) -> CapabilitySet:
    kind = _ROLE_SCOPE.get(role, ScopeKind.NONE)
    return CapabilitySet(
        scope_kind=kind,
        can_see_all_tenants=kind == ScopeKind.GLOBAL,
        can_manage_records=kind in (ScopeKind.GLOBAL, ScopeKind.REGION, ScopeKind.TENANT),
        can_filter_by_tenant=kind in (ScopeKind.GLOBAL, ScopeKind.REGION, ScopeKind.TENANT),
        can_filter_by_region=kind in (ScopeKind.GLOBAL, ScopeKind.REGION),
    )


class ScopeContext(BaseModel):
    """Authorization attributes of the authenticated caller.

    ``capabilities`` is always computed from ``role`` when the context is built;
    any value passed in for it is discarded.
    """
    caller_id: int
    role: str
    tenant_id: Optional[int] = None
    region_id: Optional[int] = None
    capabilities: CapabilitySet = Field(default_factory=CapabilitySet)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode='before')
    @classmethod
    def derive_capabilities(cls, data: Any):
        if isinstance(data, dict):
            role = data.get("role")
            if isinstance(role, Enum):
                role = role.value
                data = {**data, "role": role}
            data = {**data, "capabilities": capabilities_of(role)}
        return data

    @property
    def is_super_admin(self) -> bool:
        return self.capabilities.scope_kind == ScopeKind.GLOBAL


class ScopeCheck(BaseModel):
    """Partition of requested target IDs into authorized and rejected."""
    valid_ids: List[int] = Field(default_factory=list)
    invalid_ids: List[int] = Field(default_factory=list)

    @property
    def invalid_count(self) -> int:
        return len(self.invalid_ids)

    @property
    def is_complete(self) -> bool:
        return not self.invalid_ids
