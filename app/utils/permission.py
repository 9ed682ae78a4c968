from typing import Optional
from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.models.institute import Institute
from app.models.zone import Zone
from app.core.exceptions import ScopeForbidden, PartialAuthorization
from app.schemas.scope import ScopeContext, ScopeKind, ScopeCheck


class PermissionHelper:
    """Boundary checks on explicit filters and write targets.

    These run before ``apply_scope``/``validate_scope``: scoping only narrows a
    query, it never re-validates an ID the caller named explicitly.
    """

    @staticmethod
    def is_super_admin(context: ScopeContext) -> bool:
        return context.capabilities.scope_kind == ScopeKind.GLOBAL

    @staticmethod
    def is_zone_manager(context: ScopeContext) -> bool:
        return context.capabilities.scope_kind == ScopeKind.REGION

    @staticmethod
    def is_institute_admin(context: ScopeContext) -> bool:
        return context.capabilities.scope_kind == ScopeKind.TENANT

    @staticmethod
    def require_super_admin(context: ScopeContext):
        if not PermissionHelper.is_super_admin(context):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Super admin access required.")

    @staticmethod
    def require_can_manage(context: ScopeContext, error_message: str = "You do not have permission to modify records."):
        if not context.capabilities.can_manage_records:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=error_message)

    @staticmethod
    def check_institute_filter(db: Session, context: ScopeContext, institute_id: Optional[int]):
        if institute_id is None:
            return
        if not context.capabilities.can_filter_by_tenant:
            raise ScopeForbidden("Insufficient permissions to filter by institute.")
        if PermissionHelper.is_super_admin(context):
            return
        if PermissionHelper.is_zone_manager(context):
            institute = db.query(Institute.zone_id).filter(Institute.id == institute_id).first()
            if institute is None or context.region_id is None or institute.zone_id != context.region_id:
                raise ScopeForbidden("Institute is not in your zone.")
            return
        if institute_id != context.tenant_id:
            raise ScopeForbidden("You can only filter by your own institute.")

    @staticmethod
    def check_zone_filter(context: ScopeContext, zone_id: Optional[int]):
        if zone_id is None:
            return
        if not context.capabilities.can_filter_by_region:
            raise ScopeForbidden("Insufficient permissions to filter by zone.")
        if PermissionHelper.is_zone_manager(context) and zone_id != context.region_id:
            raise ScopeForbidden("Cannot filter by zones outside your scope.")

    @staticmethod
    def get_institute_id_for_operation(db: Session, context: ScopeContext, provided_institute_id: Optional[int]) -> int:
        PermissionHelper.require_can_manage(context)

        if PermissionHelper.is_institute_admin(context):
            if context.tenant_id is None:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="User must be assigned to an institute to perform this operation."
                )
            if provided_institute_id and provided_institute_id != context.tenant_id:
                raise ScopeForbidden("You can only perform operations for your assigned institute.")
            return context.tenant_id

        if not provided_institute_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="institute_id is required.")

        institute = db.query(Institute).filter(Institute.id == provided_institute_id).first()
        if not institute:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Institute not found.")
        if PermissionHelper.is_zone_manager(context) and institute.zone_id != context.region_id:
            raise ScopeForbidden("Institute is not in your zone.")
        return institute.id

    @staticmethod
    def get_zone_id_for_operation(db: Session, context: ScopeContext, provided_zone_id: Optional[int]) -> int:
        if PermissionHelper.is_zone_manager(context):
            if context.region_id is None:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="User must be assigned to a zone to perform this operation."
                )
            if provided_zone_id and provided_zone_id != context.region_id:
                raise ScopeForbidden("You can only perform operations for your assigned zone.")
            return context.region_id

        if not PermissionHelper.is_super_admin(context):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not have permission to manage institutes.")
        if not provided_zone_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="zone_id is required.")
        if not db.query(Zone.id).filter(Zone.id == provided_zone_id).first():
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Zone not found.")
        return provided_zone_id

    @staticmethod
    def require_full_scope(check: ScopeCheck, allow_partial: bool = False) -> ScopeCheck:
        if check.invalid_ids and not allow_partial:
            raise PartialAuthorization(valid_ids=check.valid_ids, invalid_ids=check.invalid_ids)
        return check


permission_helper = PermissionHelper()
