import logging
from typing import Optional

from fastapi import HTTPException, status

from app.core.constants import Resource, RoleEnum, StatusEnum
from app.core.decorators import cached_read
from app.core.scope import validate_scope
from app.crud.user import user as crud_user
from app.models.institute import Institute
from app.models.user import User
from app.schemas.bulk import BulkResult
from app.schemas.response import Page
from app.schemas.scope import ScopeContext, ScopeKind
from app.schemas.user import User as UserSchema, UserCreate, UserStats, UserUpdate
from app.services.base import ScopedService, sanitize_search
from app.utils.permission import permission_helper

logger = logging.getLogger(__name__)

_INSTITUTE_ROLES = {RoleEnum.INSTITUTE_ADMIN.value, RoleEnum.PARENT.value, RoleEnum.STUDENT.value}

# Roles each scope may hand out when creating accounts.
CREATABLE_ROLES = {
    ScopeKind.GLOBAL: {role.value for role in RoleEnum},
    ScopeKind.REGION: _INSTITUTE_ROLES,
    ScopeKind.TENANT: _INSTITUTE_ROLES,
}


class UserService(ScopedService):
    resource = Resource.USERS
    crud = crud_user
    label = "User"

    async def list_users(
        self,
        context: ScopeContext,
        *,
        page: int = 1,
        limit: int = 20,
        role: Optional[str] = None,
        status: Optional[str] = None,
        institute_id: Optional[int] = None,
        search: Optional[str] = None,
    ) -> Page[UserSchema]:
        permission_helper.check_institute_filter(self.db, context, institute_id)
        return await self._list_users(
            context,
            page=page,
            limit=limit,
            role=role,
            status=status,
            institute_id=institute_id,
            search=sanitize_search(search),
        )

    @cached_read("query", Resource.USERS, "list")
    def _list_users(self, context, *, page, limit, role, status, institute_id, search):
        query = self.scoped_query(context, {"role": role, "status": status, "institute_id": institute_id})
        query = self.crud.apply_search(query, search)
        items, total = self.crud.paginate(query, page=page, limit=limit, order_by=(User.created_at.desc(), User.id.desc()))
        return Page[UserSchema].build([UserSchema.model_validate(u) for u in items], total, page, limit)

    @cached_read("query", Resource.USERS, "detail")
    def get_user(self, context: ScopeContext, *, user_id: int) -> UserSchema:
        return UserSchema.model_validate(self.get_scoped_or_404(context, user_id))

    @cached_read("stats", Resource.USERS, "stats")
    def get_stats(self, context: ScopeContext) -> UserStats:
        query = self.aggregate_query(context)
        by_status = self.count_by(query, User.status)
        return UserStats(
            total_users=query.count(),
            active_users=by_status.get(StatusEnum.ACTIVE.value, 0),
            by_role=self.count_by(query, User.role),
            by_status=by_status,
        )

    def _resolve_placement(self, context: ScopeContext, user_in: UserCreate, role: str):
        """Work out (institute_id, zone_id) for a new account of ``role``."""
        if role == RoleEnum.SUPER_ADMIN.value:
            return None, None
        if role == RoleEnum.ZONE_MANAGER.value:
            return None, permission_helper.get_zone_id_for_operation(self.db, context, user_in.zone_id)

        institute_id = permission_helper.get_institute_id_for_operation(self.db, context, user_in.institute_id)
        zone_id = self.db.query(Institute.zone_id).filter(Institute.id == institute_id).scalar()
        return institute_id, zone_id

    def _resolve_parent(self, context: ScopeContext, parent_id: Optional[int], institute_id: Optional[int]) -> Optional[int]:
        if parent_id is None:
            return None
        check = validate_scope(self.db, User, Resource.USERS, [parent_id], context)
        parent = self.crud.get(self.db, id=parent_id) if check.is_complete else None
        if parent is None or parent.role != RoleEnum.PARENT.value or parent.institute_id != institute_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="parent_id must reference a parent account in the same institute.",
            )
        return parent.id

    def create_user(self, context: ScopeContext, user_in: UserCreate) -> UserSchema:
        permission_helper.require_can_manage(context)
        role = RoleEnum(user_in.role).value
        if role not in CREATABLE_ROLES.get(context.capabilities.scope_kind, set()):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"You do not have permission to create '{role}' accounts.",
            )

        if self.crud.get_by_email(self.db, email=user_in.email):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A user with this email already exists.",
            )

        institute_id, zone_id = self._resolve_placement(context, user_in, role)
        parent_id = self._resolve_parent(context, user_in.parent_id, institute_id)

        data = user_in.model_dump(exclude={"role", "institute_id", "zone_id", "parent_id"})
        data.update(
            email=user_in.email.lower(),
            role=role,
            institute_id=institute_id,
            zone_id=zone_id,
            parent_id=parent_id,
            status=StatusEnum.ACTIVE.value,
        )
        new_user = self.crud.create(self.db, obj_in=data)
        self.invalidate()
        logger.info(f"User {new_user.id} ({role}) created by {context.role} {context.caller_id}")
        return UserSchema.model_validate(new_user)

    def update_user(self, context: ScopeContext, user_id: int, user_in: UserUpdate) -> UserSchema:
        permission_helper.require_can_manage(context)
        db_user = self.get_scoped_or_404(context, user_id)
        if user_id == context.caller_id and user_in.status == StatusEnum.INACTIVE.value:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot deactivate your own account.")
        updated = self.crud.update(self.db, db_obj=db_user, obj_in=user_in)
        self.invalidate()
        return UserSchema.model_validate(updated)

    def bulk_update_status(self, context: ScopeContext, *, ids, is_active: bool, allow_partial: bool = False) -> BulkResult:
        if not is_active and context.caller_id in ids:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot deactivate your own account.")
        return super().bulk_update_status(context, ids=ids, is_active=is_active, allow_partial=allow_partial)

    def _detach_children(self, parent_ids) -> None:
        self.db.query(User).filter(User.parent_id.in_(list(parent_ids))).update(
            {"parent_id": None}, synchronize_session=False
        )

    def delete_user(self, context: ScopeContext, user_id: int) -> None:
        permission_helper.require_can_manage(context)
        if user_id == context.caller_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account.")
        db_user = self.get_scoped_or_404(context, user_id)
        self._detach_children([db_user.id])
        self.crud.delete(self.db, db_obj=db_user)
        self.invalidate()
        logger.info(f"User {user_id} deleted by {context.role} {context.caller_id}")

    def bulk_delete(self, context: ScopeContext, *, ids, allow_partial: bool = False) -> BulkResult:
        permission_helper.require_can_manage(context)
        if context.caller_id in ids:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account.")
        check = self.check_targets(context, ids, allow_partial=allow_partial)
        if check.valid_ids:
            self._detach_children(check.valid_ids)
        processed = self.crud.bulk_delete(self.db, ids=check.valid_ids)
        if processed:
            self.invalidate()
        logger.info(f"{context.role} {context.caller_id} deleted {processed} users")
        return BulkResult(
            processed_count=processed,
            valid_ids=check.valid_ids,
            invalid_ids=check.invalid_ids,
            invalid_count=check.invalid_count,
        )
