import logging
from typing import Optional

from fastapi import HTTPException, status

from app.core.constants import Resource, StatusEnum
from app.core.decorators import cached_read
from app.core.scope import apply_scope
from app.crud.institute import institute as crud_institute
from app.models.institute import Institute
from app.models.user import User
from app.schemas.institute import Institute as InstituteSchema, InstituteCreate, InstituteStats, InstituteUpdate
from app.schemas.response import Page
from app.schemas.scope import ScopeContext
from app.services.base import ScopedService, sanitize_search
from app.utils.permission import permission_helper

logger = logging.getLogger(__name__)


class InstituteService(ScopedService):
    resource = Resource.INSTITUTES
    crud = crud_institute
    label = "Institute"

    async def list_institutes(
        self,
        context: ScopeContext,
        *,
        page: int = 1,
        limit: int = 20,
        zone_id: Optional[int] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Page[InstituteSchema]:
        permission_helper.check_zone_filter(context, zone_id)
        return await self._list_institutes(
            context, page=page, limit=limit, zone_id=zone_id, status=status, search=sanitize_search(search)
        )

    @cached_read("query", Resource.INSTITUTES, "list")
    def _list_institutes(self, context, *, page, limit, zone_id, status, search):
        query = self.scoped_query(context, {"zone_id": zone_id, "status": status})
        query = self.crud.apply_search(query, search)
        items, total = self.crud.paginate(query, page=page, limit=limit, order_by=(Institute.name.asc(), Institute.id.asc()))
        return Page[InstituteSchema].build([InstituteSchema.model_validate(i) for i in items], total, page, limit)

    @cached_read("query", Resource.INSTITUTES, "detail")
    def get_institute(self, context: ScopeContext, *, institute_id: int) -> InstituteSchema:
        return InstituteSchema.model_validate(self.get_scoped_or_404(context, institute_id))

    @cached_read("stats", Resource.INSTITUTES, "stats")
    def get_stats(self, context: ScopeContext) -> InstituteStats:
        query = self.aggregate_query(context)
        by_status = self.count_by(query, Institute.status)
        visible_institutes = [row.id for row in query.with_entities(Institute.id).all()]
        total_users = (
            apply_scope(self.db.query(User), User, Resource.USERS, context)
            .filter(User.institute_id.in_(visible_institutes))
            .count()
        )
        return InstituteStats(
            total_institutes=query.count(),
            active_institutes=by_status.get(StatusEnum.ACTIVE.value, 0),
            by_status=by_status,
            total_users=total_users,
        )

    def create_institute(self, context: ScopeContext, institute_in: InstituteCreate) -> InstituteSchema:
        permission_helper.require_can_manage(context)
        zone_id = permission_helper.get_zone_id_for_operation(self.db, context, institute_in.zone_id)

        if institute_in.code and self.crud.get_by_code(self.db, code=institute_in.code):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="An institute with this code already exists.",
            )

        data = institute_in.model_dump()
        data.update(zone_id=zone_id, status=StatusEnum.ACTIVE.value)
        new_institute = self.crud.create(self.db, obj_in=data)
        self.invalidate()
        logger.info(f"Institute {new_institute.id} created by {context.role} {context.caller_id}")
        return InstituteSchema.model_validate(new_institute)

    def update_institute(self, context: ScopeContext, institute_id: int, institute_in: InstituteUpdate) -> InstituteSchema:
        permission_helper.require_can_manage(context)
        db_institute = self.get_scoped_or_404(context, institute_id)
        updated = self.crud.update(self.db, db_obj=db_institute, obj_in=institute_in)
        self.invalidate()
        return InstituteSchema.model_validate(updated)

    def delete_institute(self, context: ScopeContext, institute_id: int) -> None:
        permission_helper.require_can_manage(context)
        if permission_helper.is_institute_admin(context):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You cannot delete your own institute.")
        db_institute = self.get_scoped_or_404(context, institute_id)
        if self.crud.count_users(self.db, institute_id=institute_id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Institute still has users assigned. Reassign or delete them first.",
            )
        self.crud.delete(self.db, db_obj=db_institute)
        self.invalidate()
        logger.info(f"Institute {institute_id} deleted by {context.role} {context.caller_id}")
