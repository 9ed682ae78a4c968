import re
import logging
from typing import Any, Dict, Mapping, Optional

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from app.core.cache import CacheRegistry
from app.core.constants import MAX_SEARCH_LENGTH, Resource
from app.core.scope import apply_scope, validate_scope
from app.crud.base import CRUDBase
from app.schemas.bulk import BulkResult
from app.schemas.scope import ScopeCheck, ScopeContext
from app.services.cache_service import CacheService
from app.utils.permission import permission_helper

logger = logging.getLogger(__name__)

_UNSAFE_SEARCH_CHARS = re.compile(r"[<>]")


def sanitize_search(search: Optional[str]) -> Optional[str]:
    if search is None:
        return None
    cleaned = _UNSAFE_SEARCH_CHARS.sub("", search.strip())[:MAX_SEARCH_LENGTH].strip()
    return cleaned or None


class ScopedService:
    """Shared plumbing for services over one scoped resource table.

    Reads go through ``scoped_query`` so a row outside the caller's scope looks
    exactly like a missing one. Writes commit first and then clear the
    resource's cache namespaces.
    """
    resource: Resource
    crud: CRUDBase
    label: str = "Record"

    def __init__(self, db: Session, caches: CacheRegistry):
        self.db = db
        self.caches = caches
        self.cache_service = CacheService(caches)

    def scoped_query(self, context: ScopeContext, extra_filters: Optional[Mapping[str, Any]] = None) -> Query:
        return apply_scope(self.crud.query(self.db), self.crud.model, self.resource, context, extra_filters)

    def aggregate_query(self, context: ScopeContext) -> Query:
        return apply_scope(self.db.query(self.crud.model), self.crud.model, self.resource, context)

    def get_scoped_or_404(self, context: ScopeContext, record_id: int):
        record = self.scoped_query(context).filter(self.crud.model.id == record_id).first()
        if record is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{self.label} not found.")
        return record

    def count_by(self, query: Query, column) -> Dict[str, int]:
        rows = query.with_entities(column, func.count(self.crud.model.id)).group_by(column).all()
        return {str(key): count for key, count in rows if key is not None}

    def check_targets(self, context: ScopeContext, ids, allow_partial: bool = False) -> ScopeCheck:
        check = validate_scope(self.db, self.crud.model, self.resource, ids, context)
        return permission_helper.require_full_scope(check, allow_partial=allow_partial)

    def invalidate(self) -> Dict[str, int]:
        return self.cache_service.invalidate_resource(self.resource)

    def bulk_update_status(self, context: ScopeContext, *, ids, is_active: bool, allow_partial: bool = False) -> BulkResult:
        permission_helper.require_can_manage(context)
        check = self.check_targets(context, ids, allow_partial=allow_partial)
        processed = self.crud.bulk_update_status(self.db, ids=check.valid_ids, is_active=is_active)
        if processed:
            self.invalidate()
        logger.info(
            f"{context.role} {context.caller_id} set {processed} {self.resource.value} "
            f"{'active' if is_active else 'inactive'}"
        )
        return BulkResult(
            processed_count=processed,
            valid_ids=check.valid_ids,
            invalid_ids=check.invalid_ids,
            invalid_count=check.invalid_count,
        )
