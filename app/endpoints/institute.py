from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from app.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, StatusEnum
from app.schemas.bulk import BulkResult, BulkStatusUpdate
from app.schemas.institute import Institute, InstituteCreate, InstituteStats, InstituteUpdate
from app.schemas.response import APIResponse, Page
from app.schemas.scope import ScopeContext
from app.services.institute import InstituteService
from app.utils import deps

router = APIRouter()

@router.get("/", response_model=APIResponse[Page[Institute]])
async def list_institutes(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    zone_id: Optional[int] = None,
    status: Optional[StatusEnum] = None,
    search: Optional[str] = None,
    context: ScopeContext = Depends(deps.get_scope_context),
    service: InstituteService = Depends(deps.get_institute_service),
):
    institutes = await service.list_institutes(
        context,
        page=page,
        limit=limit,
        zone_id=zone_id,
        status=status.value if status else None,
        search=search,
    )
    return APIResponse(message="Institutes retrieved successfully", data=institutes)

@router.get("/stats", response_model=APIResponse[InstituteStats])
async def get_institute_stats(
    context: ScopeContext = Depends(deps.get_scope_context),
    service: InstituteService = Depends(deps.get_institute_service),
):
    stats = await service.get_stats(context)
    return APIResponse(message="Institute statistics retrieved successfully", data=stats)

@router.get("/{institute_id}", response_model=APIResponse[Institute])
async def get_institute(
    institute_id: int,
    context: ScopeContext = Depends(deps.get_scope_context),
    service: InstituteService = Depends(deps.get_institute_service),
):
    institute = await service.get_institute(context, institute_id=institute_id)
    return APIResponse(message="Institute retrieved successfully", data=institute)

@router.post("/", response_model=APIResponse[Institute], status_code=status.HTTP_201_CREATED)
def create_institute(
    institute_in: InstituteCreate,
    context: ScopeContext = Depends(deps.get_scope_context),
    service: InstituteService = Depends(deps.get_institute_service),
):
    """Create an institute. Zone managers always create inside their own zone."""
    institute = service.create_institute(context, institute_in)
    return APIResponse(message="Institute created successfully", data=institute)

@router.patch("/bulk-status", response_model=APIResponse[BulkResult])
def bulk_update_institute_status(
    bulk_in: BulkStatusUpdate,
    context: ScopeContext = Depends(deps.get_scope_context),
    service: InstituteService = Depends(deps.get_institute_service),
):
    result = service.bulk_update_status(
        context, ids=bulk_in.ids, is_active=bulk_in.is_active, allow_partial=bulk_in.allow_partial
    )
    return APIResponse(message=f"{result.processed_count} institute(s) updated", data=result)

@router.put("/{institute_id}", response_model=APIResponse[Institute])
def update_institute(
    institute_id: int,
    institute_in: InstituteUpdate,
    context: ScopeContext = Depends(deps.get_scope_context),
    service: InstituteService = Depends(deps.get_institute_service),
):
    institute = service.update_institute(context, institute_id, institute_in)
    return APIResponse(message="Institute updated successfully", data=institute)

@router.delete("/{institute_id}", response_model=APIResponse[None])
def delete_institute(
    institute_id: int,
    context: ScopeContext = Depends(deps.get_scope_context),
    service: InstituteService = Depends(deps.get_institute_service),
):
    service.delete_institute(context, institute_id)
    return APIResponse(message="Institute deleted successfully")
