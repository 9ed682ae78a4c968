from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from app.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, RoleEnum, StatusEnum
from app.schemas.bulk import BulkRequest, BulkResult, BulkStatusUpdate
from app.schemas.response import APIResponse, Page
from app.schemas.scope import ScopeContext
from app.schemas.user import User, UserCreate, UserStats, UserUpdate
from app.services.user import UserService
from app.utils import deps

router = APIRouter()

@router.get("/", response_model=APIResponse[Page[User]])
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    role: Optional[RoleEnum] = None,
    status: Optional[StatusEnum] = None,
    institute_id: Optional[int] = None,
    search: Optional[str] = None,
    context: ScopeContext = Depends(deps.get_scope_context),
    service: UserService = Depends(deps.get_user_service),
):
    """List users visible to the caller, newest first."""
    users = await service.list_users(
        context,
        page=page,
        limit=limit,
        role=role.value if role else None,
        status=status.value if status else None,
        institute_id=institute_id,
        search=search,
    )
    return APIResponse(message="Users retrieved successfully", data=users)

@router.get("/stats", response_model=APIResponse[UserStats])
async def get_user_stats(
    context: ScopeContext = Depends(deps.get_scope_context),
    service: UserService = Depends(deps.get_user_service),
):
    stats = await service.get_stats(context)
    return APIResponse(message="User statistics retrieved successfully", data=stats)

@router.get("/{user_id}", response_model=APIResponse[User])
async def get_user(
    user_id: int,
    context: ScopeContext = Depends(deps.get_scope_context),
    service: UserService = Depends(deps.get_user_service),
):
    user = await service.get_user(context, user_id=user_id)
    return APIResponse(message="User retrieved successfully", data=user)

@router.post("/", response_model=APIResponse[User], status_code=status.HTTP_201_CREATED)
def create_user(
    user_in: UserCreate,
    context: ScopeContext = Depends(deps.get_scope_context),
    service: UserService = Depends(deps.get_user_service),
):
    user = service.create_user(context, user_in)
    return APIResponse(message="User created successfully", data=user)

@router.patch("/bulk-status", response_model=APIResponse[BulkResult])
def bulk_update_user_status(
    bulk_in: BulkStatusUpdate,
    context: ScopeContext = Depends(deps.get_scope_context),
    service: UserService = Depends(deps.get_user_service),
):
    result = service.bulk_update_status(
        context, ids=bulk_in.ids, is_active=bulk_in.is_active, allow_partial=bulk_in.allow_partial
    )
    return APIResponse(message=f"{result.processed_count} user(s) updated", data=result)

@router.post("/bulk-delete", response_model=APIResponse[BulkResult])
def bulk_delete_users(
    bulk_in: BulkRequest,
    context: ScopeContext = Depends(deps.get_scope_context),
    service: UserService = Depends(deps.get_user_service),
):
    result = service.bulk_delete(context, ids=bulk_in.ids, allow_partial=bulk_in.allow_partial)
    return APIResponse(message=f"{result.processed_count} user(s) deleted", data=result)

@router.put("/{user_id}", response_model=APIResponse[User])
def update_user(
    user_id: int,
    user_in: UserUpdate,
    context: ScopeContext = Depends(deps.get_scope_context),
    service: UserService = Depends(deps.get_user_service),
):
    user = service.update_user(context, user_id, user_in)
    return APIResponse(message="User updated successfully", data=user)

@router.delete("/{user_id}", response_model=APIResponse[None])
def delete_user(
    user_id: int,
    context: ScopeContext = Depends(deps.get_scope_context),
    service: UserService = Depends(deps.get_user_service),
):
    service.delete_user(context, user_id)
    return APIResponse(message="User deleted successfully")
