from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from app.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, DifficultyEnum
from app.schemas.bulk import BulkResult, BulkStatusUpdate
from app.schemas.response import APIResponse, Page
from app.schemas.scope import ScopeContext
from app.schemas.video import Video, VideoCategories, VideoCreate, VideoStats, VideoUpdate
from app.services.video import VideoService
from app.utils import deps

router = APIRouter()

@router.get("/", response_model=APIResponse[Page[Video]])
async def list_videos(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    category: Optional[str] = None,
    difficulty: Optional[DifficultyEnum] = None,
    institute_id: Optional[int] = None,
    search: Optional[str] = None,
    context: ScopeContext = Depends(deps.get_scope_context),
    service: VideoService = Depends(deps.get_video_service),
):
    """List videos visible to the caller, ordered by course order then newest first."""
    videos = await service.list_videos(
        context,
        page=page,
        limit=limit,
        category=category,
        difficulty=difficulty.value if difficulty else None,
        institute_id=institute_id,
        search=search,
    )
    return APIResponse(message="Videos retrieved successfully", data=videos)

@router.get("/categories", response_model=APIResponse[VideoCategories])
async def list_categories(
    institute_id: Optional[int] = None,
    context: ScopeContext = Depends(deps.get_scope_context),
    service: VideoService = Depends(deps.get_video_service),
):
    categories = await service.get_categories(context, institute_id=institute_id)
    return APIResponse(message="Video categories retrieved successfully", data=categories)

@router.get("/stats", response_model=APIResponse[VideoStats])
async def get_video_stats(
    context: ScopeContext = Depends(deps.get_scope_context),
    service: VideoService = Depends(deps.get_video_service),
):
    stats = await service.get_stats(context)
    return APIResponse(message="Video statistics retrieved successfully", data=stats)

@router.get("/{video_id}", response_model=APIResponse[Video])
async def get_video(
    video_id: int,
    context: ScopeContext = Depends(deps.get_scope_context),
    service: VideoService = Depends(deps.get_video_service),
):
    video = await service.get_video(context, video_id=video_id)
    return APIResponse(message="Video retrieved successfully", data=video)

@router.post("/", response_model=APIResponse[Video], status_code=status.HTTP_201_CREATED)
def create_video(
    video_in: VideoCreate,
    context: ScopeContext = Depends(deps.get_scope_context),
    service: VideoService = Depends(deps.get_video_service),
):
    """Add a video. Institute admins always add to their own institute."""
    video = service.create_video(context, video_in)
    return APIResponse(message="Video created successfully", data=video)

@router.patch("/bulk-status", response_model=APIResponse[BulkResult])
def bulk_update_video_status(
    bulk_in: BulkStatusUpdate,
    context: ScopeContext = Depends(deps.get_scope_context),
    service: VideoService = Depends(deps.get_video_service),
):
    result = service.bulk_update_status(
        context, ids=bulk_in.ids, is_active=bulk_in.is_active, allow_partial=bulk_in.allow_partial
    )
    return APIResponse(message=f"{result.processed_count} video(s) updated", data=result)

@router.put("/{video_id}", response_model=APIResponse[Video])
def update_video(
    video_id: int,
    video_in: VideoUpdate,
    context: ScopeContext = Depends(deps.get_scope_context),
    service: VideoService = Depends(deps.get_video_service),
):
    video = service.update_video(context, video_id, video_in)
    return APIResponse(message="Video updated successfully", data=video)

@router.delete("/{video_id}", response_model=APIResponse[None])
def delete_video(
    video_id: int,
    context: ScopeContext = Depends(deps.get_scope_context),
    service: VideoService = Depends(deps.get_video_service),
):
    service.delete_video(context, video_id)
    return APIResponse(message="Video deleted successfully")
