import logging
from typing import Optional

from fastapi import HTTPException, status

from app.core.constants import Resource
from app.core.decorators import cached_read
from app.crud.video import video as crud_video
from app.models.video import Video
from app.schemas.response import Page
from app.schemas.scope import ScopeContext
from app.schemas.video import Video as VideoSchema, VideoCategories, VideoCreate, VideoStats, VideoUpdate
from app.services.base import ScopedService, sanitize_search
from app.utils.permission import permission_helper

logger = logging.getLogger(__name__)


class VideoService(ScopedService):
    resource = Resource.VIDEOS
    crud = crud_video
    label = "Video"

    async def list_videos(
        self,
        context: ScopeContext,
        *,
        page: int = 1,
        limit: int = 20,
        category: Optional[str] = None,
        difficulty: Optional[str] = None,
        institute_id: Optional[int] = None,
        search: Optional[str] = None,
    ) -> Page[VideoSchema]:
        permission_helper.check_institute_filter(self.db, context, institute_id)
        return await self._list_videos(
            context,
            page=page,
            limit=limit,
            category=category,
            difficulty=difficulty,
            institute_id=institute_id,
            search=sanitize_search(search),
        )

    @cached_read("query", Resource.VIDEOS, "list")
    def _list_videos(self, context, *, page, limit, category, difficulty, institute_id, search):
        query = self.scoped_query(context, {
            "category": category,
            "difficulty_level": difficulty,
            "institute_id": institute_id,
        })
        query = self.crud.apply_search(query, search)
        items, total = self.crud.paginate(
            query, page=page, limit=limit, order_by=(Video.course_order.asc(), Video.created_at.desc(), Video.id.desc())
        )
        return Page[VideoSchema].build([VideoSchema.model_validate(v) for v in items], total, page, limit)

    @cached_read("query", Resource.VIDEOS, "detail")
    def get_video(self, context: ScopeContext, *, video_id: int) -> VideoSchema:
        return VideoSchema.model_validate(self.get_scoped_or_404(context, video_id))

    async def get_categories(self, context: ScopeContext, *, institute_id: Optional[int] = None) -> VideoCategories:
        permission_helper.check_institute_filter(self.db, context, institute_id)
        return await self._get_categories(context, institute_id=institute_id)

    @cached_read("public", Resource.VIDEOS, "categories")
    def _get_categories(self, context, *, institute_id):
        query = self.scoped_query(context, {"institute_id": institute_id})
        rows = (
            query.with_entities(Video.category)
            .filter(Video.category.isnot(None))
            .distinct()
            .order_by(Video.category)
            .all()
        )
        return VideoCategories(categories=[row.category for row in rows])

    @cached_read("stats", Resource.VIDEOS, "stats")
    def get_stats(self, context: ScopeContext) -> VideoStats:
        query = self.aggregate_query(context)
        return VideoStats(
            total_videos=query.count(),
            by_category=self.count_by(query, Video.category),
            by_difficulty=self.count_by(query, Video.difficulty_level),
            by_status=self.count_by(query, Video.status),
        )

    def _target_institute(self, context: ScopeContext, institute_id: Optional[int]) -> Optional[int]:
        permission_helper.require_can_manage(context)
        # Only the top role may add to the shared platform library.
        if permission_helper.is_super_admin(context) and institute_id is None:
            return None
        return permission_helper.get_institute_id_for_operation(self.db, context, institute_id)

    def create_video(self, context: ScopeContext, video_in: VideoCreate) -> VideoSchema:
        institute_id = self._target_institute(context, video_in.institute_id)

        if self.crud.get_by_youtube_id(self.db, youtube_video_id=video_in.youtube_video_id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A video with this YouTube ID already exists.",
            )

        data = video_in.model_dump()
        data["institute_id"] = institute_id
        new_video = self.crud.create(self.db, obj_in=data)
        self.invalidate()
        logger.info(f"Video {new_video.id} created by {context.role} {context.caller_id}")
        return VideoSchema.model_validate(new_video)

    def update_video(self, context: ScopeContext, video_id: int, video_in: VideoUpdate) -> VideoSchema:
        permission_helper.require_can_manage(context)
        db_video = self.get_scoped_or_404(context, video_id)
        updated = self.crud.update(self.db, db_obj=db_video, obj_in=video_in)
        self.invalidate()
        return VideoSchema.model_validate(updated)

    def delete_video(self, context: ScopeContext, video_id: int) -> None:
        permission_helper.require_can_manage(context)
        db_video = self.get_scoped_or_404(context, video_id)
        self.crud.delete(self.db, db_obj=db_video)
        self.invalidate()
        logger.info(f"Video {video_id} deleted by {context.role} {context.caller_id}")
