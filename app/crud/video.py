from typing import Optional
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.video import Video
from app.schemas.video import VideoCreate, VideoUpdate


class CRUDVideo(CRUDBase[Video, VideoCreate, VideoUpdate]):
    search_fields = ("title", "description")

    def get_by_youtube_id(self, db: Session, *, youtube_video_id: str) -> Optional[Video]:
        return db.query(Video).filter(Video.youtube_video_id == youtube_video_id).first()


video = CRUDVideo(Video)
