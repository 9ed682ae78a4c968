import re
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from typing import Optional, Dict, List
from datetime import datetime

from app.core.constants import DifficultyEnum, StatusEnum

YOUTUBE_ID_RE = re.compile(r"^[a-zA-Z0-9_-]{11}$")

class VideoBase(BaseModel):
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty_level: DifficultyEnum = DifficultyEnum.BEGINNER
    course_order: int = Field(default=0, ge=0)
    duration_seconds: Optional[int] = Field(default=None, ge=0)

    model_config = ConfigDict(use_enum_values=True, validate_default=True)

class VideoCreate(VideoBase):
    youtube_video_id: str
    institute_id: Optional[int] = None

    @field_validator("youtube_video_id")
    def valid_youtube_id(cls, v):
        if not YOUTUBE_ID_RE.match(v):
            raise ValueError("Invalid YouTube video ID")
        return v

class VideoUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty_level: Optional[DifficultyEnum] = None
    course_order: Optional[int] = Field(default=None, ge=0)
    status: Optional[StatusEnum] = None

    model_config = ConfigDict(use_enum_values=True, validate_default=True)

class Video(VideoBase):
    id: int
    youtube_video_id: str
    status: str
    institute_id: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    @computed_field
    @property
    def embed_url(self) -> str:
        return f"https://www.youtube.com/embed/{self.youtube_video_id}"

    @computed_field
    @property
    def thumbnail_url(self) -> str:
        return f"https://img.youtube.com/vi/{self.youtube_video_id}/hqdefault.jpg"

class VideoStats(BaseModel):
    total_videos: int
    by_category: Dict[str, int]
    by_difficulty: Dict[str, int]
    by_status: Dict[str, int]

class VideoCategories(BaseModel):
    categories: List[str]
