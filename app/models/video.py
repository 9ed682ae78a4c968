from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base

class Video(Base):
    __tablename__ = "video_content"

    id = Column(Integer, primary_key=True, index=True)
    youtube_video_id = Column(String(20), unique=True, nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=True, index=True)
    difficulty_level = Column(String(20), nullable=False, default="beginner")
    course_order = Column(Integer, nullable=False, default=0)
    duration_seconds = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, default="active", index=True)
    # NULL means a platform-wide library video not owned by an institute.
    institute_id = Column(Integer, ForeignKey("institutes.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    institute = relationship("Institute", back_populates="videos")
